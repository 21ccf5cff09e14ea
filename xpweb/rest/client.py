"""HTTP client for the simulator REST API."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Optional
from urllib.parse import urlencode, urljoin

import requests
from pydantic import ValidationError
from requests import Response

from xpweb.cache import EntityCache
from xpweb.config import ClientSettings
from xpweb.errors import ApiError, RestRequestError, UnknownEntity
from xpweb.models import Capabilities, Command, Dataref, DatarefValue

LOGGER = logging.getLogger(__name__)


class RestClient:
    """Wraps the REST endpoints and keeps the command/dataref caches filled.

    Name-based calls need the matching cache loaded first via
    :meth:`load_commands` / :meth:`load_datarefs`; reload again only after
    the simulator restarts.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        commands: Optional[EntityCache[Command]] = None,
        datarefs: Optional[EntityCache[Dataref]] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self.commands: EntityCache[Command] = commands if commands is not None else EntityCache("command")
        self.datarefs: EntityCache[Dataref] = datarefs if datarefs is not None else EntityCache("dataref")

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        commands: Optional[EntityCache[Command]] = None,
        datarefs: Optional[EntityCache[Dataref]] = None,
    ) -> RestClient:
        return cls(
            base_url=settings.rest_origin(),
            timeout_seconds=float(settings.request_timeout_seconds),
            commands=commands,
            datarefs=datarefs,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_capabilities(self) -> Capabilities:
        return self._validate(Capabilities, self._request_json("GET", "/api/capabilities"))

    # Commands

    def list_commands(self) -> list[Command]:
        data = self._request_json("GET", "/api/v2/commands").get("data") or []
        return [self._validate(Command, item) for item in data]

    def count_commands(self) -> int:
        return int(self._request_json("GET", "/api/v2/commands/count").get("data") or 0)

    def load_commands(self) -> None:
        self.commands.reload(self.list_commands())

    def get_command_by_name(self, name: str) -> Command:
        command = self.commands.lookup_by_name(name)
        if command is None:
            raise UnknownEntity("command", name)
        return command

    def activate_command(self, name: str, duration: float) -> None:
        """Run a command for ``duration`` seconds; zero triggers it on and off at once."""

        command = self.get_command_by_name(name)
        self._request("POST", f"/api/v2/command/{command.id}/activate", json_body={"duration": duration})

    # Datarefs

    def list_datarefs(self) -> list[Dataref]:
        data = self._request_json("GET", "/api/v2/datarefs").get("data") or []
        return [self._validate(Dataref, item) for item in data]

    def count_datarefs(self) -> int:
        return int(self._request_json("GET", "/api/v2/datarefs/count").get("data") or 0)

    def load_datarefs(self) -> None:
        self.datarefs.reload(self.list_datarefs())

    def get_dataref_by_name(self, name: str) -> Dataref:
        dataref = self.datarefs.lookup_by_name(name)
        if dataref is None:
            raise UnknownEntity("dataref", name)
        return dataref

    def get_dataref_value(self, name: str) -> DatarefValue:
        dataref = self.get_dataref_by_name(name)
        body = self._request_json("GET", f"/api/v2/datarefs/{dataref.id}/value")
        return DatarefValue(value=body.get("data"), value_type=dataref.value_type, dataref=dataref)

    def set_dataref_value(self, name: str, value: Any) -> None:
        dataref = self.get_dataref_by_name(name)
        self._request(
            "PATCH",
            f"/api/v2/datarefs/{dataref.id}/value",
            json_body=encode_dataref_value(value),
        )

    def set_dataref_element_value(self, name: str, index: int, value: Any) -> None:
        """Set one element of an array dataref."""

        dataref = self.get_dataref_by_name(name)
        self._request(
            "PATCH",
            f"/api/v2/datarefs/{dataref.id}/value",
            params={"index": index},
            json_body=encode_dataref_value(value),
        )

    # Plumbing

    @staticmethod
    def _validate(model, payload: Any):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RestRequestError(f"Unexpected {model.__name__} payload: {exc}") from exc

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = self._request(method, path, params=params, json_body=json_body)
        if not response.content:
            return {}
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise RestRequestError("REST API returned invalid JSON.") from exc
        if not isinstance(body, dict):
            raise RestRequestError("REST API returned a non-object JSON body.")
        return body

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Response:
        url = self._build_url(path, params=params)
        LOGGER.debug("REST %s %s", method, url)
        try:
            response = requests.request(
                method,
                url,
                headers=self._build_headers(has_body=json_body is not None),
                json=json_body,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise RestRequestError(f"failed to perform request: {exc}") from exc
        if response.status_code != 200:
            self._raise_for_status(response)
        return response

    @staticmethod
    def _build_headers(*, has_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _build_url(self, path: str, *, params: dict[str, object] | None = None) -> str:
        url = urljoin(f"{self._base_url}/", path.lstrip("/"))
        if params:
            query = urlencode({key: value for key, value in params.items() if value is not None})
            if query:
                return f"{url}?{query}"
        return url

    @staticmethod
    def _raise_for_status(response: Response) -> None:
        status = f"{response.status_code} {response.reason or ''}".strip()
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict) or "error_message" not in body:
            raise ApiError(response.status_code, "", f"response from API: {status}")
        raise ApiError(
            response.status_code,
            str(body.get("error_code") or ""),
            str(body.get("error_message") or ""),
        )


def encode_dataref_value(value: Any) -> dict[str, Any]:
    """Build a value PATCH body; data values (str/bytes) travel base64 encoded."""

    if isinstance(value, str):
        value = value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return {"data": base64.b64encode(bytes(value)).decode("ascii")}
    return {"data": value}


__all__ = ["RestClient", "encode_dataref_value"]
