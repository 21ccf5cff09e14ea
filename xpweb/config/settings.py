"""Client configuration loading and validation."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Literal
from urllib.parse import urlsplit, urlunsplit

import yaml
from pydantic import AnyUrl, Field, PositiveFloat, PositiveInt
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("./config/xpweb.yaml"),
    Path("./config/xpweb.yml"),
    Path("~/.config/xpweb/xpweb.yaml").expanduser(),
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
WS_API_PATH = "/api/v2"


class ClientSettings(BaseSettings):
    """Validated settings for the simulator web API client."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="XPWEB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Endpoints
    rest_base_url: AnyUrl = Field(
        default="http://localhost:8086",
        description="Base URL of the simulator web API; also sent as the websocket Origin.",
    )
    ws_url: AnyUrl | None = Field(
        default=None,
        description="Websocket endpoint; derived from rest_base_url when unset.",
    )
    transport: Literal["dummy", "websocket"] = Field(
        default="websocket",
        description="Push-message transport implementation to use.",
    )

    # Timeouts & reliability
    request_timeout_seconds: PositiveFloat = Field(
        default=10.0,
        description="Timeout applied to each REST request.",
    )
    ws_open_timeout_seconds: PositiveFloat = Field(
        default=10.0,
        description="Timeout for the websocket opening handshake.",
    )
    reconnect_interval_seconds: PositiveFloat = Field(
        default=5.0,
        description="Fixed delay between reconnect attempts after a dropped connection.",
    )
    read_error_backoff_seconds: PositiveFloat = Field(
        default=0.1,
        description="Pause after a failed read before the read loop tries again.",
    )
    request_ledger_max: PositiveInt = Field(
        default=1000,
        description="Maximum outstanding websocket requests remembered for result correlation.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level applied by configure_logging().",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.upper()
        return value

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    def rest_origin(self) -> str:
        """REST base URL without a trailing slash."""

        return str(self.rest_base_url).rstrip("/")

    def resolved_ws_url(self) -> str:
        """Websocket endpoint, derived from the REST URL unless configured."""

        if self.ws_url is not None:
            return str(self.ws_url)
        parts = urlsplit(self.rest_origin())
        scheme = "wss" if parts.scheme == "https" else "ws"
        path = parts.path.rstrip("/") + WS_API_PATH
        return urlunsplit((scheme, parts.netloc, path, "", ""))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[ClientSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            cls._yaml_settings_source,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @staticmethod
    def _yaml_settings_source(settings_cls: type[ClientSettings] | None = None) -> Dict[str, Any]:
        candidates: Iterable[Path] = ClientSettings._resolve_candidate_paths()

        for path in candidates:
            data = ClientSettings._load_file(path)
            if data is not None:
                data.setdefault("config_path", path)
                return data
        return {}

    @staticmethod
    def _resolve_candidate_paths() -> Iterable[Path]:
        explicit = os.getenv("XPWEB_CONFIG_FILE")
        if explicit:
            yield Path(explicit).expanduser()
            return
        yield from DEFAULT_CONFIG_LOCATIONS

    @staticmethod
    def _load_file(path: Path) -> Dict[str, Any] | None:
        if not path.is_file():
            return None
        suffix = path.suffix.lower()
        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix in {".yaml", ".yml"}:
                    raw = yaml.safe_load(handle)
                elif suffix == ".json":
                    raw = json.load(handle)
                else:
                    return None
        except OSError as exc:
            raise RuntimeError(f"Failed to read xpweb config file {path}") from exc
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid xpweb config file {path}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"xpweb config file {path} must contain a mapping at top level.")
        return raw


@lru_cache()
def get_settings() -> ClientSettings:
    """Return memoized client settings."""

    return ClientSettings()


def configure_logging(settings: ClientSettings | None = None) -> None:
    """Apply the configured log level and the standard xpweb log format."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
