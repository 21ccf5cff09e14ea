"""Simulator entities (commands, datarefs) and dataref value decoding."""

from __future__ import annotations

import base64
import binascii
import enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValueType(str, enum.Enum):
    """Value types a dataref may report."""

    FLOAT = "float"
    DOUBLE = "double"
    INT = "int"
    INT_ARRAY = "int_array"
    FLOAT_ARRAY = "float_array"
    DATA = "data"


class Command(BaseModel):
    """A command provided by the simulator.

    The id may change between simulator sessions but stays fixed within one,
    including across aircraft loads.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = Field(ge=0)
    name: str
    description: str = ""


class Dataref(BaseModel):
    """A dataref provided by the simulator."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int = Field(ge=0)
    name: str
    value_type: Optional[ValueType] = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class DatarefValue(BaseModel):
    """Type-agnostic dataref value.

    Check ``value_type`` if needed and use the matching accessor:

    - float, double: :meth:`as_float`
    - int: :meth:`as_int`
    - int_array: :meth:`as_int_list`
    - float_array: :meth:`as_float_list`
    - data: :meth:`as_bytes` or :meth:`as_str`

    Accessors return a zero value when the payload has the wrong shape.
    """

    value: Any = None
    value_type: Optional[ValueType] = None
    dataref: Optional[Dataref] = None

    def as_float(self) -> float:
        if _is_number(self.value):
            return float(self.value)
        return 0.0

    def as_int(self) -> int:
        if _is_number(self.value):
            return int(self.value)
        return 0

    def as_int_list(self) -> Optional[List[int]]:
        if not isinstance(self.value, list):
            return None
        if not all(_is_number(item) for item in self.value):
            return None
        return [int(item) for item in self.value]

    def as_float_list(self) -> Optional[List[float]]:
        if not isinstance(self.value, list):
            return None
        if not all(_is_number(item) for item in self.value):
            return None
        return [float(item) for item in self.value]

    def as_bytes(self) -> bytes:
        if not isinstance(self.value, str):
            return b""
        try:
            return base64.b64decode(self.value, validate=True)
        except (binascii.Error, ValueError):
            return b""

    def as_str(self) -> str:
        return self.as_bytes().decode("utf-8", errors="replace")


class ApiVersions(BaseModel):
    versions: List[str] = Field(default_factory=list)


class SimulatorVersion(BaseModel):
    version: str = ""


class Capabilities(BaseModel):
    """Response of the capabilities endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api: ApiVersions = Field(default_factory=ApiVersions)
    simulator: SimulatorVersion = Field(default_factory=SimulatorVersion, alias="x-plane")
