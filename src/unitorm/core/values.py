"""
Primitive value model shared by objects, schemas and storage backends.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Union

from ..errors import ObjectConfigurationError, ValueTypeError


@dataclass(frozen=True, order=True)
class ObjectId:
    """
    Identity assigned by the storage layer when a row is inserted.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"ObjectId requires an int, received {self.value!r}")

    @classmethod
    def coerce(cls, value: Union["ObjectId", int]) -> "ObjectId":
        if isinstance(value, ObjectId):
            return value
        return cls(value)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


class DataType(Enum):
    STRING = "String"
    BYTES = "Bytes"
    INT64 = "Int64"
    FLOAT64 = "Float64"
    BOOL = "Bool"

    @property
    def sql_type(self) -> str:
        return _SQL_TYPES[self]

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]

    @property
    def type_name(self) -> str:
        """Canonical source type name, e.g. ``"int"`` for ``INT64``."""
        return self.python_type.__name__

    @classmethod
    def from_type_name(cls, name: Union[str, type]) -> "DataType":
        if isinstance(name, type):
            name = name.__name__
        for data_type, python_type in _PYTHON_TYPES.items():
            if python_type.__name__ == name:
                return data_type
        raise ObjectConfigurationError(f"Unsupported field type '{name}'")

    @classmethod
    def from_sql_type(cls, name: str) -> "DataType":
        normalized = name.strip().upper()
        for data_type, sql_type in _SQL_TYPES.items():
            if sql_type == normalized:
                return data_type
        raise ObjectConfigurationError(f"Unsupported column type '{name}'")


_SQL_TYPES = {
    DataType.STRING: "TEXT",
    DataType.BYTES: "BLOB",
    DataType.INT64: "BIGINT",
    DataType.FLOAT64: "REAL",
    DataType.BOOL: "TINYINT",
}

_PYTHON_TYPES = {
    DataType.STRING: str,
    DataType.BYTES: bytes,
    DataType.INT64: int,
    DataType.FLOAT64: float,
    DataType.BOOL: bool,
}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Value:
    """
    Tagged union over the five primitive kinds a column can hold.
    """

    data_type: DataType
    payload: Any

    @classmethod
    def of(cls, python_value: Any) -> "Value":
        # bool is a subclass of int, so it has to be checked first
        if isinstance(python_value, bool):
            return cls(DataType.BOOL, python_value)
        if isinstance(python_value, int):
            return cls.typed(DataType.INT64, python_value)
        if isinstance(python_value, float):
            return cls(DataType.FLOAT64, python_value)
        if isinstance(python_value, str):
            return cls(DataType.STRING, python_value)
        if isinstance(python_value, (bytes, bytearray, memoryview)):
            return cls(DataType.BYTES, bytes(python_value))
        raise ValueTypeError(f"Cannot store {type(python_value).__name__} in a Value")

    @classmethod
    def typed(cls, data_type: DataType, python_value: Any) -> "Value":
        if data_type is DataType.BOOL:
            if isinstance(python_value, bool):
                return cls(data_type, python_value)
        elif data_type is DataType.INT64:
            if isinstance(python_value, int) and not isinstance(python_value, bool):
                if not INT64_MIN <= python_value <= INT64_MAX:
                    raise ValueTypeError(f"Integer {python_value} does not fit in 64 bits")
                return cls(data_type, python_value)
        elif data_type is DataType.FLOAT64:
            if isinstance(python_value, float):
                return cls(data_type, python_value)
        elif data_type is DataType.STRING:
            if isinstance(python_value, str):
                return cls(data_type, python_value)
        elif data_type is DataType.BYTES:
            if isinstance(python_value, (bytes, bytearray, memoryview)):
                return cls(data_type, bytes(python_value))
        raise ValueTypeError(
            f"Cannot build a {data_type.name} value from {type(python_value).__name__}"
        )

    def _extract(self, data_type: DataType) -> Any:
        if self.data_type is not data_type:
            raise ValueTypeError(
                f"Wrong type extracted from Value: wanted {data_type.name}, "
                f"holds {self.data_type.name}"
            )
        return self.payload

    def as_str(self) -> str:
        return self._extract(DataType.STRING)

    def as_bytes(self) -> bytes:
        return self._extract(DataType.BYTES)

    def as_int(self) -> int:
        return self._extract(DataType.INT64)

    def as_float(self) -> float:
        return self._extract(DataType.FLOAT64)

    def as_bool(self) -> bool:
        return self._extract(DataType.BOOL)

    def extract(self, data_type: DataType) -> Any:
        return self._extract(data_type)

    def to_python(self) -> Any:
        return self.payload

    def to_sql(self) -> Any:
        return self.payload


Row = List[Value]
