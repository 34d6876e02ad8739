"""
Field definitions and descriptors for unitorm objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, cast

from ..errors import ObjectConfigurationError
from .values import INT64_MAX, INT64_MIN, DataType

if TYPE_CHECKING:
    from .object import Object


class Field:
    """
    Base class for object field descriptors.

    Fields manage attribute storage on object instances and carry the
    metadata needed to build the type's schema.
    """

    data_type: DataType
    _creation_counter = 0

    def __init__(self, *, default: Any = None, db_column: Optional[str] = None) -> None:
        self.default = default
        self.db_column = db_column

        self.model: type["Object"] | None = None  # Will be set during contribute_to_class
        self.name: str | None = None
        self.creation_counter = Field._creation_counter
        Field._creation_counter += 1

    # Descriptor protocol -------------------------------------------------
    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self

        obj = cast("Object", instance)
        name = self.require_name()
        try:
            return obj._field_values[name]
        except KeyError:
            raise AttributeError(
                f"'{type(obj).__name__}' object has no value for field '{name}'"
            ) from None

    def __set__(self, instance: object, value: Any) -> None:
        obj = cast("Object", instance)
        name = self.require_name()
        if value is None:
            raise ValueError(f"Field '{name}' cannot be None")
        obj._field_values[name] = self.to_python(value)

    # Metadata helpers ----------------------------------------------------
    def contribute_to_class(self, model: type["Object"], name: str) -> None:
        """
        Attach the field to the object class as a descriptor.
        """
        self.model = model
        self.name = name
        if self.db_column is None:
            self.db_column = name
        setattr(model, name, self)

    def require_name(self) -> str:
        if self.name is None:
            raise ObjectConfigurationError("Field name is not set.")
        return self.name

    def column_name(self) -> str:
        if self.db_column:
            return self.db_column
        return self.require_name()

    # Conversion ------------------------------------------------------------
    @property
    def has_default(self) -> bool:
        return self.default is not None

    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    def to_python(self, value: Any) -> Any:
        return value


class IntegerField(Field):
    data_type = DataType.INT64

    def to_python(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer value '{value}'")
        try:
            result = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid integer value '{value}'") from exc
        if not INT64_MIN <= result <= INT64_MAX:
            raise ValueError(f"Integer {result} for field '{self.name}' does not fit in 64 bits")
        return result


class FloatField(Field):
    data_type = DataType.FLOAT64

    def to_python(self, value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError(f"Invalid float value '{value}'")
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid float value '{value}'") from exc


class BooleanField(Field):
    data_type = DataType.BOOL

    def __init__(self, *, default: Any = False, **kwargs: Any) -> None:
        super().__init__(default=default, **kwargs)

    def to_python(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}'")


class StringField(Field):
    data_type = DataType.STRING

    def __init__(self, *, max_length: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.max_length = max_length

    def to_python(self, value: Any) -> str:
        if isinstance(value, (bytes, bytearray)):
            raise ValueError(f"Field '{self.name}' expects text, received bytes")
        result = str(value)
        if self.max_length and len(result) > self.max_length:
            field_name = self.require_name()
            raise ValueError(f"Value for field '{field_name}' exceeds max_length {self.max_length}")
        return result


class BytesField(Field):
    data_type = DataType.BYTES

    def to_python(self, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise ValueError(f"Expected bytes for field '{self.name}', received {value!r}")

