"""
Object base class and metadata collection for unitorm.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Protocol, Type, TypeVar, runtime_checkable

from ..errors import ObjectConfigurationError
from .fields import Field
from .schema import Schema
from .values import Row, Value


@runtime_checkable
class Storable(Protocol):
    """
    Type-erased view of an object held by a transaction cache.
    """

    def as_row(self) -> Row: ...

    def describe(self) -> Schema: ...


@dataclass
class ObjectOptions:
    """
    Container for object metadata calculated by :class:`ObjectMeta`.
    """

    model: Type["Object"]
    table_name: str = ""
    fields: "OrderedDict[str, Field]" = field(default_factory=OrderedDict)
    _schema: Optional[Schema] = field(default=None, repr=False)

    def add_field(self, field_obj: Field) -> None:
        if field_obj.name in self.fields:
            raise ObjectConfigurationError(
                f"Duplicate field name '{field_obj.name}' on object '{self.model.__name__}'"
            )
        self.fields[field_obj.require_name()] = field_obj

    def get_fields(self) -> Iterable[Field]:
        return self.fields.values()

    @property
    def schema(self) -> Schema:
        if self._schema is None:
            fields = list(self.get_fields())
            self._schema = Schema(
                table_name=self.table_name,
                type_name=self.model.__name__,
                field_names=tuple(f.require_name() for f in fields),
                column_names=tuple(f.column_name() for f in fields),
                column_types=tuple(f.data_type for f in fields),
            )
        return self._schema


TObject = TypeVar("TObject", bound="Object")


class ObjectMeta(type):
    """
    Metaclass responsible for collecting fields and establishing metadata.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "ObjectMeta":
        # Allow creation of the base Object class without processing fields.
        if name == "Object" and bases == ():
            return super().__new__(mcls, name, bases, attrs)

        declared_fields: Dict[str, Field] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Field):
                declared_fields[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        meta = attrs.get("Meta")
        table_name = getattr(meta, "table", name) if meta else name
        cls._meta = ObjectOptions(model=cls, table_name=table_name)

        inherited = [
            base._meta.get_fields() for base in reversed(cls.__mro__[1:]) if "_meta" in base.__dict__
        ]
        for fields in inherited:
            for parent_field in fields:
                if parent_field.name not in declared_fields:
                    cls._meta.fields[parent_field.require_name()] = parent_field

        sorted_fields = sorted(declared_fields.items(), key=lambda item: item[1].creation_counter)
        for attr_name, field_obj in sorted_fields:
            if not hasattr(field_obj, "data_type"):
                raise ObjectConfigurationError(
                    f"Field '{attr_name}' on '{name}' has no data type"
                )
            field_obj.contribute_to_class(cls, attr_name)
            cls._meta.add_field(field_obj)

        columns = [f.column_name() for f in cls._meta.get_fields()]
        if len(set(columns)) != len(columns):
            raise ObjectConfigurationError(f"Object '{name}' maps two fields to the same column")
        # Build eagerly so misconfigured column lists fail at class creation.
        cls._meta.schema

        return cls


class Object(metaclass=ObjectMeta):
    """
    Base class for types persisted through a transaction.

    Subclasses declare typed fields; the metaclass derives the table schema
    and the row conversions from them.
    """

    _meta: ObjectOptions

    def __init__(self, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}

        unknown = set(kwargs) - set(self._meta.fields)
        if unknown:
            raise TypeError(
                f"{self.__class__.__name__} got unexpected fields: {', '.join(sorted(unknown))}"
            )
        for field_obj in self._meta.get_fields():
            if field_obj.name in kwargs:
                setattr(self, field_obj.name, kwargs[field_obj.name])
            elif field_obj.has_default:
                setattr(self, field_obj.name, field_obj.get_default())
            else:
                raise TypeError(
                    f"{self.__class__.__name__} missing value for field '{field_obj.name}'"
                )

    def __repr__(self) -> str:
        field_parts = ", ".join(
            f"{name}={self._field_values.get(name)!r}" for name in self._meta.fields
        )
        return f"<{self.__class__.__name__} {field_parts}>"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._field_values == other._field_values  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    # Row conversion ------------------------------------------------------
    @classmethod
    def describe(cls) -> Schema:
        return cls._meta.schema

    def as_row(self) -> Row:
        return [
            Value.typed(field_obj.data_type, getattr(self, field_obj.require_name()))
            for field_obj in self._meta.get_fields()
        ]

    @classmethod
    def from_row(cls: Type[TObject], row: Row) -> TObject:
        fields = list(cls._meta.get_fields())
        if len(row) != len(fields):
            raise ObjectConfigurationError(
                f"{cls.__name__} expects {len(fields)} columns, row has {len(row)}"
            )
        values = {
            field_obj.require_name(): value.extract(field_obj.data_type)
            for field_obj, value in zip(fields, row)
        }
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self._meta.fields}
