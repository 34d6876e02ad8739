"""
Core building blocks: values, schemas, fields and the object base class.
"""

from .fields import BooleanField, BytesField, Field, FloatField, IntegerField, StringField
from .object import Object, ObjectMeta, ObjectOptions, Storable
from .schema import IDENTITY_COLUMN, Schema
from .values import DataType, ObjectId, Row, Value

__all__ = [
    "BooleanField",
    "BytesField",
    "DataType",
    "Field",
    "FloatField",
    "IDENTITY_COLUMN",
    "IntegerField",
    "Object",
    "ObjectId",
    "ObjectMeta",
    "ObjectOptions",
    "Row",
    "Schema",
    "Storable",
    "StringField",
    "Value",
]
