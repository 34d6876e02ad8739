"""
SQL statement rendering for object schemas.
"""

from .builder import SchemaBuilder

__all__ = ["SchemaBuilder"]
