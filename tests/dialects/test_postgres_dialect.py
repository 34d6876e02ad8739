from unitorm.core import DataType
from unitorm.dialects import PostgresDialect


def test_postgres_dialect_quotes_identifiers():
    dialect = PostgresDialect()
    assert dialect.quote_identifier('table"name') == '"table""name"'
    assert dialect.format_table("users") == '"users"'


def test_postgres_dialect_placeholder():
    dialect = PostgresDialect()
    assert dialect.parameter_placeholder() == "%s"
    assert dialect.parameter_placeholder(3) == "%s"


def test_postgres_dialect_column_types():
    dialect = PostgresDialect()
    assert dialect.column_type(DataType.BYTES) == "BYTEA"
    assert dialect.column_type(DataType.FLOAT64) == "DOUBLE PRECISION"
    assert dialect.column_type(DataType.BOOL) == "BOOLEAN"
    assert dialect.identity_column_definition("id") == '"id" BIGSERIAL PRIMARY KEY'


def test_postgres_dialect_supports_returning():
    assert PostgresDialect().capabilities.supports_returning
