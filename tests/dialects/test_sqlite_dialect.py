from unitorm.core import DataType
from unitorm.dialects import SQLiteDialect


def test_sqlite_dialect_quotes_with_backticks():
    dialect = SQLiteDialect()
    assert dialect.quote_identifier("name") == "`name`"
    assert dialect.quote_identifier("odd`name") == "`odd``name`"


def test_sqlite_dialect_column_types_follow_data_types():
    dialect = SQLiteDialect()
    assert dialect.column_type(DataType.STRING) == "TEXT"
    assert dialect.column_type(DataType.INT64) == "BIGINT"
    assert dialect.column_type(DataType.BOOL) == "TINYINT"
    assert dialect.identity_column_definition("id") == "`id` INTEGER PRIMARY KEY AUTOINCREMENT"


def test_sqlite_dialect_has_no_returning():
    dialect = SQLiteDialect()
    assert dialect.parameter_placeholder() == "?"
    assert not dialect.capabilities.supports_returning
    assert "sqlite_master" in dialect.table_exists_sql()
