from unitorm.core import BooleanField, IntegerField, Object, StringField
from unitorm.dialects import PostgresDialect, SQLiteDialect
from unitorm.schema import SchemaBuilder

sqlite_builder = SchemaBuilder(SQLiteDialect())
postgres_builder = SchemaBuilder(PostgresDialect())


class User(Object):
    name = StringField()
    age = IntegerField(default=0, db_column="age_years")
    active = BooleanField(default=True)

    class Meta:
        table = "users"


class Marker(Object):
    pass


def test_create_table_sql():
    sql = sqlite_builder.create_table_sql(User.describe())
    expected = (
        "CREATE TABLE `users` (`id` INTEGER PRIMARY KEY AUTOINCREMENT, "
        "`name` TEXT, `age_years` BIGINT, `active` TINYINT)"
    )
    assert sql == expected


def test_create_table_sql_postgres():
    sql = postgres_builder.create_table_sql(User.describe())
    assert sql == (
        'CREATE TABLE "users" ("id" BIGSERIAL PRIMARY KEY, '
        '"name" TEXT, "age_years" BIGINT, "active" BOOLEAN)'
    )


def test_insert_sql():
    assert sqlite_builder.insert_sql(User.describe()) == (
        "INSERT INTO `users` (`name`, `age_years`, `active`) VALUES (?, ?, ?)"
    )
    assert postgres_builder.insert_sql(User.describe()) == (
        'INSERT INTO "users" ("name", "age_years", "active") VALUES (%s, %s, %s) RETURNING "id"'
    )


def test_select_update_delete_sql():
    schema = User.describe()
    assert sqlite_builder.select_sql(schema) == (
        "SELECT `name`, `age_years`, `active` FROM `users` WHERE `id` = ?"
    )
    assert sqlite_builder.update_sql(schema) == (
        "UPDATE `users` SET `name` = ?, `age_years` = ?, `active` = ? WHERE `id` = ?"
    )
    assert sqlite_builder.delete_sql(schema) == "DELETE FROM `users` WHERE `id` = ?"


def test_statements_for_object_without_fields():
    schema = Marker.describe()
    assert sqlite_builder.insert_sql(schema) == "INSERT INTO `Marker` DEFAULT VALUES"
    assert sqlite_builder.select_sql(schema) == "SELECT `id` FROM `Marker` WHERE `id` = ?"
    assert sqlite_builder.update_sql(schema) == "UPDATE `Marker` SET `id` = `id` WHERE `id` = ?"
