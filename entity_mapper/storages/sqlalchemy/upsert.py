import typing

import sqlalchemy
from sqlalchemy.dialects import mysql as mysql_dialect
from sqlalchemy.dialects import postgresql as postgresql_dialect
from sqlalchemy.dialects import sqlite as sqlite_dialect
from sqlalchemy.sql.expression import Executable, TableClause


Statements = typing.List[Executable]


def _on_conflict(insert: typing.Callable) -> typing.Callable[[TableClause, dict, dict], Statements]:
    def build(table: TableClause, keys: dict, values: dict) -> Statements:
        statement = insert(table).values({**keys, **values})
        if not values:
            return [statement.on_conflict_do_nothing(index_elements=list(keys))]
        return [statement.on_conflict_do_update(index_elements=list(keys), set_=values)]

    return build


def _on_duplicate_key(table: TableClause, keys: dict, values: dict) -> Statements:
    statement = mysql_dialect.insert(table).values({**keys, **values})
    # MySQL needs at least one assignment, rewriting a key to itself keeps the row as is
    return [statement.on_duplicate_key_update(values or keys)]


def _delete_then_insert(table: TableClause, keys: dict, values: dict) -> Statements:
    where = sqlalchemy.and_(*(table.c[name] == value for name, value in keys.items()))
    return [sqlalchemy.delete(table).where(where), sqlalchemy.insert(table).values({**keys, **values})]


mapping = {
    "sqlite": _on_conflict(sqlite_dialect.insert),
    "postgresql": _on_conflict(postgresql_dialect.insert),
    "mysql": _on_duplicate_key,
    "mariadb": _on_duplicate_key,
}


def convert(dialect_name: str, table: TableClause, keys: dict, values: dict) -> Statements:
    """Statements inserting ``keys + values`` or replacing ``values`` of the row identified by ``keys``."""
    build = mapping.get(dialect_name, _delete_then_insert)
    return build(table, keys, values)
