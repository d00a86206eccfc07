import typing

import sqlalchemy
from sqlalchemy.engine import Connection
from sqlalchemy.exc import NoSuchTableError

from entity_mapper.errors import QueryError
from entity_mapper.schema import ColumnDescriptor


def _sqlite_declared_types(connection: Connection, table_name: str) -> typing.Dict[str, str]:
    # reflection normalises INT to INTEGER; only the declared text tells a rowid alias apart
    quoted = connection.dialect.identifier_preparer.quote(table_name)
    rows = connection.exec_driver_sql(f"PRAGMA table_info({quoted})")
    return {row[1]: row[2] for row in rows}


def _is_rowid_alias(name: str, declared_type: str, primary: typing.List[str], foreign: typing.Set[str]) -> bool:
    # a lone INTEGER PRIMARY KEY aliases the rowid, unless it points at a parent row
    return primary == [name] and name not in foreign and declared_type.strip().upper() == "INTEGER"


def _read_columns(connection: Connection, table_name: str) -> typing.List[ColumnDescriptor]:
    inspector = sqlalchemy.inspect(connection)
    try:
        columns = inspector.get_columns(table_name)
        primary = inspector.get_pk_constraint(table_name).get("constrained_columns") or []
        foreign = {
            name for key in inspector.get_foreign_keys(table_name) for name in key["constrained_columns"]
        }
    except NoSuchTableError as exc:
        raise QueryError(f"Table {table_name} does not exist") from exc

    declared_types = {}
    if connection.dialect.name == "sqlite":
        declared_types = _sqlite_declared_types(connection, table_name)

    return [
        ColumnDescriptor(
            name=column["name"],
            sql_type=str(column["type"]),
            is_primary=column["name"] in primary,
            is_autoincrement=column.get("autoincrement") is True
            or (
                column["name"] in declared_types
                and _is_rowid_alias(column["name"], declared_types[column["name"]], primary, foreign)
            ),
        )
        for column in columns
    ]


def describe(connection: Connection, table_name: str) -> typing.List[ColumnDescriptor]:
    descriptors = _read_columns(connection, table_name)
    if sum(descriptor.is_autoincrement for descriptor in descriptors) > 1:
        raise QueryError(f"Table {table_name} declares more than one autoincrement column")
    return descriptors
