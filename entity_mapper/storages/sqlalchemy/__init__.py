import logging
import typing

import sqlalchemy
from sqlalchemy.engine import Connection, CursorResult, Dialect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable, Insert, TableClause

from entity_mapper.errors import QueryError
from entity_mapper.schema import ColumnDescriptor
from entity_mapper.storages.sqlalchemy import introspection, upsert


logger = logging.getLogger(__name__)


Statement = typing.Union[str, Executable]


class SqlAlchemyDatabase:
    """Runs statements against a connection opened (and closed) by the caller.

    Any failure reported by SQLAlchemy surfaces as ``QueryError``; nothing is retried
    and no transaction is begun or committed here.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    @property
    def dialect(self) -> Dialect:
        return self._connection.dialect

    def execute(self, statement: Statement, parameters: typing.Optional[dict] = None) -> CursorResult:
        if isinstance(statement, str):
            statement = sqlalchemy.text(statement)
        logger.debug("Executing %s %s", statement, parameters or "")
        try:
            return self._connection.execute(statement, parameters)
        except SQLAlchemyError as exc:
            raise QueryError(str(exc)) from exc

    def fetch_one(self, statement: Statement, parameters: typing.Optional[dict] = None) -> typing.Optional[dict]:
        row = self.execute(statement, parameters).mappings().first()
        return dict(row) if row is not None else None

    def fetch_all(self, statement: Statement, parameters: typing.Optional[dict] = None) -> typing.List[dict]:
        return [dict(row) for row in self.execute(statement, parameters).mappings()]

    def insert(self, statement: Insert, autoincrement: typing.Optional[str] = None) -> typing.Any:
        """Executes an INSERT and returns the value generated for ``autoincrement``, if given."""
        if autoincrement is None:
            self.execute(statement)
            return None

        if self.dialect.insert_returning:
            return self.execute(statement.returning(statement.table.c[autoincrement])).scalar_one()
        return self.execute(statement).lastrowid

    def upsert(self, table: TableClause, keys: dict, values: dict) -> None:
        for statement in upsert.convert(self.dialect.name, table, keys, values):
            self.execute(statement)

    def describe(self, table_name: str) -> typing.List[ColumnDescriptor]:
        try:
            return introspection.describe(self._connection, table_name)
        except SQLAlchemyError as exc:
            raise QueryError(str(exc)) from exc

    def quote(self, value: typing.Any) -> str:
        if value is None:
            return "NULL"
        literal = sqlalchemy.literal(value)
        return str(literal.compile(dialect=self.dialect, compile_kwargs={"literal_binds": True}))
