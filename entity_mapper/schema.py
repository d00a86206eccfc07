import logging
import threading
import typing

import attr
import sqlalchemy
from sqlalchemy.sql.expression import ColumnElement, TableClause

from entity_mapper.errors import EmptyFilter

if typing.TYPE_CHECKING:
    from entity_mapper.storages.sqlalchemy import SqlAlchemyDatabase


logger = logging.getLogger(__name__)


@attr.s(auto_attribs=True, frozen=True)
class ColumnDescriptor:
    name: str
    sql_type: str
    is_primary: bool = False
    is_autoincrement: bool = False


@attr.s(auto_attribs=True, frozen=True)
class TableDescriptor:
    name: str
    columns: typing.Tuple[ColumnDescriptor, ...] = ()
    _table: TableClause = attr.ib(init=False, eq=False, repr=False)

    def __attrs_post_init__(self) -> None:
        table = sqlalchemy.table(self.name, *(sqlalchemy.column(column.name) for column in self.columns))
        object.__setattr__(self, "_table", table)

    @property
    def table(self) -> TableClause:
        return self._table

    @property
    def column_names(self) -> typing.List[str]:
        return [column.name for column in self.columns]

    @property
    def primary_columns(self) -> typing.List[str]:
        return [column.name for column in self.columns if column.is_primary]

    @property
    def non_primary_columns(self) -> typing.List[str]:
        return [column.name for column in self.columns if not column.is_primary]

    @property
    def autoincrement_column(self) -> typing.Optional[str]:
        for column in self.columns:
            if column.is_autoincrement:
                return column.name
        return None

    def where(self, values: typing.Mapping[str, typing.Any]) -> ColumnElement:
        if not values:
            raise EmptyFilter(f"Nothing to filter {self.name} by")
        return sqlalchemy.and_(*(self._table.c[name] == value for name, value in values.items()))


@attr.s(auto_attribs=True, frozen=True)
class EntityLayout:
    """Tables of one entity type, parents first. Shared by every instance of the type."""

    tables: typing.Tuple[TableDescriptor, ...]

    def __iter__(self) -> typing.Iterator[TableDescriptor]:
        return iter(self.tables)

    def __reversed__(self) -> typing.Iterator[TableDescriptor]:
        return reversed(self.tables)

    @property
    def column_names(self) -> typing.List[str]:
        return [name for table in self.tables for name in table.column_names]


class SchemaCache:
    """Read-through cache of table descriptors, keyed by table name.

    Entries are never invalidated: table structure is assumed to be static for the
    lifetime of the cache. Population is serialised so that a table is introspected
    once even when several threads miss at the same time.
    """

    def __init__(self) -> None:
        self._descriptors: typing.Dict[str, TableDescriptor] = {}
        self._lock = threading.Lock()

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def describe(self, database: "SqlAlchemyDatabase", table_name: str) -> TableDescriptor:
        try:
            return self._descriptors[table_name]
        except KeyError:
            pass

        with self._lock:
            if table_name not in self._descriptors:
                logger.debug("Introspecting table %s", table_name)
                columns = tuple(database.describe(table_name))
                self._descriptors[table_name] = TableDescriptor(table_name, columns)
            return self._descriptors[table_name]

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()
