import typing

import sqlalchemy
from sqlalchemy.sql.expression import ColumnElement

from entity_mapper.errors import MissingAttribute, NotFound
from entity_mapper.schema import TableDescriptor

if typing.TYPE_CHECKING:
    from entity_mapper.entity import Entity


PrimaryKey = typing.Union[typing.Any, typing.Sequence[typing.Any], typing.Mapping[str, typing.Any]]


def _primary_values(table: TableDescriptor, key: PrimaryKey) -> typing.Dict[str, typing.Any]:
    columns = table.primary_columns
    if isinstance(key, typing.Mapping):
        try:
            return {column: key[column] for column in columns}
        except KeyError as exc:
            raise MissingAttribute(exc.args[0]) from exc
    if isinstance(key, (list, tuple)):
        if len(key) != len(columns):
            raise ValueError(f"{table.name} has {len(columns)} primary columns, got {len(key)} values")
        return dict(zip(columns, key))
    return {column: key for column in columns}


class Loader:
    """Fills an entity's row, replacing whatever it held before.

    A lookup has to find a row in every table of the entity; if one of them comes
    back empty the entity is left without any row.
    """

    def __init__(self, entity: "Entity") -> None:
        self._entity = entity

    def from_array(self, row: typing.Mapping[str, typing.Any]) -> None:
        self._entity.state.replace_row(row)

    def from_primary(self, key: PrimaryKey) -> None:
        self._entity.state.replace_row({})
        row: typing.Dict[str, typing.Any] = {}
        for table in self._entity.layout:
            row.update(self._fetch(table, table.where(_primary_values(table, key))))
        self._entity.state.replace_row(row)

    def from_unique(self, values: typing.Mapping[str, typing.Any]) -> None:
        self._entity.state.replace_row({})
        row: typing.Dict[str, typing.Any] = {}
        for table in self._entity.layout:
            matching = {}
            for column in table.non_primary_columns:
                value = values.get(column)
                if value is None:
                    value = row.get(column)
                if value is not None:
                    matching[column] = value
            row.update(self._fetch(table, table.where(matching)))
        self._entity.state.replace_row(row)

    def _fetch(self, table: TableDescriptor, where: ColumnElement) -> typing.Dict[str, typing.Any]:
        statement = sqlalchemy.select(table.table).where(where)
        found = self._entity.database.fetch_one(statement)
        if found is None:
            raise NotFound(f"No row in {table.name} for {type(self._entity).__name__}")
        return found
