import logging
import os
import typing

import sqlalchemy

if typing.TYPE_CHECKING:
    from entity_mapper.entity import Entity


logger = logging.getLogger(__name__)


class Persister:
    """Writes an entity's row into its tables.

    Tables are written in declaration order (parents first) and deleted in reverse.
    Nothing is rolled back when a statement fails half way through the tables.
    """

    def __init__(self, entity: "Entity") -> None:
        self._entity = entity

    def insert(self) -> None:
        entity = self._entity
        entity.insert_translations()
        self.insert_table()
        entity.update_translations()
        logger.info("Inserted %r", entity)

    def insert_table(self, replace: bool = False) -> None:
        """Inserts a row into every table.

        With ``replace``, a table whose primary values are all known gets its row
        inserted or overwritten instead.
        """
        entity = self._entity
        row = entity.state.row
        generated_columns: typing.Set[str] = set()
        for table in entity.layout:
            autoincrement = table.autoincrement_column
            # an id generated by an earlier table is reused, not generated again
            if autoincrement in generated_columns:
                autoincrement = None

            primary = table.primary_columns
            if replace and primary and all(row.get(column) is not None for column in primary):
                keys = {column: row[column] for column in primary}
                values = {column: row[column] for column in table.non_primary_columns if row.get(column) is not None}
                entity.database.upsert(table.table, keys, values)
                continue

            values = {
                column: row[column]
                for column in table.column_names
                if column != autoincrement and row.get(column) is not None
            }
            statement = sqlalchemy.insert(table.table)
            if values:
                statement = statement.values(values)
            generated = entity.database.insert(statement, autoincrement=autoincrement)
            # later tables may reference the generated id
            if autoincrement is not None:
                entity.set(autoincrement, generated)
                generated_columns.add(autoincrement)
        entity.state.dirty = False

    def update_table(self) -> None:
        entity = self._entity
        for table in entity.layout:
            values = {
                column: entity.state.row[column]
                for column in table.non_primary_columns
                if entity.state.row.get(column) is not None
            }
            if not values:
                continue
            keys = {column: entity.get(column) for column in table.primary_columns}
            entity.database.execute(sqlalchemy.update(table.table).where(table.where(keys)).values(values))
        entity.state.dirty = False

    def delete(self) -> None:
        entity = self._entity
        for related in entity.related_entities():
            related.delete()
        for path in entity.related_files():
            if os.path.exists(path):
                os.unlink(path)
        for table in reversed(entity.layout):
            keys = {column: entity.get(column) for column in table.primary_columns}
            entity.database.execute(sqlalchemy.delete(table.table).where(table.where(keys)))
        entity.delete_translations()
        entity.no_action()
        logger.info("Deleted %r", entity)
