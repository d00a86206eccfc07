import typing

import sqlalchemy
from sqlalchemy.sql.expression import ColumnElement

from entity_mapper.config import Settings

if typing.TYPE_CHECKING:
    from entity_mapper.entity import Entity


class TranslationOverlay:
    """Per-language strings kept outside of the entity's tables.

    An attribute listed in ``Entity.translations`` holds an id into the translations
    table; the strings themselves live in the translation items table keyed by
    ``(language, translation id)``.
    """

    def __init__(self, entity: "Entity", settings: Settings) -> None:
        self._entity = entity
        self._settings = settings
        self._translations = sqlalchemy.table(
            settings.translations_table, sqlalchemy.column(settings.translation_id_column)
        )
        self._items = sqlalchemy.table(
            settings.translation_items_table,
            sqlalchemy.column(settings.language_column),
            sqlalchemy.column(settings.translation_id_column),
            sqlalchemy.column(settings.data_column),
        )

    def _items_of(self, translation_id: typing.Any) -> ColumnElement:
        return self._items.c[self._settings.translation_id_column] == translation_id

    def get_translation(self, language: str, attr: str) -> str:
        buffer = self._entity.state.translation_buffer
        if (language, attr) not in buffer:
            statement = sqlalchemy.select(self._items.c[self._settings.data_column]).where(
                self._items.c[self._settings.language_column] == language,
                self._items_of(self._entity.get(attr)),
            )
            found = self._entity.database.execute(statement).scalar()
            # a missing translation is cached as an empty string too
            buffer[(language, attr)] = "" if found is None else found
        return str(buffer[(language, attr)])

    def set_translation(self, language: str, attr: str, value: str) -> None:
        self._entity.state.translation_buffer[(language, attr)] = value
        self._entity.state.dirty_translations.add((language, attr))

    def update_translations(self) -> None:
        state = self._entity.state
        for language, attr in list(state.dirty_translations):
            keys = {
                self._settings.language_column: language,
                self._settings.translation_id_column: self._entity.get(attr),
            }
            values = {self._settings.data_column: state.translation_buffer[(language, attr)]}
            self._entity.database.upsert(self._items, keys, values)
        state.dirty_translations = set()

    def insert_translations(self) -> None:
        for attr in self._entity.translations:
            translation_id = self._entity.database.insert(
                sqlalchemy.insert(self._translations), autoincrement=self._settings.translation_id_column
            )
            self._entity.set(attr, translation_id)

    def delete_translations(self) -> None:
        id_column = self._translations.c[self._settings.translation_id_column]
        for attr in self._entity.translations:
            translation_id = self._entity.get(attr)
            self._entity.database.execute(sqlalchemy.delete(self._items).where(self._items_of(translation_id)))
            self._entity.database.execute(sqlalchemy.delete(self._translations).where(id_column == translation_id))
