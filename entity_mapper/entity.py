import abc
import typing

import inflection

from entity_mapper import lifecycle
from entity_mapper.errors import DuplicateTable, EntityWithoutTables, MissingAttribute
from entity_mapper.loading import Loader, PrimaryKey
from entity_mapper.persisting import Persister
from entity_mapper.registry import Registry
from entity_mapper.schema import EntityLayout
from entity_mapper.state import EntityState, Mode
from entity_mapper.storages.sqlalchemy import SqlAlchemyDatabase
from entity_mapper.translations import TranslationOverlay


def _inherited(bases: tuple, name: str) -> typing.Tuple[str, ...]:
    inherited: typing.List[str] = []
    for base in bases:
        for item in getattr(base, name, ()):
            if item not in inherited:
                inherited.append(item)
    return tuple(inherited)


class EntityMeta(abc.ABCMeta):
    """Merges ``tables`` and ``translations`` declared by an entity with those of its bases.

    Parent tables come first so that rows referencing a parent's generated id are
    inserted after it.
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if name == "Entity":
            return cls

        inherited_tables = _inherited(bases, "tables")
        own_tables = tuple(namespace.get("tables", ()))
        if "tables" not in namespace and not inherited_tables:
            own_tables = (inflection.pluralize(inflection.underscore(name)),)
        for table in own_tables:
            if table in inherited_tables or own_tables.count(table) > 1:
                raise DuplicateTable(f"{name} declares table {table} more than once")
        cls.tables = inherited_tables + own_tables
        if not cls.tables:
            raise EntityWithoutTables(name)

        translations = _inherited(bases, "translations")
        cls.translations = translations + tuple(
            attr for attr in namespace.get("translations", ()) if attr not in translations
        )
        return cls


class Entity(metaclass=EntityMeta):
    """A row spread over one or more tables, written back lazily.

    Changes made through ``set`` are kept in memory until ``close`` (or leaving a
    ``with`` block) writes them back, unless ``no_action`` was called first.
    """

    tables: typing.Tuple[str, ...] = ()
    translations: typing.Tuple[str, ...] = ()

    def __init__(self, database: SqlAlchemyDatabase, registry: Registry) -> None:
        self._database = database
        self._layout = registry.layout_for(type(self), database)
        self._state = EntityState()
        self._loader = Loader(self)
        self._persister = Persister(self)
        self._overlay = TranslationOverlay(self, registry.settings)

    def __repr__(self) -> str:
        keys = {
            column: self._state.row.get(column) for table in self._layout for column in table.primary_columns
        }
        return f"{type(self).__name__}({keys})"

    def __enter__(self) -> "Entity":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
            return
        # the error raised inside the block is the one that propagates
        try:
            self.close()
        except Exception:
            lifecycle.logger.exception("Failed to write back %r", self)

    @property
    def database(self) -> SqlAlchemyDatabase:
        return self._database

    @property
    def layout(self) -> EntityLayout:
        return self._layout

    @property
    def state(self) -> EntityState:
        return self._state

    @property
    def dirty(self) -> bool:
        return self._state.dirty

    @property
    def mode(self) -> Mode:
        return self._state.mode

    def related_entities(self) -> typing.List["Entity"]:
        """Entities owned by this one, deleted along with it."""
        return []

    def related_files(self) -> typing.List[str]:
        """Paths of files removed along with this entity."""
        return []

    def from_array(self, row: typing.Mapping[str, typing.Any]) -> "Entity":
        self._loader.from_array(row)
        return self

    def from_primary(self, key: PrimaryKey) -> "Entity":
        self._loader.from_primary(key)
        return self

    def from_unique(self, values: typing.Mapping[str, typing.Any]) -> "Entity":
        self._loader.from_unique(values)
        return self

    def get(self, attr: str) -> typing.Any:
        try:
            return self._state.row[attr]
        except KeyError:
            raise MissingAttribute(attr) from None

    def set(self, attr: str, value: typing.Any) -> "Entity":
        self._state.row[attr] = value
        self._state.dirty = True
        return self

    def __getitem__(self, attr: str) -> typing.Any:
        return self.get(attr)

    def __setitem__(self, attr: str, value: typing.Any) -> None:
        self.set(attr, value)

    def __contains__(self, attr: str) -> bool:
        return attr in self._state.row

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return dict(self._state.row)

    def get_translation(self, language: str, attr: str) -> str:
        return self._overlay.get_translation(language, attr)

    def set_translation(self, language: str, attr: str, value: str) -> "Entity":
        self._overlay.set_translation(language, attr, value)
        return self

    def insert_translations(self) -> None:
        self._overlay.insert_translations()

    def update_translations(self) -> None:
        self._overlay.update_translations()

    def delete_translations(self) -> None:
        self._overlay.delete_translations()

    def insert(self) -> None:
        self._persister.insert()

    def insert_table(self, replace: bool = False) -> None:
        self._persister.insert_table(replace=replace)

    def update_table(self) -> None:
        self._persister.update_table()

    def update(self) -> None:
        """Writes the current values back right away, dirty or not."""
        self.update_translations()
        self.update_table()

    def delete(self) -> None:
        self._persister.delete()

    def no_action(self) -> "Entity":
        self._state.mode = Mode.NO_ACTION
        return self

    def close(self) -> None:
        lifecycle.release(self)
