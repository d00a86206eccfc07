import threading
import typing

import attr

from entity_mapper.config import Settings, get_settings
from entity_mapper.schema import EntityLayout, SchemaCache
from entity_mapper.storages.sqlalchemy import SqlAlchemyDatabase

if typing.TYPE_CHECKING:
    from entity_mapper.entity import Entity


@attr.s(auto_attribs=True)
class Registry:
    schema_cache: SchemaCache = attr.Factory(SchemaCache)
    settings: Settings = attr.Factory(get_settings)
    entities_layouts: typing.Dict[typing.Type["Entity"], EntityLayout] = attr.Factory(dict)
    _lock: threading.Lock = attr.ib(factory=threading.Lock, init=False, repr=False)

    def layout_for(self, entity_cls: typing.Type["Entity"], database: SqlAlchemyDatabase) -> EntityLayout:
        try:
            return self.entities_layouts[entity_cls]
        except KeyError:
            pass

        tables = tuple(self.schema_cache.describe(database, table_name) for table_name in entity_cls.tables)
        with self._lock:
            return self.entities_layouts.setdefault(entity_cls, EntityLayout(tables))
