from entity_mapper.config import Settings, get_settings
from entity_mapper.entity import Entity
from entity_mapper.errors import EmptyFilter, MapperError, MissingAttribute, NotFound, QueryError
from entity_mapper.registry import Registry
from entity_mapper.repository import Repository
from entity_mapper.state import Mode
from entity_mapper.storages.sqlalchemy import SqlAlchemyDatabase


__all__ = [
    "EmptyFilter",
    "Entity",
    "MapperError",
    "MissingAttribute",
    "Mode",
    "NotFound",
    "QueryError",
    "Registry",
    "Repository",
    "Settings",
    "SqlAlchemyDatabase",
    "get_settings",
]
