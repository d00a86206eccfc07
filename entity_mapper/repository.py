import contextlib
import typing

from entity_mapper.entity import Entity
from entity_mapper.lifecycle import ReleaseScope
from entity_mapper.registry import Registry
from entity_mapper.storages.sqlalchemy import SqlAlchemyDatabase, Statement


EntityType = typing.TypeVar("EntityType", bound=Entity)
IdentityType = typing.TypeVar("IdentityType")


class Repository(typing.Generic[EntityType, IdentityType]):
    """Acquires entities of one type.

    Subclass with the entity type filled in::

        class ArticleRepo(Repository[Article, int]):
            pass

    Entities acquired inside ``scope()`` are written back when the scope exits.
    """

    entity: typing.Type[EntityType] = None
    # repositories of one class built without a registry share this one
    _registries: typing.Dict[type, Registry] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", ()):
            if typing.get_origin(base) is Repository:
                entity_cls, _identity_cls = typing.get_args(base)
                if not isinstance(entity_cls, typing.TypeVar):
                    cls.entity = entity_cls

    def __init__(self, database: SqlAlchemyDatabase, registry: typing.Optional[Registry] = None) -> None:
        assert self.entity, "Repository must be parametrized with an entity type!"
        self._database = database
        if registry is None:
            registry = Repository._registries.setdefault(type(self), Registry())
        self._registry = registry
        self._scopes: typing.List[ReleaseScope] = []

    @property
    def registry(self) -> Registry:
        return self._registry

    def _acquire(self) -> EntityType:
        entity = self.entity(self._database, self._registry)
        if self._scopes:
            self._scopes[-1].track(entity)
        return entity

    @contextlib.contextmanager
    def scope(self) -> typing.Generator["Repository[EntityType, IdentityType]", None, None]:
        release_scope = ReleaseScope()
        self._scopes.append(release_scope)
        try:
            yield self
        except BaseException:
            self._scopes.remove(release_scope)
            release_scope.release_all(raise_errors=False)
            raise
        self._scopes.remove(release_scope)
        release_scope.release_all()

    def new(self, **attributes: typing.Any) -> EntityType:
        """An entity holding ``attributes``, not yet inserted."""
        entity = self._acquire()
        entity.from_array(attributes)
        return entity

    def create(self, **attributes: typing.Any) -> EntityType:
        entity = self.new(**attributes)
        entity.insert()
        return entity

    def get(self, identity: IdentityType) -> EntityType:
        entity = self._acquire()
        entity.from_primary(identity)
        return entity

    def find(self, **values: typing.Any) -> EntityType:
        entity = self._acquire()
        entity.from_unique(values)
        return entity

    def fetch_all(self, statement: Statement, parameters: typing.Optional[dict] = None) -> typing.List[EntityType]:
        """Entities filled with each row ``statement`` returns, e.g. a join over all the entity's tables."""
        entities = []
        for row in self._database.fetch_all(statement, parameters):
            entity = self._acquire()
            entity.from_array(row)
            entities.append(entity)
        return entities

    def fetch_column(
        self, statement: Statement, field: typing.Union[int, str] = 0, parameters: typing.Optional[dict] = None
    ) -> typing.List[typing.Any]:
        result = self._database.execute(statement, parameters)
        if isinstance(field, int):
            return [row[field] for row in result]
        return [row[field] for row in result.mappings()]
