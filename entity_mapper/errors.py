class MapperError(Exception):
    pass


class QueryError(MapperError):
    pass


class NotFound(MapperError, LookupError):
    pass


class MissingAttribute(MapperError, KeyError):
    pass


class EmptyFilter(MapperError, ValueError):
    pass


class EntityWithoutTables(TypeError):
    pass


class DuplicateTable(TypeError):
    pass
