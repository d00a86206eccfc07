import logging
import typing

from entity_mapper.state import Mode

if typing.TYPE_CHECKING:
    from entity_mapper.entity import Entity


logger = logging.getLogger(__name__)


def release(entity: "Entity") -> None:
    """Writes back whatever is still dirty, unless the entity was switched to no-action mode.

    Two instances holding the same row do not see each other's changes; the one
    released last overwrites the other.
    """
    state = entity.state
    if state.mode is not Mode.WRITE_BACK:
        return
    if state.dirty:
        entity.update_table()
    if state.dirty_translations:
        entity.update_translations()


class ReleaseScope:
    def __init__(self) -> None:
        self._entities: typing.List["Entity"] = []

    def __len__(self) -> int:
        return len(self._entities)

    def track(self, entity: "Entity") -> "Entity":
        self._entities.append(entity)
        return entity

    def release_all(self, raise_errors: bool = True) -> None:
        """Releases tracked entities in the order they were acquired.

        Every entity is released even when an earlier one fails. The first failure is
        re-raised afterwards unless ``raise_errors`` is off, in which case failures are
        only logged.
        """
        entities, self._entities = self._entities, []
        first_error: typing.Optional[Exception] = None
        for entity in entities:
            try:
                release(entity)
            except Exception as exc:
                logger.exception("Failed to write back %r", entity)
                if first_error is None:
                    first_error = exc
        if first_error is not None and raise_errors:
            raise first_error
