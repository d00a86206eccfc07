import enum
import typing

import attr


class Mode(enum.Enum):
    WRITE_BACK = "write_back"
    NO_ACTION = "no_action"


TranslationKey = typing.Tuple[str, str]


@attr.s(auto_attribs=True)
class EntityState:
    row: typing.Dict[str, typing.Any] = attr.Factory(dict)
    translation_buffer: typing.Dict[TranslationKey, str] = attr.Factory(dict)
    dirty: bool = False
    dirty_translations: typing.Set[TranslationKey] = attr.Factory(set)
    mode: Mode = Mode.WRITE_BACK

    def replace_row(self, row: typing.Mapping[str, typing.Any]) -> None:
        self.row = dict(row)
        self.translation_buffer = {}
        self.dirty_translations = set()
        self.dirty = False
