"""BEM naming notation: block, element and modifier parsed from flat names.

Only the classic notation is understood::

    block
    block_mod
    block_mod_val
    block__elem
    block__elem_mod_val

A boolean modifier (``block_mod``) gets ``mod_val=True``.
"""

import re
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

WORD = r"[a-zA-Z0-9]+(?:-[a-zA-Z0-9]+)*"
ELEM_DELIM = "__"
MOD_DELIM = "_"

NOTATION_PATTERN = re.compile(
    rf"^(?P<block>{WORD})"
    rf"(?:{ELEM_DELIM}(?P<elem>{WORD}))?"
    rf"(?:{MOD_DELIM}(?P<mod_name>{WORD})(?:{MOD_DELIM}(?P<mod_val>{WORD}))?)?$"
)


class Notation(BaseModel):
    """Structured identifier of a BEM entity."""

    block: str
    elem: Optional[str] = None
    mod_name: Optional[str] = Field(default=None, alias="modName")
    mod_val: Optional[Union[bool, str]] = Field(default=None, alias="modVal")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_dict(self) -> dict:
        """Dump with the camelCase keys templates expect, omitting unset parts."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        name = self.block
        if self.elem:
            name += ELEM_DELIM + self.elem
        if self.mod_name:
            name += MOD_DELIM + self.mod_name
            if isinstance(self.mod_val, str):
                name += MOD_DELIM + self.mod_val
        return name


NotationParser = Callable[[str], Optional[Notation]]


def parse_notation(name: str) -> Optional[Notation]:
    """Parse a flat entity name.

    Args:
        name: Entity name such as ``button__text_size_m``.

    Returns:
        Parsed notation, or None when the name is not valid BEM notation.
    """
    match = NOTATION_PATTERN.match(name)
    if match is None:
        return None

    mod_name = match.group("mod_name")
    mod_val: Optional[Union[bool, str]] = None
    if mod_name:
        mod_val = match.group("mod_val") or True

    return Notation(
        block=match.group("block"),
        elem=match.group("elem"),
        mod_name=mod_name,
        mod_val=mod_val,
    )
