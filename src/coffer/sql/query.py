from __future__ import annotations

import re
from enum import IntEnum, auto
from typing import Pattern

from coffer.base.query import Query
from coffer.exception import CofferError


class ParamType(IntEnum):
    NONE = auto()
    POSITIONAL = auto()
    KEYWORD = auto()


class SQLQuery(Query):
    """A named SQL statement, already in the driver's paramstyle

    The placeholders in `text` decide whether the statement is called with
    a sequence or a mapping of values.
    """

    __slots__ = ("name", "text", "param_type")
    POSITIONAL_PLACEHOLDER: Pattern = re.compile(r"%s")
    KEYWORD_PLACEHOLDER: Pattern = re.compile(r"%\([a-z_][a-z0-9_]*\)s")
    text: str
    param_type: ParamType

    def __init__(self, name: str, text: str) -> None:
        self.name = name
        self.text = text
        self.param_type = self.detect_param_type(text)

    @classmethod
    def detect_param_type(cls, text: str) -> ParamType:
        positional = cls.POSITIONAL_PLACEHOLDER.search(text) is not None
        keyword = cls.KEYWORD_PLACEHOLDER.search(text) is not None
        if positional and keyword:
            raise CofferError(
                "Cannot mix positional and keyword placeholders in one query"
            )
        if positional:
            return ParamType.POSITIONAL
        if keyword:
            return ParamType.KEYWORD
        return ParamType.NONE

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, "
            f"param_type={self.param_type.name})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SQLQuery):
            return NotImplemented
        return (self.text, self.param_type) == (other.text, other.param_type)
