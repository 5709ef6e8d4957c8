from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class Variable:
    """
    Named query variable; unification binds it to a fact value.
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Variable name must be a non-empty string")


@dataclass(frozen=True)
class Literal:
    """
    Concrete query value. Bare non-Variable values in a pattern are
    treated as literals too; wrap a value explicitly when it could be
    mistaken for something else.
    """

    value: Any


Term = Union[Variable, Literal, Any]
Pattern = Mapping[str, Term]
