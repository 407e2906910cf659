"""
Token types produced by the lyric tokenizer.

A tokenized lyric is a flat list of WordToken, SpaceToken and NewlineToken.
The list itself never changes during a typing test; only the ``state`` of
each character cell is re-tagged as the player types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Union


class CharState(Enum):
    """Correctness tag of a single lyric character"""
    UNSET = "unset"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass
class Character:
    """One character of a word with its correctness tag"""
    char: str
    state: CharState = CharState.UNSET


@dataclass
class WordToken:
    """A maximal run of non-separator characters"""
    chars: List[Character] = field(default_factory=list)

    kind: ClassVar[str] = "word"

    @property
    def length(self) -> int:
        return len(self.chars)

    @property
    def text(self) -> str:
        return ''.join(c.char for c in self.chars)

    @property
    def cells(self) -> List[Character]:
        return self.chars


@dataclass
class SpaceToken:
    """A single space separator"""
    char: str = ' '
    state: CharState = CharState.UNSET

    kind: ClassVar[str] = "space"

    @property
    def length(self) -> int:
        return 1

    @property
    def text(self) -> str:
        return self.char

    @property
    def cells(self) -> List["SpaceToken"]:
        return [self]


@dataclass
class NewlineToken:
    """A line break; typed as a space"""
    char: str = '\n'
    state: CharState = CharState.UNSET

    kind: ClassVar[str] = "newline"

    @property
    def length(self) -> int:
        return 1

    @property
    def text(self) -> str:
        return self.char

    @property
    def cells(self) -> List["NewlineToken"]:
        return [self]


Token = Union[WordToken, SpaceToken, NewlineToken]
