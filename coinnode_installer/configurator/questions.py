# Path and File Name : /home/coinnode/installer/coinnode_installer/configurator/questions.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Typed interactive questions with enumerated answers, validators and defaults

"""
Typed questions.

A question turns one raw line of operator input into a value, applying its
default on empty input, or raises InvalidAnswer so the answer source can
re-prompt.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple


class InvalidAnswer(ValueError):
    pass


@dataclass
class Question:
    prompt: str
    help_lines: List[str] = field(default_factory=list)

    def parse(self, raw: str) -> Any:
        raise NotImplementedError


@dataclass
class ChoiceQuestion(Question):
    """Numbered options; empty input selects the default option."""
    options: Sequence[Tuple[Any, str]] = ()
    default_index: int = 0

    def parse(self, raw: str) -> Any:
        raw = (raw or "").strip()
        if not raw:
            return self.options[self.default_index][0]
        if raw.isdigit() and 1 <= int(raw) <= len(self.options):
            return self.options[int(raw) - 1][0]
        raise InvalidAnswer(f"Please type a number between 1 and {len(self.options)}")


@dataclass
class YesNoQuestion(Question):
    default: bool = False

    def parse(self, raw: str) -> bool:
        raw = (raw or "").strip().lower()
        if not raw:
            return self.default
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no"):
            return False
        raise InvalidAnswer("Please answer Y or N")


@dataclass
class TextQuestion(Question):
    """
    Free text. An empty answer returns the default; when there is no default
    and the question is required, empty input is rejected.

    validator returns an error message for bad input, None when acceptable.
    """
    default: Optional[str] = None
    required: bool = False
    secret: bool = False
    validator: Optional[Callable[[str], Optional[str]]] = None

    def parse(self, raw: str) -> Optional[str]:
        raw = (raw or "").strip()
        if not raw:
            if self.default is not None:
                return self.default
            if self.required:
                raise InvalidAnswer("This field is required - please enter a value")
            return ""
        if self.validator:
            error = self.validator(raw)
            if error:
                raise InvalidAnswer(error)
        return raw


def absolute_path_validator(value: str) -> Optional[str]:
    if not value.startswith("/"):
        return f"Path must be absolute: {value}"
    return None
