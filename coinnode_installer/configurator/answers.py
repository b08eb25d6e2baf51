# Path and File Name : /home/coinnode/installer/coinnode_installer/configurator/answers.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Answer sources for the configurator (interactive console and scripted)

"""
Answer sources.

The configurator only ever calls ask(question). ConsoleAnswers reads the
terminal; ScriptedAnswers replays a fixed list of raw inputs so the decision
logic can be driven without a terminal.
"""

import getpass
import logging
from typing import Any, Iterable, List

from ..errors import UserCancelled
from .questions import ChoiceQuestion, InvalidAnswer, Question, TextQuestion, YesNoQuestion

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 50


class AnswersExhausted(RuntimeError):
    """A scripted source ran out of answers."""
    pass


class AnswerSource:
    def ask(self, question: Question) -> Any:
        for _ in range(MAX_ATTEMPTS):
            raw = self.read(question)
            try:
                value = question.parse(raw)
            except InvalidAnswer as e:
                self.reject(question, str(e))
                continue
            self.accept(question, value)
            return value
        raise AnswersExhausted(f"No valid answer for '{question.prompt}' after {MAX_ATTEMPTS} attempts")

    def read(self, question: Question) -> str:
        raise NotImplementedError

    def reject(self, question: Question, message: str) -> None:
        pass

    def accept(self, question: Question, value: Any) -> None:
        secret = isinstance(question, TextQuestion) and question.secret
        logger.debug(f"Answer to '{question.prompt}': {'<hidden>' if secret else value!r}")


class ConsoleAnswers(AnswerSource):
    """Interactive terminal prompts. A closed stdin cancels the run."""

    def read(self, question: Question) -> str:
        try:
            return self._prompt(question)
        except EOFError:
            raise UserCancelled(f"Input closed while asking '{question.prompt}'")

    def _prompt(self, question: Question) -> str:
        print("")
        print("-" * 72)
        print(f"  {question.prompt}")
        for line in question.help_lines:
            print(f"    {line}")

        if isinstance(question, ChoiceQuestion):
            for index, (_, label) in enumerate(question.options, start=1):
                marker = " (default)" if index - 1 == question.default_index else ""
                print(f"    [{index}] {label}{marker}")
            print("-" * 72)
            return input(f"  Enter choice [1-{len(question.options)}]: ")

        if isinstance(question, YesNoQuestion):
            hint = "Y/n" if question.default else "y/N"
            print("-" * 72)
            return input(f"  Your choice [{hint}]: ")

        if isinstance(question, TextQuestion):
            if question.default:
                shown = "<keep current>" if question.secret else question.default
                print(f"    Default: {shown} (press Enter to accept)")
            print("-" * 72)
            if question.secret:
                return getpass.getpass("  Enter value: ")
            return input("  Enter value: ")

        return input("  > ")

    def reject(self, question: Question, message: str) -> None:
        print(f"  [!] {message}")


class ScriptedAnswers(AnswerSource):
    """
    Replays raw answers in order. Rejected answers are kept in `rejections`
    so a test can assert that a re-prompt happened.
    """

    def __init__(self, answers: Iterable[str]):
        self._answers: List[str] = list(answers)
        self.asked: List[str] = []
        self.rejections: List[str] = []

    def read(self, question: Question) -> str:
        self.asked.append(question.prompt)
        if not self._answers:
            raise AnswersExhausted(f"No scripted answer left for '{question.prompt}'")
        return self._answers.pop(0)

    def reject(self, question: Question, message: str) -> None:
        self.rejections.append(message)

    @property
    def remaining(self) -> int:
        return len(self._answers)
