# Path and File Name : /home/coinnode/installer/coinnode_installer/configurator/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Interactive configurator package exports

from .answers import AnswerSource, AnswersExhausted, ConsoleAnswers, ScriptedAnswers
from .configurator import Configurator
from .gates import GateLevel, GateOutcome

__all__ = [
    "AnswerSource", "AnswersExhausted", "ConsoleAnswers", "ScriptedAnswers",
    "Configurator", "GateLevel", "GateOutcome",
]
