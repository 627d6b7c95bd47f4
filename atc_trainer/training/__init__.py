"""Training orchestration: phrase catalog, multiple-choice quiz and readback sessions."""

from .catalog import DEFAULT_CATALOG_PATH, Phrase, PhraseCatalog, load_catalog
from .scoreboard import ScoreBoard
from .quiz import MultipleChoiceQuestion, build_question, check_choice
from .session import (
    SessionState,
    SessionStep,
    advance,
    check_readback,
    random_phrase,
    score_step,
    start_session,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "Phrase",
    "PhraseCatalog",
    "load_catalog",
    "ScoreBoard",
    "MultipleChoiceQuestion",
    "build_question",
    "check_choice",
    "SessionState",
    "SessionStep",
    "advance",
    "check_readback",
    "random_phrase",
    "score_step",
    "start_session",
]
