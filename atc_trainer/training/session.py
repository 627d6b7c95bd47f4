"""
Module: atc_trainer.training.session

Purpose:
    Readback practice. A single-shot check grades one readback; a sequential
    session walks a shuffled queue of phrases, grading one readback per step.

    All state lives in immutable value objects. Every operation takes the
    current state and returns the updated one, so callers (the CLI, a speech
    front end, tests) own the state and nothing is shared behind their back.

Key Functions:
    - random_phrase: phrase for single-shot practice
    - check_readback: grade one readback, update the score board
    - start_session / score_step / advance: sequential session
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..exceptions import EmptyReadbackError, NoActiveSessionError, StepAlreadyScoredError
from ..grader import BaseReadbackGrader, GradeResult, ReadbackGrader
from .catalog import Phrase, PhraseCatalog
from .scoreboard import ScoreBoard

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LENGTH = 5
READBACK_AWARD = 1
SESSION_AWARD = 2


@dataclass(frozen=True)
class SessionStep:
    """Timeline entry for one graded session step."""
    phrase: Phrase
    readback: str
    result: GradeResult


@dataclass(frozen=True)
class SessionState:
    queue: Tuple[Phrase, ...] = ()
    current: Optional[Phrase] = None
    board: ScoreBoard = ScoreBoard()
    scored: bool = False
    history: Tuple[SessionStep, ...] = ()

    @property
    def active(self) -> bool:
        return self.current is not None

    @property
    def complete(self) -> bool:
        """True once a started session has run out of phrases."""
        return self.current is None and bool(self.history)

    @property
    def remaining(self) -> int:
        return len(self.queue) + (1 if self.current is not None else 0)


def _require_readback(candidate: Optional[str]) -> str:
    text = (candidate or "").strip()
    if not text:
        raise EmptyReadbackError("Speak or type your readback before scoring.")
    return text


def random_phrase(catalog: PhraseCatalog, rng: Optional[random.Random] = None) -> Phrase:
    rng = rng or random.Random()
    return rng.choice(catalog.phrases)


def check_readback(
    phrase: Phrase,
    candidate: str,
    board: ScoreBoard,
    grader: Optional[BaseReadbackGrader] = None,
    award: int = READBACK_AWARD,
) -> Tuple[ScoreBoard, GradeResult]:
    """Grade one readback of phrase; blank input raises EmptyReadbackError."""
    text = _require_readback(candidate)
    grader = grader or ReadbackGrader()
    result = grader.grade(text, phrase.expected_readback)
    return board.apply(award, result.ok), result


def start_session(
    catalog: PhraseCatalog,
    rng: Optional[random.Random] = None,
    length: int = DEFAULT_SESSION_LENGTH,
    board: Optional[ScoreBoard] = None,
) -> SessionState:
    """Shuffle the catalog, keep the first length phrases and put the first in play.

    The score board carries over when one is given.
    """
    if length < 1:
        raise ValueError(f"Session length must be at least 1, got {length}")
    rng = rng or random.Random()
    picked = rng.sample(catalog.phrases, k=min(length, len(catalog)))
    logger.info(f"Session started with {len(picked)} phrases")
    return SessionState(
        queue=tuple(picked[1:]),
        current=picked[0],
        board=board or ScoreBoard(),
    )


def score_step(
    state: SessionState,
    candidate: str,
    grader: Optional[BaseReadbackGrader] = None,
    award: int = SESSION_AWARD,
) -> Tuple[SessionState, GradeResult]:
    """Grade the readback for the phrase in play; each step is graded once."""
    if state.current is None:
        raise NoActiveSessionError("Start a session to begin.")
    if state.scored:
        raise StepAlreadyScoredError("This step is already scored. Advance to the next transmission.")
    text = _require_readback(candidate)

    grader = grader or ReadbackGrader()
    result = grader.grade(text, state.current.expected_readback)
    step = SessionStep(phrase=state.current, readback=text, result=result)
    logger.debug(f"Session step {state.current.id}: {result.overall}%")

    new_state = replace(
        state,
        board=state.board.apply(award, result.ok),
        scored=True,
        history=state.history + (step,),
    )
    return new_state, result


def advance(state: SessionState) -> SessionState:
    """Move to the next queued phrase; current becomes None when the queue is empty."""
    if not state.queue:
        if state.current is not None:
            logger.info("Session complete")
        return replace(state, current=None, scored=False)
    return replace(state, queue=state.queue[1:], current=state.queue[0], scored=False)
