"""Multiple-choice drill: match a controller transmission to its meaning."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .catalog import Phrase, PhraseCatalog
from .scoreboard import ScoreBoard

DEFAULT_CHOICES = 4


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    phrase: Phrase
    choices: Tuple[str, ...]

    @property
    def answer(self) -> str:
        return self.phrase.meaning


def build_question(
    catalog: PhraseCatalog,
    rng: Optional[random.Random] = None,
    choices: int = DEFAULT_CHOICES,
) -> MultipleChoiceQuestion:
    """Pick a phrase and mix its meaning with meanings of other phrases.

    With a small catalog there may be fewer than ``choices`` options.
    """
    if choices < 2:
        raise ValueError(f"A question needs at least 2 choices, got {choices}")
    rng = rng or random.Random()
    phrases = catalog.phrases
    main = rng.choice(phrases)
    others = [p for p in phrases if p.id != main.id]
    wrongs = [p.meaning for p in rng.sample(others, k=min(choices - 1, len(others)))]
    options = [main.meaning] + wrongs
    rng.shuffle(options)
    return MultipleChoiceQuestion(phrase=main, choices=tuple(options))


def check_choice(
    question: MultipleChoiceQuestion,
    choice: str,
    board: ScoreBoard,
    award: int = 1,
) -> Tuple[ScoreBoard, bool]:
    correct = choice == question.answer
    return board.apply(award, correct), correct
