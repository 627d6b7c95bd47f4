from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreBoard:
    """Running score and streak for one trainee."""
    score: int = 0
    streak: int = 0

    def apply(self, award: int, passed: bool) -> "ScoreBoard":
        """Board after one attempt: a pass adds the award to both counters, a fail resets the streak."""
        delta = award if passed else 0
        return ScoreBoard(
            score=max(0, self.score + delta),
            streak=max(0, self.streak + delta) if passed else 0,
        )
