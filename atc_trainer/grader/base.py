from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class GradeLabel(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class KeyTokenSet:
    tokens: Tuple[str, ...] = ()
    numbers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GradeResult:
    overall: int  # 0-100
    ok: bool
    required_tokens: List[str] = field(default_factory=list)
    required_numbers: List[str] = field(default_factory=list)
    token_score: float = 1.0
    num_score: float = 1.0
    missed_tokens: List[str] = field(default_factory=list)
    missed_numbers: List[str] = field(default_factory=list)

    @property
    def label(self) -> GradeLabel:
        return GradeLabel.PASS if self.ok else GradeLabel.FAIL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "ok": self.ok,
            "label": self.label.value,
            "token_score": self.token_score,
            "num_score": self.num_score,
            "required_tokens": list(self.required_tokens),
            "required_numbers": list(self.required_numbers),
            "missed_tokens": list(self.missed_tokens),
            "missed_numbers": list(self.missed_numbers),
        }


class BaseReadbackGrader:
    """Interface for readback graders.

    Implementations judge how closely a candidate readback reproduces the
    load-bearing parts of a reference readback.
    """

    def grade(self, candidate: str, reference: str) -> GradeResult:
        raise NotImplementedError
