from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .base import BaseReadbackGrader, GradeResult
from .key_tokens import extract_key_tokens

logger = logging.getLogger(__name__)

TOKEN_WEIGHT = 0.65
NUMBER_WEIGHT = 0.35
PASS_THRESHOLD = 75

HIT_MODES = ("occurrence", "distinct")


def _ordered_unique(items: Sequence[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ReadbackGrader(BaseReadbackGrader):
    """
    Lexical/numeric readback grader.

    Scores a candidate readback against a reference on two axes:
    coverage of the reference's key tokens (weight 0.65) and recall of the
    reference's numbers (weight 0.35). A readback passes at 75%.

    hit_mode controls how repeated candidate tokens count:
    - "occurrence": every candidate token found in the required set is a hit,
      so repeating a correct word counts again
    - "distinct": each required token counts at most once
    In both modes the token score is capped at 1.0.
    """

    def __init__(self, hit_mode: str = "occurrence"):
        if hit_mode not in HIT_MODES:
            raise ValueError(f"Unsupported hit mode: {hit_mode}. Use 'occurrence' or 'distinct'")
        self.hit_mode = hit_mode

    def _count_hits(self, candidate_tokens: Sequence[str], required: Sequence[str]) -> int:
        required_set = set(required)
        if self.hit_mode == "distinct":
            return len(required_set.intersection(candidate_tokens))
        return sum(1 for token in candidate_tokens if token in required_set)

    def grade(self, candidate: str, reference: str) -> GradeResult:
        cand = extract_key_tokens(candidate or "")
        ref = extract_key_tokens(reference or "")

        # Token coverage
        required = _ordered_unique(ref.tokens)
        hits = self._count_hits(cand.tokens, required)
        token_score = min(1.0, hits / len(required)) if required else 1.0

        # Number recall, order-agnostic
        required_numbers = _ordered_unique(ref.numbers)
        cand_numbers = set(cand.numbers)
        num_hits = sum(1 for num in required_numbers if num in cand_numbers)
        num_score = num_hits / len(required_numbers) if required_numbers else 1.0

        overall = _round_half_up(100 * (TOKEN_WEIGHT * token_score + NUMBER_WEIGHT * num_score))
        ok = overall >= PASS_THRESHOLD

        cand_tokens = set(cand.tokens)
        result = GradeResult(
            overall=overall,
            ok=ok,
            required_tokens=required,
            required_numbers=required_numbers,
            token_score=token_score,
            num_score=num_score,
            missed_tokens=[t for t in required if t not in cand_tokens],
            missed_numbers=[n for n in required_numbers if n not in cand_numbers],
        )
        logger.debug(
            "Graded readback: overall=%d ok=%s hits=%d/%d numbers=%d/%d",
            overall, ok, hits, len(required), num_hits, len(required_numbers),
        )
        return result


_default_grader = ReadbackGrader()


def grade(candidate: str, reference: str) -> GradeResult:
    """Grade with the default (occurrence-counting) grader."""
    return _default_grader.grade(candidate, reference)
