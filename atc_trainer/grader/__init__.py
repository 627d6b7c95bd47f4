"""Grader package: readback grading utilities.

This module provides:
- Text normalization and key-token extraction
- Grade result types and the grader interface
- The lexical/numeric readback grader
- WER diagnostics
- Voice readback grading through ASR
"""

from .base import BaseReadbackGrader, GradeLabel, GradeResult, KeyTokenSet
from .normalizer import normalize_text, tokenize, extract_numbers
from .key_tokens import KEY_VOCABULARY, extract_key_tokens
from .readback_grader import PASS_THRESHOLD, ReadbackGrader, grade
from .wer_calculator import WERCalculator
from .voice_grader import VoiceReadbackGrader

__all__ = [
    "BaseReadbackGrader",
    "GradeLabel",
    "GradeResult",
    "KeyTokenSet",
    "normalize_text",
    "tokenize",
    "extract_numbers",
    "KEY_VOCABULARY",
    "extract_key_tokens",
    "PASS_THRESHOLD",
    "ReadbackGrader",
    "grade",
    "WERCalculator",
    "VoiceReadbackGrader",
]
