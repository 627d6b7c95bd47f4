from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .normalizer import tokenize

Alignment = List[Tuple[str, str, str]]


class WERCalculator:
    """Word error rate between a reference readback and what was actually said.

    Purely diagnostic: it is reported next to a grade but never feeds into it.
    """

    @staticmethod
    def tokenize(text: str) -> List[str]:
        """Normalizer words with sentence periods dropped (decimals like 118.7 survive)."""
        words = (word.strip(".") for word in tokenize(text))
        return [word for word in words if word]

    @staticmethod
    def edit_distance(ref_words: List[str], hyp_words: List[str]) -> Tuple[int, List[List[int]]]:
        """Levenshtein distance over words; returns (distance, dp table) for traceback."""
        rows, cols = len(ref_words) + 1, len(hyp_words) + 1
        table = [[0] * cols for _ in range(rows)]
        for i in range(rows):
            table[i][0] = i
        for j in range(cols):
            table[0][j] = j

        for i in range(1, rows):
            for j in range(1, cols):
                if ref_words[i - 1] == hyp_words[j - 1]:
                    table[i][j] = table[i - 1][j - 1]
                else:
                    table[i][j] = 1 + min(table[i - 1][j], table[i][j - 1], table[i - 1][j - 1])
        return table[-1][-1], table

    @staticmethod
    def align(ref_words: List[str], hyp_words: List[str], table: List[List[int]]) -> Alignment:
        """Trace the dp table back into (ref_word, hyp_word, op) triples, op in MATCH/SUB/DEL/INS."""
        i, j = len(ref_words), len(hyp_words)
        steps: Alignment = []
        while i > 0 or j > 0:
            if i > 0 and j > 0 and ref_words[i - 1] == hyp_words[j - 1]:
                steps.append((ref_words[i - 1], hyp_words[j - 1], "MATCH"))
                i, j = i - 1, j - 1
            elif i > 0 and j > 0 and table[i][j] == table[i - 1][j - 1] + 1:
                steps.append((ref_words[i - 1], hyp_words[j - 1], "SUB"))
                i, j = i - 1, j - 1
            elif i > 0 and table[i][j] == table[i - 1][j] + 1:
                steps.append((ref_words[i - 1], "*", "DEL"))
                i -= 1
            else:
                steps.append(("*", hyp_words[j - 1], "INS"))
                j -= 1
        steps.reverse()
        return steps

    @classmethod
    def calculate_wer(cls, reference: str, hypothesis: str, return_details: bool = False) -> Dict[str, Any]:
        """
        Calculate word error rate of hypothesis against reference.

        Args:
            reference: Expected readback
            hypothesis: Typed or transcribed readback
            return_details: Include the word alignment and S/D/I counts

        Returns:
            Dictionary with "wer", "distance", "reference_length",
            "hypothesis_length" and, with details, "substitutions",
            "deletions", "insertions", "alignment"
        """
        ref_words = cls.tokenize(reference)
        hyp_words = cls.tokenize(hypothesis)

        if not ref_words:
            distance = len(hyp_words)
            wer = 0.0 if not hyp_words else float("inf")
            alignment: Alignment = [("*", word, "INS") for word in hyp_words]
        else:
            distance, table = cls.edit_distance(ref_words, hyp_words)
            wer = distance / len(ref_words)
            alignment = cls.align(ref_words, hyp_words, table) if return_details else []

        result: Dict[str, Any] = {
            "wer": wer,
            "distance": distance,
            "reference_length": len(ref_words),
            "hypothesis_length": len(hyp_words),
        }
        if return_details:
            result["substitutions"] = sum(1 for _, _, op in alignment if op == "SUB")
            result["deletions"] = sum(1 for _, _, op in alignment if op == "DEL")
            result["insertions"] = sum(1 for _, _, op in alignment if op == "INS")
            result["alignment"] = alignment
        return result
