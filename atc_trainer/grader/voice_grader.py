from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import BaseReadbackGrader
from .readback_grader import ReadbackGrader
from .wer_calculator import WERCalculator
from ..speech.asr_processor import ASRProcessor

logger = logging.getLogger(__name__)


class VoiceReadbackGrader:
    """
    Grades spoken readbacks.

    Pipeline:
    1. Audio file -> ASR -> transcript
    2. Transcript -> readback grader -> grade
    3. WER between transcript and the reference readback (diagnostic)
    """

    def __init__(
        self,
        asr_processor: Optional[ASRProcessor] = None,
        grader: Optional[BaseReadbackGrader] = None,
        asr_provider: str = "openai",
    ):
        self.asr_processor = asr_processor or ASRProcessor(provider=asr_provider)
        self.grader = grader or ReadbackGrader()
        self.wer_calculator = WERCalculator()

    @staticmethod
    def _failure(error: str, asr_result: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "success": False,
            "error": error,
            "transcript": None,
            "grade": None,
            "wer_metrics": None,
            "asr_result": asr_result,
        }

    def grade_voice_readback(
        self,
        audio_path: str,
        reference: str,
        calculate_wer: bool = True,
    ) -> Dict[str, Any]:
        """
        Grade a recorded readback against a reference readback.

        Args:
            audio_path: Path to the recorded readback
            reference: Expected readback text
            calculate_wer: Whether to compute WER metrics

        Returns:
            Dictionary with "success", "error", "transcript", "grade"
            (a GradeResult), "wer_metrics" and the raw "asr_result"
        """
        audio_path = Path(audio_path)
        if not audio_path.exists():
            return self._failure(f"Audio file not found: {audio_path}")

        # Step 1: Transcribe audio
        asr_result = self.asr_processor.transcribe_audio(str(audio_path))
        if not asr_result["success"]:
            return self._failure(f"ASR failed: {asr_result['error']}", asr_result)

        transcript = asr_result["text"]
        if not transcript.strip():
            return self._failure("No readback heard in recording", asr_result)

        # Step 2: Grade transcript
        grade = self.grader.grade(transcript, reference)
        logger.info(f"Voice readback {audio_path.name}: {grade.overall}% ({grade.label.value})")

        # Step 3: WER against the reference readback
        wer_metrics = None
        if calculate_wer:
            wer_metrics = self.wer_calculator.calculate_wer(reference, transcript, return_details=True)

        return {
            "success": True,
            "error": None,
            "transcript": transcript,
            "grade": grade,
            "wer_metrics": wer_metrics,
            "asr_result": asr_result,
        }

    def batch_grade_voice_readbacks(self, tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Grade several recordings.

        Args:
            tasks: List of dicts with keys "audio_path" and "reference",
                and optionally "calculate_wer"
        """
        results = []
        for i, task in enumerate(tasks):
            try:
                results.append(self.grade_voice_readback(
                    audio_path=task["audio_path"],
                    reference=task["reference"],
                    calculate_wer=task.get("calculate_wer", True),
                ))
            except KeyError as e:
                results.append(self._failure(f"Task {i} is missing {e}"))
        return results
