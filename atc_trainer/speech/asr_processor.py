from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import azure.cognitiveservices.speech as speechsdk
    AZURE_AVAILABLE = True
except ImportError:
    AZURE_AVAILABLE = False

try:
    import openai
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False

logger = logging.getLogger(__name__)

# Bias Whisper towards radiotelephony spelling of numbers and fixes
WHISPER_PROMPT = (
    "Pilot readback of an air traffic control instruction, e.g. "
    "'Descend and maintain four thousand, turn left heading two two zero, WestJet 407.'"
)


def _failed(provider: str, error: str) -> Dict[str, Any]:
    return {
        "text": "",
        "confidence": None,
        "provider": provider,
        "success": False,
        "error": error,
        "words": [],
    }


class ASRProcessor:
    """Turn recorded readbacks into text using OpenAI Whisper or Azure Speech.

    The transcript is just another candidate string for the readback grader;
    nothing here knows about grading.
    """

    def __init__(
        self,
        provider: str = "openai",  # "openai" or "azure"
        openai_api_key: Optional[str] = None,
        openai_base_url: Optional[str] = None,
        openai_model: str = "whisper-1",
        azure_speech_key: Optional[str] = None,
        azure_speech_region: Optional[str] = None,
        language: str = "en-US",
    ):
        self.provider = provider.lower()
        self.language = language

        if self.provider == "openai":
            if not OPENAI_AVAILABLE:
                raise RuntimeError("OpenAI not available. Install with: pip install openai")

            self.openai_api_key = openai_api_key or os.getenv("OPENAI_API_KEY")
            self.openai_base_url = openai_base_url or os.getenv("OPENAI_BASE_URL")
            self.openai_model = openai_model

            if not self.openai_api_key:
                raise RuntimeError("OpenAI Whisper requires OPENAI_API_KEY")

            self.openai_client = openai.OpenAI(
                api_key=self.openai_api_key,
                base_url=self.openai_base_url,
            )

        elif self.provider == "azure":
            if not AZURE_AVAILABLE:
                raise RuntimeError(
                    "Azure Speech SDK not available. Install with: pip install azure-cognitiveservices-speech"
                )

            self.azure_speech_key = azure_speech_key or os.getenv("AZURE_SPEECH_KEY")
            self.azure_speech_region = azure_speech_region or os.getenv("AZURE_SPEECH_REGION")

            if not self.azure_speech_key or not self.azure_speech_region:
                raise RuntimeError("Azure Speech requires AZURE_SPEECH_KEY and AZURE_SPEECH_REGION")

            self.speech_config = speechsdk.SpeechConfig(
                subscription=self.azure_speech_key,
                region=self.azure_speech_region,
            )
            self.speech_config.speech_recognition_language = language
        else:
            raise ValueError(f"Unsupported ASR provider: {provider}. Use 'openai' or 'azure'")

    def transcribe_audio(self, audio_path: str) -> Dict[str, Any]:
        """Transcribe an audio file and return transcript with metadata."""
        audio_path = Path(audio_path)

        if not audio_path.exists():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        logger.info(f"Transcribing {audio_path.name} with {self.provider}")
        if self.provider == "openai":
            return self._transcribe_openai(audio_path)
        return self._transcribe_azure(audio_path)

    def _transcribe_openai(self, audio_path: Path) -> Dict[str, Any]:
        """Transcribe using OpenAI Whisper API."""
        try:
            with open(audio_path, "rb") as audio_file:
                transcript = self.openai_client.audio.transcriptions.create(
                    model=self.openai_model,
                    file=audio_file,
                    language=self.language.split("-")[0],
                    prompt=WHISPER_PROMPT,
                )
        except Exception as e:
            logger.warning(f"Whisper transcription failed for {audio_path.name}: {e}")
            return _failed("openai", str(e))

        return {
            "text": transcript.text.strip(),
            "confidence": None,  # Whisper API doesn't return confidence
            "provider": "openai",
            "success": True,
            "error": None,
            "words": [],
        }

    def _transcribe_azure(self, audio_path: Path) -> Dict[str, Any]:
        """Transcribe using Azure Speech single-shot recognition; readbacks are one utterance."""
        audio_config = speechsdk.audio.AudioConfig(filename=str(audio_path))
        recognizer = speechsdk.SpeechRecognizer(
            speech_config=self.speech_config,
            audio_config=audio_config,
        )

        try:
            result = recognizer.recognize_once()
        except Exception as e:
            logger.warning(f"Azure recognition failed for {audio_path.name}: {e}")
            return _failed("azure", str(e))

        if result.reason == speechsdk.ResultReason.RecognizedSpeech:
            return {
                "text": result.text.strip(),
                "confidence": None,
                "provider": "azure",
                "success": True,
                "error": None,
                "words": [],
            }
        if result.reason == speechsdk.ResultReason.NoMatch:
            return _failed("azure", "No speech recognized")
        if result.reason == speechsdk.ResultReason.Canceled:
            details = result.cancellation_details
            error_msg = f"Speech recognition canceled: {details.reason}"
            if details.error_details:
                error_msg += f" - {details.error_details}"
            return _failed("azure", error_msg)
        return _failed("azure", f"Unexpected recognition result: {result.reason}")

    async def transcribe_async(self, audio_path: str) -> Dict[str, Any]:
        """Async wrapper for transcription."""
        return await asyncio.to_thread(self.transcribe_audio, audio_path)

    def batch_transcribe(self, audio_paths: List[str]) -> Dict[str, Dict[str, Any]]:
        """Transcribe multiple audio files; missing files are reported, not raised."""
        results = {}
        for audio_path in audio_paths:
            try:
                results[audio_path] = self.transcribe_audio(audio_path)
            except FileNotFoundError as e:
                results[audio_path] = _failed(self.provider, str(e))
        return results
