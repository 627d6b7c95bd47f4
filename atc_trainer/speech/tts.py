"""
Module: atc_trainer.speech.tts

Purpose:
    "Radio" playback of controller transmissions.

    speak() is fire-and-forget: it starts synthesis and returns at once.
    A newer speak() supersedes whatever is still pending, and nothing in the
    grading path ever waits on audio.

Providers:
    - azure: Azure Speech, played on the default speaker
    - openai: OpenAI TTS, rendered to an MP3 under output_dir
"""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

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

DEFAULT_RATE = 1.02


def _prosody_rate(rate: float) -> str:
    percent = round((rate - 1.0) * 100)
    return f"{percent:+d}%"


class SpeechSynthesizer:
    def __init__(
        self,
        provider: str = "azure",
        voice: Optional[str] = None,
        output_dir: str = "tts_output",
        azure_speech_key: Optional[str] = None,
        azure_speech_region: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        openai_model: str = "tts-1",
    ):
        self.provider = provider.lower()
        self._lock = threading.Lock()
        self._pending = None
        self._stop_event = threading.Event()
        self.last_output: Optional[Path] = None

        if self.provider == "azure":
            if not AZURE_AVAILABLE:
                raise RuntimeError(
                    "Azure Speech SDK not available. Install with: pip install azure-cognitiveservices-speech"
                )
            key = azure_speech_key or os.getenv("AZURE_SPEECH_KEY")
            region = azure_speech_region or os.getenv("AZURE_SPEECH_REGION")
            if not key or not region:
                raise RuntimeError("Azure Speech requires AZURE_SPEECH_KEY and AZURE_SPEECH_REGION")

            self.voice = voice or "en-US-GuyNeural"
            self.speech_config = speechsdk.SpeechConfig(subscription=key, region=region)
            self.speech_config.speech_synthesis_voice_name = self.voice
            audio_config = speechsdk.audio.AudioOutputConfig(use_default_speaker=True)
            self.synthesizer = speechsdk.SpeechSynthesizer(
                speech_config=self.speech_config,
                audio_config=audio_config,
            )

        elif self.provider == "openai":
            if not OPENAI_AVAILABLE:
                raise RuntimeError("OpenAI not available. Install with: pip install openai")
            api_key = openai_api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise RuntimeError("OpenAI TTS requires OPENAI_API_KEY")

            self.voice = voice or "onyx"
            self.openai_model = openai_model
            self.output_dir = Path(output_dir)
            self.openai_client = openai.OpenAI(api_key=api_key)
        else:
            raise ValueError(f"Unsupported TTS provider: {provider}. Use 'azure' or 'openai'")

    def speak(self, text: str, rate: float = DEFAULT_RATE) -> None:
        """Start speaking text and return immediately, cancelling anything pending."""
        if not text or not text.strip():
            return
        with self._lock:
            self._cancel_pending()
            if self.provider == "azure":
                self._pending = self.synthesizer.speak_ssml_async(self._build_ssml(text, rate))
            else:
                self._stop_event = threading.Event()
                worker = threading.Thread(
                    target=self._render_openai,
                    args=(text, rate, self._stop_event),
                    name="tts_render",
                    daemon=True,
                )
                self._pending = worker
                worker.start()

    def stop(self) -> None:
        """Cancel pending synthesis, if any."""
        with self._lock:
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._pending is None:
            return
        if self.provider == "azure":
            self.synthesizer.stop_speaking_async()
        else:
            self._stop_event.set()
        self._pending = None

    def _build_ssml(self, text: str, rate: float) -> str:
        return (
            '<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="en-US">'
            f'<voice name="{self.voice}"><prosody rate="{_prosody_rate(rate)}">'
            f"{escape(text)}"
            "</prosody></voice></speak>"
        )

    def _render_openai(self, text: str, rate: float, stop_event: threading.Event) -> None:
        try:
            response = self.openai_client.audio.speech.create(
                model=self.openai_model,
                voice=self.voice,
                input=text,
                speed=rate,
            )
        except Exception as e:
            logger.warning(f"TTS request failed: {e}")
            return

        if stop_event.is_set():
            logger.debug("TTS superseded before it was written")
            return

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"transmission_{time.time_ns()}.mp3"
        output_path.write_bytes(response.content)
        self.last_output = output_path
        logger.info(f"Transmission audio written to {output_path}")
