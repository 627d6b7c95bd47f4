"""Speech adapters: ASR produces candidate readbacks, TTS plays transmissions."""

from .asr_processor import ASRProcessor
from .tts import SpeechSynthesizer

__all__ = ["ASRProcessor", "SpeechSynthesizer"]
