"""
Runtime configuration for the ATC trainer.

Values come from the environment (a ``.env`` file in the working directory is
loaded first). Credentials for the speech providers are read by the adapters
themselves and are not stored here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv  # type: ignore

load_dotenv()

ENV_PREFIX = "ATC_TRAINER_"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name, default)
    return value


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class TrainerConfig:
    """Configuration for grading, orchestration and speech adapters"""
    catalog_path: Optional[str] = None
    hit_mode: str = "occurrence"
    session_length: int = 5
    quiz_choices: int = 4
    quiz_award: int = 1
    readback_award: int = 1
    session_award: int = 2
    asr_provider: str = "openai"
    tts_provider: str = "azure"
    tts_voice: Optional[str] = None
    tts_output_dir: str = "tts_output"

    @classmethod
    def from_env(cls) -> "TrainerConfig":
        defaults = cls()
        return cls(
            catalog_path=_env(ENV_PREFIX + "CATALOG") or defaults.catalog_path,
            hit_mode=_env(ENV_PREFIX + "HIT_MODE", defaults.hit_mode),
            session_length=_env_int(ENV_PREFIX + "SESSION_LENGTH", defaults.session_length),
            quiz_choices=_env_int(ENV_PREFIX + "QUIZ_CHOICES", defaults.quiz_choices),
            quiz_award=_env_int(ENV_PREFIX + "QUIZ_AWARD", defaults.quiz_award),
            readback_award=_env_int(ENV_PREFIX + "READBACK_AWARD", defaults.readback_award),
            session_award=_env_int(ENV_PREFIX + "SESSION_AWARD", defaults.session_award),
            asr_provider=_env(ENV_PREFIX + "ASR_PROVIDER", defaults.asr_provider),
            tts_provider=_env(ENV_PREFIX + "TTS_PROVIDER", defaults.tts_provider),
            tts_voice=_env(ENV_PREFIX + "TTS_VOICE") or defaults.tts_voice,
            tts_output_dir=_env(ENV_PREFIX + "TTS_OUTPUT_DIR", defaults.tts_output_dir),
        )
