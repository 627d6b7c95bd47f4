"""
Tests for the command line front end and configuration
"""

import io
import json
import os
import random
from unittest.mock import patch

import pytest

from atc_trainer.config import TrainerConfig
from atc_trainer.run_trainer import build_parser, cmd_practice, cmd_quiz, cmd_session, main
from atc_trainer.training import PhraseCatalog, build_question, random_phrase


REFERENCE = "Maintain three thousand until established, cleared ILS zero eight right, WestJet 407."


def _inputs(*answers):
    answers = iter(answers)
    return lambda prompt: next(answers)


# ============================================================================
# Configuration
# ============================================================================

class TestConfig:
    """Test environment-driven configuration"""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = TrainerConfig.from_env()
        assert config == TrainerConfig()
        assert config.hit_mode == "occurrence"
        assert config.session_award == 2

    @patch.dict(os.environ, {
        "ATC_TRAINER_HIT_MODE": "distinct",
        "ATC_TRAINER_SESSION_LENGTH": "3",
        "ATC_TRAINER_TTS_PROVIDER": "openai",
        "ATC_TRAINER_TTS_VOICE": "alloy",
    }, clear=True)
    def test_overrides(self):
        config = TrainerConfig.from_env()
        assert config.hit_mode == "distinct"
        assert config.session_length == 3
        assert config.tts_provider == "openai"
        assert config.tts_voice == "alloy"

    @patch.dict(os.environ, {"ATC_TRAINER_QUIZ_CHOICES": "four"}, clear=True)
    def test_bad_integer(self):
        with pytest.raises(ValueError, match="ATC_TRAINER_QUIZ_CHOICES"):
            TrainerConfig.from_env()


# ============================================================================
# Non-interactive commands
# ============================================================================

class TestGradeCommands:
    """Test grade, batch and catalog subcommands"""

    def test_grade_with_reference(self, capsys):
        code = main(["grade", "--reference", REFERENCE, "--readback", "Maintain three thousand, cleared ILS, WestJet."])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["overall"] == 49
        assert payload["label"] == "FAIL"
        assert "wer_metrics" not in payload

    def test_grade_with_phrase_id_and_wer(self, capsys):
        code = main([
            "grade", "--phrase-id", "speed-210", "--wer",
            "--readback", "Reduce speed two one zero, Alaska two one three.",
        ])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["ok"] is True
        assert "wer" in payload["wer_metrics"]

    def test_grade_distinct_mode(self, capsys):
        main(["grade", "--hit-mode", "distinct", "--reference", "maintain heading speed 210",
              "--readback", "maintain maintain maintain 210"])
        assert json.loads(capsys.readouterr().out)["overall"] == 57

    def test_grade_needs_a_reference(self, capsys):
        assert main(["grade", "--readback", "roger"]) == 1
        assert "Provide --reference or --phrase-id" in capsys.readouterr().err

    def test_grade_unknown_phrase(self, capsys):
        assert main(["grade", "--phrase-id", "nope", "--readback", "roger"]) == 1
        assert "Unknown phrase id" in capsys.readouterr().err

    def test_batch(self, tmp_path, capsys):
        attempts = tmp_path / "attempts.json"
        attempts.write_text(json.dumps({"attempts": [
            {"phrase_id": "speed-210", "readback": "Reduce speed two one zero, Alaska two one three."},
            {"reference": REFERENCE, "readback": "roger"},
            {"phrase_id": "speed-210"},
            {"phrase_id": "nope", "readback": "roger"},
        ]}), encoding="utf-8")
        out = tmp_path / "reports" / "grades.json"

        assert main(["batch", "--attempts", str(attempts), "--out", str(out)]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["total"] == 2
        assert summary["passed"] == 1
        assert summary["skipped"] == 2
        assert summary["pass_rate"] == 0.5

        report = json.loads(out.read_text(encoding="utf-8"))
        assert [g["index"] for g in report["grades"]] == [0, 1]
        assert report["summary"] == summary

    def test_batch_skips_non_string_fields(self, tmp_path, capsys):
        attempts = tmp_path / "attempts.json"
        attempts.write_text(json.dumps([
            {"reference": "climb 5", "readback": 5},
            {"reference": ["climb"], "readback": "climb"},
            {"phrase_id": 210, "readback": "speed"},
            {"reference": "climb 5", "readback": "climb 5"},
        ]), encoding="utf-8")

        assert main(["batch", "--attempts", str(attempts)]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["total"] == 1
        assert summary["passed"] == 1
        assert summary["skipped"] == 3

    def test_batch_missing_file(self, tmp_path, capsys):
        assert main(["batch", "--attempts", str(tmp_path / "missing.json")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_catalog_listing(self, capsys):
        assert main(["catalog", "--sector", "tower"]) == 0
        out = capsys.readouterr().out
        assert "yvr-tower-lineup" in out
        assert "yvr-ground-taxi" not in out

    def test_custom_catalog_path_missing(self, tmp_path, capsys):
        assert main(["--catalog", str(tmp_path / "none.json"), "catalog"]) == 1
        assert "Catalog file not found" in capsys.readouterr().err

    @patch.dict(os.environ, {}, clear=True)
    def test_voice_without_credentials(self, tmp_path, capsys):
        audio = tmp_path / "readback.wav"
        audio.write_bytes(b"RIFF")
        assert main(["voice", "--audio", str(audio), "--reference", REFERENCE]) == 1
        assert "Speech recognition unavailable" in capsys.readouterr().err


# ============================================================================
# Interactive commands
# ============================================================================

class TestInteractiveCommands:
    """Test quiz, practice and session loops with scripted input"""

    def test_quiz(self, small_catalog, capsys):
        args = build_parser().parse_args(["quiz", "--rounds", "1", "--seed", "5"])
        question = build_question(small_catalog, random.Random(5), choices=TrainerConfig().quiz_choices)
        answer = str(question.choices.index(question.answer) + 1)

        code = cmd_quiz(args, TrainerConfig(), lambda: small_catalog, input_func=_inputs("9", "x", answer))
        out = capsys.readouterr().out
        assert code == 0
        assert out.count("Pick a number between 1 and 3.") == 2
        assert "Quiz finished. Score: 1" in out

    def test_practice(self, small_catalog, capsys):
        args = build_parser().parse_args(["practice", "--rounds", "1", "--seed", "11"])
        phrase = random_phrase(small_catalog, random.Random(11))

        code = cmd_practice(args, TrainerConfig(), lambda: small_catalog,
                            input_func=_inputs("   ", phrase.expected_readback))
        out = capsys.readouterr().out
        assert code == 0
        assert "Type a readback to check your accuracy." in out
        assert "Great readback! Score: 100%" in out
        assert "Practice finished. Score: 1" in out

    def test_session_all_failed(self, small_catalog, capsys):
        args = build_parser().parse_args(["session", "--length", "2", "--seed", "3"])
        code = cmd_session(args, TrainerConfig(), lambda: small_catalog,
                           input_func=_inputs("", "roger", "roger"))
        out = capsys.readouterr().out
        assert code == 0
        assert "Speak or type your readback before scoring." in out
        assert out.count("Needs improvement.") == 2
        assert "Session complete. 0/2 readbacks passed. Score: 0" in out

    def test_session_pass_uses_session_award(self, small_catalog, capsys):
        phrase = small_catalog.get("lineup-08l")
        catalog = PhraseCatalog([phrase])
        args = build_parser().parse_args(["session"])

        code = cmd_session(args, TrainerConfig(), lambda: catalog, input_func=_inputs(phrase.expected_readback))
        out = capsys.readouterr().out
        assert code == 0
        assert "Session complete. 1/1 readbacks passed. Score: 2" in out

    @pytest.mark.parametrize("command", ["quiz", "practice", "session"])
    def test_input_ending_early_exits_cleanly(self, command, capsys):
        with patch("sys.stdin", io.StringIO("")):
            assert main([command, "--seed", "1"]) == 1
        assert "input ended before the drill finished" in capsys.readouterr().err

    def test_practice_passes_eof_through(self, small_catalog):
        def closed_input(prompt):
            raise EOFError

        args = build_parser().parse_args(["practice", "--rounds", "1"])
        with pytest.raises(EOFError):
            cmd_practice(args, TrainerConfig(), lambda: small_catalog, input_func=closed_input)

    def test_session_length_zero_rejected(self, capsys):
        assert main(["session", "--length", "0"]) == 1
        assert "Session length must be at least 1" in capsys.readouterr().err
