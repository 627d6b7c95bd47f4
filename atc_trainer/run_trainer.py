#!/usr/bin/env python3
"""
CLI for ATC phraseology practice.

Usage:
  atc-trainer grade --phrase-id yvr-ground-taxi \
      --readback "Taxi to zero eight left via Alpha Charlie, hold short zero eight right, Jazz 3230"

  atc-trainer grade --reference "..." --readback "..." [--wer] [--hit-mode distinct]

  atc-trainer batch --attempts attempts.json [--out grades.json]

  atc-trainer quiz [--rounds 5] [--seed 7]
  atc-trainer practice [--rounds 5] [--seed 7]
  atc-trainer session [--length 5] [--seed 7] [--speak]
  atc-trainer voice --audio readback.wav --phrase-id yvr-tower-lineup
  atc-trainer catalog [--sector Tower]
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from tqdm import tqdm

from .config import TrainerConfig
from .exceptions import CatalogError, EmptyReadbackError, SessionError, TrainerError
from .grader import GradeResult, ReadbackGrader, VoiceReadbackGrader, WERCalculator
from .training import (
    PhraseCatalog,
    ScoreBoard,
    advance,
    build_question,
    check_choice,
    check_readback,
    load_catalog,
    random_phrase,
    score_step,
    start_session,
)

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]


def _resolve_reference(args: argparse.Namespace, catalog_loader: Callable[[], PhraseCatalog]) -> str:
    if args.reference:
        return args.reference
    if args.phrase_id:
        return catalog_loader().get(args.phrase_id).expected_readback
    raise TrainerError("Provide --reference or --phrase-id")


def _format_grade(result: GradeResult) -> str:
    lines = [
        f"{'Great readback!' if result.ok else 'Needs improvement.'} Score: {result.overall}%",
        f"  Key tokens: {', '.join(result.required_tokens) or '-'}",
        f"  Numbers: {', '.join(result.required_numbers) or '-'}",
    ]
    if result.missed_tokens:
        lines.append(f"  Key tokens missed: {', '.join(result.missed_tokens)}")
    if result.missed_numbers:
        lines.append(f"  Numbers missed: {', '.join(result.missed_numbers)}")
    return "\n".join(lines)


def _summarize(results: List[GradeResult]) -> Dict[str, Any]:
    total = len(results)
    passed = sum(1 for r in results if r.ok)
    mean = (sum(r.overall for r in results) / total) if total else 0.0
    return {
        "total": total,
        "passed": passed,
        "failed": total - passed,
        "pass_rate": (passed / total) if total else 0.0,
        "mean_overall": round(mean, 2),
    }


def _load_attempts(path: str) -> List[Dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise TrainerError(f"Attempts file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise TrainerError(f"Attempts file {path} is not valid JSON: {e}") from e
    attempts = data.get("attempts") if isinstance(data, dict) else data
    if not isinstance(attempts, list):
        raise TrainerError(f"Attempts file {path} must be a list or contain an 'attempts' list")
    return attempts


# ============================================================================
# Subcommands
# ============================================================================

def cmd_grade(args: argparse.Namespace, config: TrainerConfig, catalog_loader) -> int:
    reference = _resolve_reference(args, catalog_loader)
    grader = ReadbackGrader(hit_mode=args.hit_mode or config.hit_mode)
    result = grader.grade(args.readback, reference)
    payload = result.to_dict()
    if args.wer:
        payload["wer_metrics"] = WERCalculator.calculate_wer(reference, args.readback)
    print(json.dumps(payload, indent=2))
    return 0


def cmd_batch(args: argparse.Namespace, config: TrainerConfig, catalog_loader) -> int:
    attempts = _load_attempts(args.attempts)
    grader = ReadbackGrader(hit_mode=args.hit_mode or config.hit_mode)
    catalog: Optional[PhraseCatalog] = None

    graded: List[Dict[str, Any]] = []
    results: List[GradeResult] = []
    skipped = 0
    for i, attempt in enumerate(tqdm(attempts, desc="Grading readbacks")):
        fields = attempt if isinstance(attempt, dict) else {}
        readback = fields.get("readback")
        reference = fields.get("reference")
        phrase_id = fields.get("phrase_id")
        if any(value is not None and not isinstance(value, str) for value in (readback, reference, phrase_id)):
            logger.warning(f"Attempt {i}: readback, reference and phrase_id must be strings, skipping")
            skipped += 1
            continue
        readback = (readback or "").strip()
        if not reference and phrase_id:
            catalog = catalog or catalog_loader()
            try:
                reference = catalog.get(phrase_id).expected_readback
            except CatalogError as e:
                logger.warning(f"Attempt {i}: {e}")
        if not readback or not reference:
            logger.warning(f"Attempt {i}: needs a readback and a reference or phrase_id, skipping")
            skipped += 1
            continue

        result = grader.grade(readback, reference)
        results.append(result)
        graded.append({"index": i, "phrase_id": phrase_id, "readback": readback, **result.to_dict()})

    summary = _summarize(results)
    summary["skipped"] = skipped
    print(json.dumps(summary, indent=2))

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump({"summary": summary, "grades": graded}, f, indent=2)
        logger.info(f"Wrote {len(graded)} grades to {out_path}")
    return 0


def cmd_quiz(
    args: argparse.Namespace,
    config: TrainerConfig,
    catalog_loader,
    input_func: InputFunc = input,
) -> int:
    catalog = catalog_loader()
    rng = random.Random(args.seed)
    board = ScoreBoard()

    for round_no in range(1, args.rounds + 1):
        question = build_question(catalog, rng, choices=config.quiz_choices)
        print(f"\n[{round_no}/{args.rounds}] Controller says: {question.phrase.atc}")
        print(f"Callsign: {question.phrase.callsign}")
        for n, choice in enumerate(question.choices, start=1):
            print(f"  {n}. {choice}")

        picked = None
        while picked is None:
            answer = input_func("Your answer (number): ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(question.choices):
                picked = question.choices[int(answer) - 1]
            else:
                print(f"Pick a number between 1 and {len(question.choices)}.")

        board, correct = check_choice(question, picked, board, award=config.quiz_award)
        if correct:
            print("Correct - great situational awareness.")
        else:
            print(f"Not quite. Correct answer: {question.answer}")
        print(f"Score: {board.score} - Streak: {board.streak}")

    print(f"\nQuiz finished. Score: {board.score}")
    return 0


def cmd_practice(
    args: argparse.Namespace,
    config: TrainerConfig,
    catalog_loader,
    input_func: InputFunc = input,
) -> int:
    catalog = catalog_loader()
    rng = random.Random(args.seed)
    grader = ReadbackGrader(hit_mode=config.hit_mode)
    board = ScoreBoard()

    for round_no in range(1, args.rounds + 1):
        phrase = random_phrase(catalog, rng)
        print(f"\n[{round_no}/{args.rounds}] Controller says: {phrase.atc}")
        print(f"Callsign: {phrase.callsign}")
        while True:
            try:
                board, result = check_readback(
                    phrase, input_func("Your readback: "), board, grader, award=config.readback_award
                )
                break
            except EmptyReadbackError:
                print("Type a readback to check your accuracy.")
        print(_format_grade(result))
        if not result.ok:
            print(f"  Ideal: {phrase.expected_readback}")
        print(f"Score: {board.score} - Streak: {board.streak}")

    print(f"\nPractice finished. Score: {board.score}")
    return 0


def _make_speaker(args: argparse.Namespace, config: TrainerConfig):
    if not getattr(args, "speak", False):
        return None
    from .speech import SpeechSynthesizer

    try:
        return SpeechSynthesizer(
            provider=config.tts_provider,
            voice=config.tts_voice,
            output_dir=config.tts_output_dir,
        )
    except (RuntimeError, ValueError) as e:
        logger.warning(f"Speech output disabled: {e}")
        return None


def cmd_session(
    args: argparse.Namespace,
    config: TrainerConfig,
    catalog_loader,
    input_func: InputFunc = input,
) -> int:
    catalog = catalog_loader()
    grader = ReadbackGrader(hit_mode=config.hit_mode)
    speaker = _make_speaker(args, config)
    length = args.length if args.length is not None else config.session_length
    state = start_session(catalog, random.Random(args.seed), length=length)

    while state.current is not None:
        phrase = state.current
        print(f"\nController says: {phrase.atc}")
        print(f"Callsign: {phrase.callsign}")
        if speaker is not None:
            speaker.speak(phrase.atc)

        while not state.scored:
            readback = input_func("Your readback: ")
            try:
                state, result = score_step(state, readback, grader, award=config.session_award)
            except SessionError as e:
                print(e)
                break
            except TrainerError as e:
                print(e)
                continue
            print(_format_grade(result))
            if not result.ok:
                print(f"  Ideal: {phrase.expected_readback}")
            print(f"Score: {state.board.score} - Streak: {state.board.streak}")

        state = advance(state)

    if speaker is not None:
        speaker.stop()
    passed = sum(1 for step in state.history if step.result.ok)
    print(f"\nSession complete. {passed}/{len(state.history)} readbacks passed. Score: {state.board.score}")
    return 0


def cmd_voice(args: argparse.Namespace, config: TrainerConfig, catalog_loader) -> int:
    reference = _resolve_reference(args, catalog_loader)
    try:
        grader = VoiceReadbackGrader(
            grader=ReadbackGrader(hit_mode=config.hit_mode),
            asr_provider=args.asr_provider or config.asr_provider,
        )
    except RuntimeError as e:
        raise TrainerError(f"Speech recognition unavailable: {e}") from e
    outcome = grader.grade_voice_readback(args.audio, reference)
    if not outcome["success"]:
        raise TrainerError(outcome["error"])

    print(f"Heard: {outcome['transcript']}")
    print(_format_grade(outcome["grade"]))
    wer = outcome["wer_metrics"]
    if wer is not None:
        print(f"  WER vs ideal readback: {wer['wer']:.2f}")
    return 0


def cmd_catalog(args: argparse.Namespace, config: TrainerConfig, catalog_loader) -> int:
    catalog = catalog_loader()
    if args.sector:
        catalog = catalog.filter_sector(args.sector)
    for phrase in catalog:
        print(f"{phrase.id:<28} [{phrase.sector or '-'}] {phrase.atc}")
    return 0


# ============================================================================
# Entry point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="atc-trainer", description="ATC phraseology and readback trainer")
    parser.add_argument("--catalog", default=None, help="Path to a phrase catalog JSON file")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_grade = sub.add_parser("grade", help="Grade a single readback")
    p_grade.add_argument("--readback", required=True)
    p_grade.add_argument("--reference", required=False)
    p_grade.add_argument("--phrase-id", required=False, dest="phrase_id")
    p_grade.add_argument("--wer", action="store_true", help="Include word error rate against the reference")
    p_grade.add_argument("--hit-mode", choices=["occurrence", "distinct"], default=None, dest="hit_mode")

    p_batch = sub.add_parser("batch", help="Grade a JSON list of readback attempts")
    p_batch.add_argument("--attempts", required=True, help="JSON list of {phrase_id|reference, readback}")
    p_batch.add_argument("--out", required=False, help="Optional path to write detailed grades JSON")
    p_batch.add_argument("--hit-mode", choices=["occurrence", "distinct"], default=None, dest="hit_mode")

    p_quiz = sub.add_parser("quiz", help="Multiple-choice: match transmissions to meanings")
    p_quiz.add_argument("--rounds", type=int, default=5)
    p_quiz.add_argument("--seed", type=int, default=None)

    p_practice = sub.add_parser("practice", help="Single-shot readback practice on random phrases")
    p_practice.add_argument("--rounds", type=int, default=5)
    p_practice.add_argument("--seed", type=int, default=None)

    p_session = sub.add_parser("session", help="Sequential readback session")
    p_session.add_argument("--length", type=int, default=None)
    p_session.add_argument("--seed", type=int, default=None)
    p_session.add_argument("--speak", action="store_true", help="Play transmissions through TTS")

    p_voice = sub.add_parser("voice", help="Grade a recorded readback")
    p_voice.add_argument("--audio", required=True)
    p_voice.add_argument("--reference", required=False)
    p_voice.add_argument("--phrase-id", required=False, dest="phrase_id")
    p_voice.add_argument("--asr-provider", choices=["openai", "azure"], default=None, dest="asr_provider")

    p_catalog = sub.add_parser("catalog", help="List phrases")
    p_catalog.add_argument("--sector", required=False)

    return parser


COMMANDS = {
    "grade": cmd_grade,
    "batch": cmd_batch,
    "quiz": cmd_quiz,
    "practice": cmd_practice,
    "session": cmd_session,
    "voice": cmd_voice,
    "catalog": cmd_catalog,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    config = TrainerConfig.from_env()
    catalog_path = args.catalog or config.catalog_path

    def catalog_loader() -> PhraseCatalog:
        return load_catalog(catalog_path)

    try:
        return COMMANDS[args.cmd](args, config, catalog_loader)
    except (TrainerError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except EOFError:
        logger.warning("Input ended before the drill finished")
        print("\nError: input ended before the drill finished", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
