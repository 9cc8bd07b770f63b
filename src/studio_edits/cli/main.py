"""CLI entry point for applying edit batches and driving their history."""
import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from studio_edits.config import ConfigError, Settings, load_settings
from studio_edits.history import (
    HistoryManager,
    HistoryRegistry,
    HistoryRestoreError,
    handle_history_action,
)
from studio_edits.models import EditValidationError
from studio_edits.orchestrator import ApplyEditsResult, PatchApplicationError, PatchOrchestrator
from studio_edits.patching import PatchEngine, parse_search_replace_blocks
from studio_edits.utils import generate_state_diff

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_PATCH_FAILURE = 2
EXIT_HISTORY_ERROR = 3
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

HISTORY_ACTIONS = ("undo", "redo", "get", "clear", "summary")
CLI_SESSION = "cli"


class InputFileError(Exception):
    """Raised when a CLI input file is missing or malformed."""


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="studio-edits",
        description="Apply AI-proposed edits to a file snapshot with undo/redo history",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply an edit batch to a snapshot")
    apply_parser.add_argument("snapshot", type=str, help="JSON file mapping paths to contents")
    apply_parser.add_argument(
        "edits",
        type=str,
        help="JSON edit list, JSON {edits, explanation} object, or SEARCH/REPLACE block text",
    )
    apply_parser.add_argument(
        "--target",
        type=str,
        default="",
        help="File path for SEARCH/REPLACE block input (for example: /main.js)",
    )
    apply_parser.add_argument("--explanation", type=str, default=None, help="Summary stored in history")
    apply_parser.add_argument(
        "--history-file",
        type=str,
        default="",
        help="Timeline JSON to load, append the applied batch to, and save back",
    )
    apply_parser.add_argument(
        "--output",
        type=str,
        default="",
        help="Write the resulting snapshot JSON to this path",
    )
    apply_parser.add_argument(
        "--atomic",
        action="store_true",
        help="Discard every change if any edit fails",
    )
    apply_parser.add_argument("--show-diff", action="store_true", help="Print a unified diff of the changes")
    apply_parser.add_argument("--output-json", action="store_true", help="Output results as JSON")
    apply_parser.add_argument(
        "--dry-run", action="store_true", help="Apply in memory only; write nothing"
    )

    history_parser = subparsers.add_parser("history", help="Run an action on a stored timeline")
    history_parser.add_argument("action", type=str, choices=HISTORY_ACTIONS, help="History action")
    history_parser.add_argument("--history-file", type=str, required=True, help="Timeline JSON file")
    history_parser.add_argument("--entry-id", type=str, default=None, help="Entry id for the get action")
    history_parser.add_argument("--output-json", action="store_true", help="Output results as JSON")
    return parser


def configure_logging(settings: Settings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _read_text(raw_path: str) -> str:
    path = Path(raw_path).expanduser()
    if not path.is_file():
        raise InputFileError(f"'{raw_path}' is not a file.")
    return path.read_text(encoding="utf-8")


def load_snapshot(raw_path: str) -> dict[str, str]:
    """Read a snapshot JSON object of path -> content."""
    try:
        data = json.loads(_read_text(raw_path))
    except json.JSONDecodeError as exc:
        raise InputFileError(f"Snapshot '{raw_path}' is not valid JSON: {exc}") from exc
    if not isinstance(data, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in data.items()
    ):
        raise InputFileError(f"Snapshot '{raw_path}' must map paths to string contents.")
    return data


def load_edits(raw_path: str, target: str) -> tuple[list[Any], str | None]:
    """Read an edit batch and its optional explanation.

    Accepts a JSON list of edits, a JSON object with "edits" and
    "explanation", or SEARCH/REPLACE block text when `target` is given.
    """
    text = _read_text(raw_path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        if not target:
            raise InputFileError(
                f"Edits '{raw_path}' are not JSON; pass --target to read SEARCH/REPLACE blocks."
            )
        blocks = parse_search_replace_blocks(text, target)
        if not blocks:
            raise InputFileError(f"No SEARCH/REPLACE blocks found in '{raw_path}'.")
        return list(blocks), None

    if isinstance(data, list):
        return data, None
    if isinstance(data, dict) and isinstance(data.get("edits"), list):
        explanation = data.get("explanation")
        return data["edits"], explanation if isinstance(explanation, str) else None
    raise InputFileError(f"Edits '{raw_path}' must be a list or an object with an 'edits' list.")


def load_history(raw_path: str, max_history_size: int) -> HistoryManager:
    """Load a stored timeline, or start an empty one if the file is absent."""
    path = Path(raw_path).expanduser()
    if not path.exists():
        return HistoryManager(max_history_size=max_history_size)
    return HistoryManager.from_json(path.read_text(encoding="utf-8"), max_history_size=max_history_size)


def save_json(raw_path: str, payload: str) -> None:
    path = Path(raw_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")


def print_apply_human(result_payload: dict, diff_text: str | None) -> None:
    """Print an apply result in human-readable format."""
    print(f"\n{'='*60}")
    print("Patch Results")
    print(f"{'='*60}")
    print(f"\nEdits applied: {result_payload['applied']} of {result_payload['total']}")
    if result_payload.get("historyId"):
        print(f"History entry: {result_payload['historyId']}")
    changed = result_payload.get("changedFiles", [])
    print(f"Changed files: {', '.join(changed) if changed else '(none)'}")

    errors = result_payload.get("errors", [])
    if errors:
        print(f"\nErrors ({len(errors)}):")
        for err in errors:
            print(f"  - {err}")

    if diff_text:
        print(f"\n{diff_text}")
    print(f"\n{'='*60}")


def run_apply(args: argparse.Namespace, settings: Settings) -> int:
    base = load_snapshot(args.snapshot)
    edits, file_explanation = load_edits(args.edits, args.target)
    explanation = args.explanation or file_explanation

    record = bool(args.history_file) and not args.dry_run
    registry = HistoryRegistry(max_history_size=settings.max_history_size)
    if record:
        registry.attach(CLI_SESSION, load_history(args.history_file, settings.max_history_size))
    orchestrator = PatchOrchestrator(
        engine=PatchEngine(atomic=args.atomic or settings.atomic),
        registry=registry,
    )

    try:
        outcome = orchestrator.apply_edits(CLI_SESSION, base, edits, explanation)
    except PatchApplicationError as exc:
        outcome = ApplyEditsResult.from_rejected(exc.result, explanation)

    if record and outcome.history_id:
        save_json(args.history_file, registry.get(CLI_SESSION).to_json())
        logger.info("Recorded history entry %s in %s", outcome.history_id, args.history_file)

    if args.output and not args.dry_run:
        save_json(args.output, json.dumps(outcome.files, indent=2))

    payload = outcome.to_payload()
    diff_text = generate_state_diff(base, outcome.files) if args.show_diff else None

    if args.output_json:
        if diff_text is not None:
            payload["diff"] = diff_text
        print(json.dumps(payload, indent=2))
    else:
        print_apply_human(payload, diff_text)

    if outcome.errors and not outcome.changed_paths:
        return EXIT_PATCH_FAILURE
    return EXIT_SUCCESS


def run_history(args: argparse.Namespace, settings: Settings) -> int:
    manager = load_history(args.history_file, settings.max_history_size)
    response = handle_history_action(manager, {"action": args.action, "entryId": args.entry_id})

    if response.success and args.action in ("undo", "redo", "clear"):
        save_json(args.history_file, manager.to_json())

    payload = response.to_payload()
    if args.output_json:
        print(json.dumps(payload, indent=2))
    elif response.success:
        print(f"{args.action}: ok")
        if "summary" in payload:
            for key, value in payload["summary"].items():
                print(f"  {key}: {value}")
        if "files" in payload:
            print(f"  files: {', '.join(sorted(payload['files']))}")
    else:
        print(f"{args.action}: {response.error}", file=sys.stderr)

    return EXIT_SUCCESS if response.success else EXIT_HISTORY_ERROR


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        return _handle_error("Configuration error", exc, args.verbose, EXIT_INVALID_INPUT)
    configure_logging(settings, args.verbose)

    try:
        if args.command == "apply":
            return run_apply(args, settings)
        return run_history(args, settings)

    except (InputFileError, EditValidationError) as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    except HistoryRestoreError as exc:
        return _handle_error("History error", exc, args.verbose, EXIT_HISTORY_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)
