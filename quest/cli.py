from __future__ import annotations

import argparse
import logging
import sys
import typing as t

from quest.config import QuestConfig
from quest.errors import QuestError
from quest.file_utils import FileUtils
from quest.prompts import build_context
from quest.quest_ai import GeminiClient
from quest.session import LearningSession
from quest.styles import DEFAULT_STYLE, STYLES

QUIT_COMMANDS = {"/quit", "/exit", "/q"}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def _render(session: LearningSession, out: t.TextIO) -> None:
    print("", file=out)
    print(session.display_scene, file=out)
    if session.current_examples:
        print("\nConsider these different approaches:", file=out)
        for ex in session.current_examples:
            print(f"  • {ex}", file=out)
    if session.badges:
        latest = session.badges[-1]
        print(f"\n[{latest.tier.capitalize()} Medal] {latest.message}", file=out)
        print(f"Medals earned: {len(session.badges)} | Answers given: {len(session.history)}", file=out)
    print("", file=out)


def main(
    argv: list[str] | None = None,
    *,
    stdin: t.TextIO | None = None,
    stdout: t.TextIO | None = None,
    gateway: GeminiClient | None = None,
) -> int:
    stdin = stdin or sys.stdin
    out = stdout or sys.stdout

    parser = argparse.ArgumentParser(prog="quest", description="Turn study notes into an interactive learning adventure.")
    parser.add_argument("--pdf", help="Path to a PDF with the learning material")
    parser.add_argument("--notes", default="", help="Additional notes for the session")
    parser.add_argument("--style", default=DEFAULT_STYLE, choices=[s.id for s in STYLES])
    parser.add_argument("--env-file", action="append", default=None, help="Extra .env file to load")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if gateway is None:
        from set_env_vars import initialize_env_vars

        initialize_env_vars(dotenv_paths=args.env_file)
        gateway = GeminiClient(QuestConfig.from_env())

    pdf_text = ""
    if args.pdf:
        try:
            pdf_text = FileUtils().extract_text_from_pdf(args.pdf)
        except QuestError as e:
            print(f"Error: {e.user_message}", file=out)
            return 1

    try:
        context = build_context(pdf_text, args.notes)
    except ValueError as e:
        print(f"Error: {e}", file=out)
        return 2

    session = LearningSession(gateway)
    try:
        session.start(context, args.style)
    except QuestError as e:
        print(f"Error: {e.user_message}", file=out)
        return 1

    _render(session, out)

    while True:
        print("Your answer (/quit to stop): ", end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            break
        answer = line.strip()
        if answer.lower() in QUIT_COMMANDS:
            break
        if not answer:
            continue
        try:
            session.submit_answer(answer)
        except QuestError as e:
            print(f"Error: {e.user_message}", file=out)
            continue
        _render(session, out)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
