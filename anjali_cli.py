"""
Console host for the Anjali decision core.

Reads typed questions, prints the decision, and exposes teaching and
feedback as slash commands. Every answer printed to the console counts
as a completed presentation.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from anjali.base import IntentCategory
from anjali.config import EngineConfig, env_flag, load_engine_config
from anjali.engine import ThinkingEngine
from anjali.session import AnjaliSession, SessionConfig
from anjali.storage import open_storage


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask, teach and correct the Anjali decision core.")
    parser.add_argument(
        "--data-path",
        type=Path,
        default=Path("data"),
        help="Directory holding the persisted memory.",
    )
    parser.add_argument(
        "--backend",
        choices=("json", "sqlite", "memory"),
        default="json",
        help="Storage substrate for the memory blob.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional JSON file with an 'overrides' section for EngineConfig.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log decision traces (also enabled by ANJALI_VERBOSE=1).",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def print_help() -> None:
    print("\n📖 Commands:")
    print("   /teach प्रश्न | उत्तर  - Teach a question/answer pair")
    print("   /stats               - Show memory statistics")
    print("   /+                   - Upvote last answer")
    print("   /-                   - Downvote last answer")
    print("   /forget <id>         - Remove a concept")
    print("   /quit                - Exit the program")
    print()


def handle_command(session: AnjaliSession, line: str) -> bool:
    """Run a slash command; returns False when the loop should stop."""
    command, _, rest = line[1:].partition(" ")
    command = command.lower()

    if command in ("quit", "exit"):
        return False

    if command == "help":
        print_help()
    elif command == "teach":
        question, sep, answer = rest.partition("|")
        if not sep:
            print("❌ Usage: /teach प्रश्न | उत्तर")
        elif session.teach(question.strip(), answer.strip()):
            print(f"✅ Learned: {question.strip()} → {answer.strip()}")
        else:
            print("❌ Could not learn that (question needs at least two meaningful words)")
    elif command == "stats":
        stats = session.get_stats()
        print("\n📊 Statistics:")
        print(f"   Concepts: {stats['total_concepts']}")
        print(f"   Average confidence: {stats['average_confidence']:.2f}")
        print(f"   Learned: {stats['learned']}  Answered: {stats['answered']}  Rejected: {stats['rejected']}")
        classifier = session.engine.normalizer.classifier
        for name, count in sorted(stats["by_intent"].items()):
            print(f"   {classifier.get_intent_description(IntentCategory[name])}: {count}")
        print()
    elif command == "+":
        print("👍 Upvoted" if session.upvote() else "⚠️  No recent answer to upvote")
    elif command == "-":
        print("👎 Downvoted" if session.downvote() else "⚠️  No recent answer to downvote")
    elif command == "forget":
        concept_id = rest.strip()
        if session.engine.forget(concept_id):
            print(f"🗑️  Removed {concept_id}")
        else:
            print(f"⚠️  No concept {concept_id!r}")
    else:
        print(f"⚠️  Unknown command: /{command}")
        print("   Type '/help' for available commands")
    return True


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)

    verbose = args.verbose or env_flag("ANJALI_VERBOSE")
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_engine_config(args.config) if args.config else EngineConfig()
    storage = open_storage(args.backend, args.data_path)
    engine = ThinkingEngine(storage, config=config)
    session = AnjaliSession(engine, SessionConfig())

    print("=" * 60)
    print("ANJALI - प्रश्न पूछें, सिखाएँ, सुधारें")
    print("=" * 60)
    print(f"   Concepts in memory: {len(engine.store)}")
    print("   Type '/help' for commands")
    print()

    while True:
        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue

        if user_input.startswith("/"):
            if not handle_command(session, user_input):
                print("\nGoodbye!")
                break
            continue

        for reply in session.process_message(user_input):
            if reply.command:
                print(f"⏹️  {reply.command}")
                continue
            suffix = f"  [{reply.concept_id}]" if reply.concept_id else ""
            print(f"Anjali: {reply.text}{suffix}")
        session.presentation_finished(completed=True)

    return 0


if __name__ == "__main__":
    sys.exit(main())
