#!/usr/bin/env python3
"""
Memvox - voice memory assistant
Entry point for running the command core from a terminal.

Typed lines stand in for recognized utterances; spoken feedback is printed.

Usage:
    python run.py                              # Use the configured memory file
    python run.py --memory-file notes.json     # Use a different memory file
    python run.py --category work              # Start with a different default category
    python run.py --log-level DEBUG            # Show interpreter decisions
"""
import argparse
import sys

from rich.console import Console
from rich.markup import escape

from memvox.core.assistant import MemoryAssistant
from memvox.core.config import Config
from memvox.core.logger import init_logger, get_logger
from memvox.memory.executor import DisplayDirective, ExecutionResult
from memvox.memory.record import resolve_category
from memvox.memory.storage import JsonFileStorage

EXIT_WORDS = ("exit", "quit", "goodbye")

console = Console()


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Memvox - dictate, categorize and retrieve short memories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                          # Normal mode
  python run.py --memory-file my.json    # Custom memory file
  python run.py --category Work          # Default category Work
  python run.py --quiet                  # Hide internal traces
        """
    )

    parser.add_argument(
        "--memory-file",
        type=str,
        default=Config.MEMORY_FILE_PATH,
        help=f"Path of the JSON memory file (default: {Config.MEMORY_FILE_PATH})"
    )

    parser.add_argument(
        "--category",
        type=str,
        default=Config.DEFAULT_CATEGORY,
        help=f"Default category for new memories (default: {Config.DEFAULT_CATEGORY})"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=Config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {Config.LOG_LEVEL})"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        default=Config.QUIET_MODE,
        help="Quiet mode: hide internal decision traces"
    )

    return parser.parse_args()


def speak(text: str) -> None:
    console.print(f"[bold cyan]Memvox:[/bold cyan] {escape(text)}", highlight=False)


def display(result: ExecutionResult) -> None:
    """Terminal stand-in for the list, analytics and help screens"""
    if result.directive == DisplayDirective.SHOW_LIST:
        console.rule(result.title or "Memories")
        for record in result.records:
            console.print(
                f"  [{record.category}] {record.preview()}  ({record.relative_age()})",
                markup=False,
                highlight=False,
            )
    elif result.directive == DisplayDirective.SHOW_ANALYTICS and result.insights:
        console.rule(result.title or "Insights")
        for line in result.insights.insights:
            console.print(f"  - {line}", markup=False, highlight=False)
    elif result.directive == DisplayDirective.SHOW_HELP and result.help_text:
        console.rule(result.title or "Help")
        console.print(result.help_text, markup=False, highlight=False)


def main():
    """Main entry point"""
    args = parse_args()

    init_logger(args.log_level, quiet_mode=args.quiet)
    logger = get_logger()

    categories = Config.get_categories()
    default_category = resolve_category(args.category, categories)
    if default_category is None:
        logger.error(f"Unknown category '{args.category}'. Choose from: {', '.join(categories)}")
        return 2

    storage = JsonFileStorage(args.memory_file, default_category=default_category)
    assistant = MemoryAssistant(
        storage,
        speak_fn=speak,
        display_fn=display,
        categories=categories,
        default_category=default_category,
    )
    assistant.start()
    speak("Say something to remember, or 'help' for commands.")

    while True:
        try:
            line = console.input("[bold green]You:[/bold green] ")
        except (EOFError, KeyboardInterrupt):
            break
        if line.strip().lower() in EXIT_WORDS:
            break
        assistant.handle_utterance(line)

    logger.info("Goodbye")
    return 0


if __name__ == "__main__":
    sys.exit(main())
