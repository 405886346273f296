"""CLI entry point for the scheduling assistant.

A terminal chat loop around one :class:`Conversation`.  By default the mock
backend runs in-process; set ``SCHEDULING_BACKEND=http`` (or pass
``--backend http``) to talk to a running ``scheduling_agent.server``.

Usage:
    python -m scheduling_agent.main            # normal mode (quiet)
    python -m scheduling_agent.main --debug    # debug mode (shows state transitions)
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from scheduling_agent.conversation.engine import Conversation
from scheduling_agent.services.in_memory_client import InMemorySchedulingClient
from scheduling_agent.services.scheduling_client import (
    HttpSchedulingClient,
    SchedulingClient,
    get_scheduling_client,
)

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    root_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("scheduling_agent").setLevel(logging.DEBUG if debug else logging.WARNING)


def _build_client(backend: str | None) -> SchedulingClient:
    if backend == "http":
        return HttpSchedulingClient()
    if backend == "memory":
        return InMemorySchedulingClient()
    return get_scheduling_client()


async def _chat_loop(client: SchedulingClient) -> None:
    conversation = Conversation(client)
    print(f"Assistant: {conversation.greeting}\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "You: ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("exit", "quit", "q"):
            print("\nGoodbye! Have a great day!")
            break

        if user_input.lower() == "new":
            conversation.reset()
            print(f"\n>> Conversation restarted.\n\nAssistant: {conversation.greeting}\n")
            continue

        try:
            result = await conversation.handle_turn(user_input)
        except Exception as e:
            logger.exception("Error processing message")
            print(f"\nAssistant: I'm sorry, something went wrong: {e}")
            print("     Please try again or type 'new' to start over.\n")
            continue

        print(f"\nAssistant: {result.reply}\n")


async def _run(backend: str | None) -> None:
    client = _build_client(backend)
    try:
        await _chat_loop(client)
    finally:
        await client.aclose()


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Scheduling assistant CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including state transitions and HTTP requests",
    )
    parser.add_argument(
        "--backend", choices=("memory", "http"), default=None,
        help="Override SCHEDULING_BACKEND for this session",
    )
    args = parser.parse_args()

    _configure_logging(debug=args.debug)

    print("\n" + "=" * 60)
    print("  Medical Scheduling Assistant - CLI Chat")
    print("=" * 60)
    print("  Type your message and press Enter.")
    print("  Commands: 'quit' to exit, 'new' to start over.")
    print("=" * 60 + "\n")

    try:
        asyncio.run(_run(args.backend))
    except KeyboardInterrupt:
        print("\n\nGoodbye!")


if __name__ == "__main__":
    main()
