#!/usr/bin/env python3
"""
Mintbot console entry point.

Reads messages from stdin as a single console participant, runs NFT data
collection on each one and prints the text the narrators would hand to the
model on the next turn.
"""

import asyncio
import sys

from mintbot.config import create_settings
from mintbot.core.collector import IncomingMessage
from mintbot.core.context import MintbotContext, create_context
from mintbot.exceptions import ConfigurationError
from mintbot.utils.logging_config import get_logger, setup_logging

CONSOLE_PARTICIPANT = "console"

logger = get_logger(__name__)


async def run_turn(context: MintbotContext, text: str, participant_id: str = CONSOLE_PARTICIPANT) -> str:
    """Process one message and return the narrator text for the next turn."""
    message = IncomingMessage(participant_id=participant_id, text=text)
    result = await context.collector.process(message)
    if result is not None and result.mint_outcome is not None and not result.mint_outcome.success:
        logger.warning(
            "mint_failed",
            stage=result.mint_outcome.failed_stage.value,
            participant_id=participant_id,
        )

    status = await context.status_narrator.render(context.agent_name, participant_id)
    minted = await context.mint_result_narrator.render(context.agent_name, participant_id)
    return "\n\n".join(part for part in (status, minted) if part)


async def read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def main() -> int:
    """Main entry point for the console loop."""
    settings = create_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    try:
        context = create_context(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger.info("mintbot_started", agent_name=context.agent_name)
    print(await context.status_narrator.render(context.agent_name, CONSOLE_PARTICIPANT))
    try:
        while True:
            try:
                text = await read_line("> ")
            except EOFError:
                break
            if not text.strip():
                continue
            print(await run_turn(context, text))
    except KeyboardInterrupt:
        pass
    finally:
        await context.cleanup()
        logger.info("mintbot_stopped", errors=context.error_tracker.get_error_analytics()["total_errors"])
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
