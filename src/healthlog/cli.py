"""Interactive CLI for healthlog."""

import asyncio
import json
import logging
import sys

from .config import config
from .core import InvalidMessageError, MessageHandler


class HealthLogCLI:
    """REPL that sends each line through the message handler as one user."""

    def __init__(self, user_id: str = "cli", *, as_json: bool = False) -> None:
        self._handler = MessageHandler.from_config()
        self._user_id = user_id
        self._as_json = as_json

    async def run(self) -> None:
        await self._handler.initialize()
        print("healthlog")
        print("Type 'help' for examples or 'exit' to quit.")
        print("-" * 50)

        try:
            while True:
                try:
                    user_input = input("You: ").strip()
                    if not user_input:
                        continue
                    if user_input.lower() in ("exit", "quit", "bye"):
                        print("Goodbye!")
                        break
                    if user_input.lower() == "help":
                        self._show_help()
                        continue

                    result = await self._handler.process(user_input, self._user_id)
                    if self._as_json:
                        print(json.dumps({"success": True, **result.model_dump()}, indent=2))
                    else:
                        c = result.classification
                        flag = ", fallback" if c.fallback else ""
                        print(f"  [type: {c.type}, confidence: {c.confidence}{flag}]")
                        print(result.response)
                    print("-" * 50)

                except (KeyboardInterrupt, EOFError):
                    print("\nGoodbye!")
                    break
                except InvalidMessageError as e:
                    print(f"Error: {e}")
        finally:
            await self._handler.close()

    def _show_help(self) -> None:
        print(
            "Log exercise:\n"
            '    "I ran 5 miles today"\n'
            '    "did pilates for 45 minutes"\n'
            "\n"
            "Log food:\n"
            '    "I had oatmeal for breakfast"\n'
            "\n"
            "Weekly report:\n"
            '    "status"\n'
            "\n"
            "  help  - show this message\n"
            "  exit  - quit"
        )


async def main(argv: list[str]) -> None:
    as_json = "--json" in argv
    args = [a for a in argv if a != "--json"]
    user_id = args[0] if args else "cli"
    cli = HealthLogCLI(user_id, as_json=as_json)
    await cli.run()


def main_sync() -> None:
    """Entry point for pyproject.toml console_scripts."""
    logging.basicConfig(level=config.logging.level, format=config.logging.format)
    try:
        asyncio.run(main(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nGoodbye!")
        sys.exit(0)


if __name__ == "__main__":
    main_sync()
