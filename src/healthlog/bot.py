"""Telegram front end: relays chat text to the message handler and replies."""

import logging
import sys
from typing import Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from .config import config
from .core import InvalidMessageError
from .core import MessageHandler as HealthLogHandler

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hi! Send me what you did or what you ate, in your own words:\n"
    "• I ran 5 miles today\n"
    "• Had oatmeal for breakfast\n"
    "Send /status (or just 'status') for your weekly report."
)
EMPTY_TEXT = "Please send a message about your exercise or food, or 'status'."
ERROR_TEXT = "Sorry, something went wrong. Please try again in a moment."
NOT_ALLOWED_TEXT = "Sorry, this bot is private."


class HealthLogBot:
    """Telegram bot for logging exercise and food and asking for the weekly report."""

    def __init__(
        self,
        handler: Optional[HealthLogHandler] = None,
        allowed_user_ids: Optional[list[int]] = None,
    ) -> None:
        self._handler = handler or HealthLogHandler.from_config()
        if allowed_user_ids is None:
            allowed_user_ids = config.telegram.allowed_user_ids
        self._allowed_users = set(allowed_user_ids)

    def is_allowed(self, user_id: Optional[int]) -> bool:
        if user_id is None:
            return False
        return not self._allowed_users or user_id in self._allowed_users

    async def reply_for(self, text: str, user_id: int) -> str:
        """Reply text for one chat message; never raises."""
        try:
            result = await self._handler.process(text, str(user_id))
        except InvalidMessageError:
            return EMPTY_TEXT
        except Exception:
            logger.exception("Error processing message from %s", user_id)
            return ERROR_TEXT
        return result.response

    async def _send(self, update: Update, text: str) -> None:
        # Food and exercise text comes from the user and may break Markdown.
        try:
            await update.message.reply_text(text, parse_mode=ParseMode.MARKDOWN)
        except BadRequest:
            logger.debug("Markdown rejected, resending as plain text")
            await update.message.reply_text(text)

    async def _guard(self, update: Update) -> Optional[int]:
        """User id of an allowed sender, or None after refusing the rest."""
        if not update.message or not update.effective_user:
            return None
        user_id = update.effective_user.id
        if not self.is_allowed(user_id):
            logger.warning("Ignoring message from unlisted user %s", user_id)
            await update.message.reply_text(NOT_ALLOWED_TEXT)
            return None
        return user_id

    async def _on_start(self, update: Update, _) -> None:
        if await self._guard(update) is None:
            return
        await update.message.reply_text(WELCOME_TEXT)

    async def _on_status(self, update: Update, _) -> None:
        user_id = await self._guard(update)
        if user_id is None:
            return
        await self._send(update, await self.reply_for("status", user_id))

    async def _on_message(self, update: Update, _) -> None:
        user_id = await self._guard(update)
        if user_id is None or not update.message.text:
            return
        await self._send(update, await self.reply_for(update.message.text, user_id))

    async def _post_init(self, app: Application) -> None:
        await self._handler.initialize()
        logger.info("healthlog bot initialized (DB + LLM ready)")

    async def _post_shutdown(self, app: Application) -> None:
        await self._handler.close()
        logger.info("healthlog bot shut down")

    def run(self) -> None:
        if not config.telegram.token:
            print("TELEGRAM__TOKEN not set in .env")
            sys.exit(1)

        app = (
            Application.builder()
            .token(config.telegram.token)
            .post_init(self._post_init)
            .post_shutdown(self._post_shutdown)
            .build()
        )

        app.add_handler(CommandHandler(["start", "help"], self._on_start))
        app.add_handler(CommandHandler("status", self._on_status))
        app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._on_message))

        logger.info("Starting healthlog bot (polling)...")
        app.run_polling()


def main() -> None:
    logging.basicConfig(
        level=config.logging.level,
        format=config.logging.format,
    )
    HealthLogBot().run()


if __name__ == "__main__":
    main()
