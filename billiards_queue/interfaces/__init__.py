"""External user interfaces package."""

from .telegram_bot import PendingAction, TelegramBotInterface

__all__ = ["PendingAction", "TelegramBotInterface"]
