from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from billiards_queue.core.enums import TableSlot
from billiards_queue.core.errors import RotationError, StorageUnavailableError
from billiards_queue.rotation.models import MatchOutcome, Person
from billiards_queue.runtime.session import TableSession, TableStatus

LOGGER = logging.getLogger("billiards_queue.telegram")

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]

_MAX_PENDING = 32
_HELP_TEXT = "\n".join(
    [
        "/status - table, streaks and queue",
        "/join <name> - enter the queue",
        "/start_match - seat players from the queue",
        "/win <1|2> - record the winner's seat",
        "/remove_seat <1|2> - send a seated player to the back of the queue",
        "/remove_name <name> - remove everyone with that name from the queue",
        "/remove_id <id> - remove one person from the queue",
        "/remove_at <position> - remove the person at that queue position",
        "/clear_table, /clear_queue, /clear_all",
        "/set_cap <n> - consecutive wins before a forced exit",
    ]
)


@dataclass(slots=True)
class PendingAction:
    """Destructive command waiting for the operator's Yes/No."""

    question: str
    run: Callable[[], str]


class TelegramBotInterface:
    """Telegram layer turning chat commands into :class:`TableSession` calls.

    Only the configured chat may operate the queue. Destructive commands
    (removals and clears) are parked as :class:`PendingAction` objects and run
    only after the operator taps "Yes" on the inline keyboard. Every reply
    after a change ends with the rendered table status.
    """

    def __init__(
        self,
        *,
        token: str,
        chat_id: int,
        session: TableSession,
        logger: logging.Logger | None = None,
        application: Application | None = None,
    ) -> None:
        self._application = application or Application.builder().token(token).build()
        self._chat_id = chat_id
        self._session = session
        self._logger = logger or LOGGER
        self._pending: Dict[str, PendingAction] = {}
        self._register_handlers()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Poll Telegram until the process receives SIGINT/SIGTERM."""

        self._logger.info("Telegram bot polling started")
        self._application.run_polling(drop_pending_updates=True)
        self._logger.info("Telegram bot polling stopped")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _register_handlers(self) -> None:
        commands: Dict[str, Handler] = {
            "help": self._cmd_help,
            "status": self._cmd_status,
            "join": self._cmd_join,
            "start_match": self._cmd_start_match,
            "win": self._cmd_win,
            "remove_seat": self._cmd_remove_seat,
            "remove_name": self._cmd_remove_name,
            "remove_id": self._cmd_remove_id,
            "remove_at": self._cmd_remove_at,
            "clear_table": self._cmd_clear_table,
            "clear_queue": self._cmd_clear_queue,
            "clear_all": self._cmd_clear_all,
            "set_cap": self._cmd_set_cap,
        }
        for name, handler in commands.items():
            self._application.add_handler(CommandHandler(name, self._wrap(handler)))
        self._application.add_handler(
            CallbackQueryHandler(self._wrap(self._on_confirmation), pattern=r"^(confirm|cancel):")
        )

    def _wrap(self, handler: Handler) -> Handler:
        async def wrapped(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            if not self._authorize(update):
                return
            try:
                await handler(update, context)
            except (RotationError, ValueError) as exc:
                await self._reply(update, f"⚠️ {exc}")
            except StorageUnavailableError as exc:
                self._logger.error("Snapshot save failed", exc_info=exc)
                await self._reply(update, "Storage unavailable – change not applied")
            except Exception as exc:  # pragma: no cover - defensive logging
                self._logger.exception("Telegram handler failed", exc_info=exc)
                await self._reply(update, "Command failed – check logs")

        return wrapped

    def _authorize(self, update: Update) -> bool:
        chat = update.effective_chat
        if chat is None or chat.id != self._chat_id:
            self._logger.warning("Unauthorized Telegram chat", extra={"chat_id": getattr(chat, "id", None)})
            return False
        return True

    async def _cmd_help(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, _HELP_TEXT)

    async def _cmd_status(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, self._format_status(self._session.status()))

    async def _cmd_join(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        name = " ".join(context.args or []).strip()
        if not name:
            await self._reply(update, "Usage: /join <name>")
            return
        person = self._session.join(name)
        await self._reply_with_status(update, f"{person.name} joined the queue (id {person.id}).")

    async def _cmd_start_match(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        self._session.start_match()
        await self._reply_with_status(update, "Match on!")

    async def _cmd_win(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        slot = _parse_slot(context.args)
        if slot is None:
            await self._reply(update, "Usage: /win <1|2>")
            return
        outcome = self._session.record_result(slot)
        await self._reply_with_status(update, _format_outcome(outcome, self._session.status().cap))

    async def _cmd_remove_seat(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        slot = _parse_slot(context.args)
        if slot is None:
            await self._reply(update, "Usage: /remove_seat <1|2>")
            return
        status = self._session.status()
        seated = status.slot1 if slot is TableSlot.ONE else status.slot2
        if seated is None:
            await self._reply(update, f"Seat {int(slot)} is already empty.")
            return

        def run() -> str:
            current = self._session.status()
            occupant = current.slot1 if slot is TableSlot.ONE else current.slot2
            if occupant is None or occupant.id != seated.id:
                return f"{seated.name} is no longer in seat {int(slot)}."
            self._session.remove_person(seated)
            return f"{seated.name} left seat {int(slot)} and went to the back of the queue."

        await self._ask_confirmation(update, f"Remove {seated.name} from seat {int(slot)}?", run)

    async def _cmd_remove_name(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        name = " ".join(context.args or []).strip()
        if not name:
            await self._reply(update, "Usage: /remove_name <name>")
            return

        def run() -> str:
            count = self._session.remove_by_name(name)
            return f"Removed: {count}" if count else "Nobody with that name in the queue."

        await self._ask_confirmation(update, f'Remove everyone named "{name}" from the queue?', run)

    async def _cmd_remove_id(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        args = context.args or []
        if not args:
            await self._reply(update, "Usage: /remove_id <id>")
            return
        person_id = args[0].strip()

        def run() -> str:
            return "Removed." if self._session.remove_by_id(person_id) else "ID not found in the queue."

        await self._ask_confirmation(update, f"Remove ID {person_id}?", run)

    async def _cmd_remove_at(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        args = context.args or []
        try:
            position = int(args[0])
        except (IndexError, ValueError):
            await self._reply(update, "Usage: /remove_at <position>")
            return
        queue = self._session.status().queue
        if position < 1 or position > len(queue):
            await self._reply(update, f"No one at position {position}.")
            return
        target = queue[position - 1]

        def run() -> str:
            # The queue may have moved since the prompt; remove the same person, not the same index.
            current = self._session.status().queue
            index = next((i for i, person in enumerate(current) if person.id == target.id), -1)
            if self._session.remove_by_index(index):
                return f"{target.name} removed from the queue."
            return f"{target.name} is no longer in the queue."

        await self._ask_confirmation(update, f"Remove #{position} {target.name}?", run)

    async def _cmd_clear_table(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        def run() -> str:
            self._session.clear_table()
            return "Table cleared."

        await self._ask_confirmation(update, "Send both players to the back of the queue and empty the table?", run)

    async def _cmd_clear_queue(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        def run() -> str:
            self._session.clear_queue()
            return "Queue cleared."

        await self._ask_confirmation(update, "Remove EVERYONE from the queue?", run)

    async def _cmd_clear_all(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        def run() -> str:
            self._session.clear_all()
            return "Table and queue cleared."

        await self._ask_confirmation(update, "Empty the table AND remove everyone from the queue?", run)

    async def _cmd_set_cap(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        args = context.args or []
        try:
            value = int(args[0])
        except (IndexError, ValueError):
            await self._reply(update, "Usage: /set_cap <int>")
            return
        if value <= 0:
            await self._reply(update, "Value must be >= 1")
            return
        cap = self._session.set_cap(value)
        await self._reply(update, f"Win cap updated to {cap}")

    async def _on_confirmation(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        if query is None:
            return
        await query.answer()
        verb, _sep, token = (query.data or "").partition(":")
        pending = self._pending.pop(token, None)
        if pending is None:
            await self._edit(query, "This request has expired.")
            return
        if verb != "confirm":
            await self._edit(query, f"Cancelled: {pending.question}")
            return
        result = pending.run()
        await self._edit(query, f"{result}\n\n{self._format_status(self._session.status())}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _ask_confirmation(self, update: Update, question: str, run: Callable[[], str]) -> None:
        token = uuid.uuid4().hex[:12]
        self._pending[token] = PendingAction(question=question, run=run)
        while len(self._pending) > _MAX_PENDING:
            self._pending.pop(next(iter(self._pending)))
        keyboard = InlineKeyboardMarkup(
            [
                [
                    InlineKeyboardButton("Yes", callback_data=f"confirm:{token}"),
                    InlineKeyboardButton("No", callback_data=f"cancel:{token}"),
                ]
            ]
        )
        await self._reply(update, question, reply_markup=keyboard)

    async def _reply_with_status(self, update: Update, text: str) -> None:
        await self._reply(update, f"{text}\n\n{self._format_status(self._session.status())}")

    async def _reply(self, update: Update, text: str, reply_markup: InlineKeyboardMarkup | None = None) -> None:
        if not update.effective_chat:
            return
        try:
            await update.effective_chat.send_message(text, reply_markup=reply_markup)
        except TelegramError as exc:  # pragma: no cover - depends on Telegram availability
            self._logger.warning("Failed to reply in chat", exc_info=exc)

    async def _edit(self, query, text: str) -> None:
        try:
            await query.edit_message_text(text)
        except TelegramError as exc:  # pragma: no cover - depends on Telegram availability
            self._logger.warning("Failed to edit confirmation message", exc_info=exc)

    def _format_status(self, status: TableStatus) -> str:
        lines = [
            f"P1: {_seat_label(status.slot1, status.slot1_streak)}",
            f"P2: {_seat_label(status.slot2, status.slot2_streak)}",
            f"Win cap: {status.cap}",
        ]
        if status.queue:
            lines.append(f"Queue ({len(status.queue)}):")
            for position, person in enumerate(status.queue, start=1):
                lines.append(f" {position}. {person.name} [{person.id}]")
        else:
            lines.append("Queue: empty")
        return "\n".join(lines)


def _parse_slot(args: list[str] | None) -> TableSlot | None:
    try:
        return TableSlot(int((args or [])[0]))
    except (IndexError, ValueError):
        return None


def _seat_label(person: Person | None, streak: int) -> str:
    if person is None:
        return "-"
    return f"{person.name} (wins in a row: {streak})"


def _format_outcome(outcome: MatchOutcome, cap: int) -> str:
    if outcome.capped_out:
        return (
            f"{outcome.winner.name} won {outcome.winner_streak} in a row and hit the cap of {cap}. "
            f"{outcome.loser.name} and {outcome.winner.name} go to the back of the queue."
        )
    return (
        f"{outcome.winner.name} wins ({outcome.winner_streak} in a row). "
        f"{outcome.loser.name} goes to the back of the queue."
    )


__all__ = ["PendingAction", "TelegramBotInterface"]
