"""Command routing for inbound Discord messages."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from roidbot.handlers.asteroids import show_asteroid_details, show_user_asteroids
from roidbot.handlers.context import HandlerContext
from roidbot.handlers.events import channel_events
from roidbot.handlers.help import show_help
from roidbot.handlers.user_info import show_address, show_user
from roidbot.handlers.verify import complete_verification, is_pending, prepare_verification
from roidbot.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

Handler = Callable[[discord.Message, List[str], HandlerContext], Awaitable[None]]


class Command(str, Enum):
    HELP = "help"
    ABOUT = "about"
    PING = "ping"
    VERIFY = "verify"
    ADDRESS = "address"
    USER = "user"
    ASTEROID = "asteroid"
    OWNED = "owned"
    EVENTS = "events"


ALIASES: Dict[str, Command] = {"roid": Command.ASTEROID}


async def about(message: discord.Message, args: List[str], ctx: HandlerContext) -> None:
    await show_help(message, ["about"], ctx)


async def ping(message: discord.Message, args: List[str], ctx: HandlerContext) -> None:
    logger.info("ping")
    await message.reply("pong")


COMMAND_HANDLERS: Dict[Command, Handler] = {
    Command.HELP: show_help,
    Command.ABOUT: about,
    Command.PING: ping,
    Command.VERIFY: prepare_verification,
    Command.ADDRESS: show_address,
    Command.USER: show_user,
    Command.ASTEROID: show_asteroid_details,
    Command.OWNED: show_user_asteroids,
    Command.EVENTS: channel_events,
}


def _check_registry() -> None:
    missing = [command.value for command in Command if command not in COMMAND_HANDLERS]
    if missing:
        raise RuntimeError(f"Commands without handlers: {', '.join(missing)}")
    names = {command.value for command in Command}
    clashes = [alias for alias in ALIASES if alias in names]
    if clashes:
        raise RuntimeError(f"Aliases shadow commands: {', '.join(clashes)}")


_check_registry()


def resolve_command(token: str) -> Optional[Command]:
    token = token.lower()
    if token in ALIASES:
        return ALIASES[token]
    try:
        return Command(token)
    except ValueError:
        return None


def parse_command(content: str, prefix: str) -> Optional[Tuple[Command, List[str]]]:
    """Split ``content`` into a command and its arguments.

    Returns None when the text does not start with ``prefix`` or names no
    known command.
    """
    if not content.startswith(prefix):
        return None
    args = content[len(prefix) :].split()
    if not args:
        return None
    command = resolve_command(args.pop(0))
    if command is None:
        return None
    return command, args


def is_allowed(message: discord.Message, ctx: HandlerContext) -> bool:
    """Apply the single-user restriction, if one is configured."""
    return ctx.test_user is None or message.author.name == ctx.test_user


class MessageDispatcher:
    """Feed inbound messages through one handler at a time.

    ``submit`` is called from the Discord client callback; ``run`` drains the
    queue and awaits each message's handler before taking the next one.
    """

    def __init__(self, ctx: HandlerContext) -> None:
        self.ctx = ctx
        self.queue: asyncio.Queue[discord.Message] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None

    def submit(self, message: discord.Message) -> None:
        self.queue.put_nowait(message)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        while True:
            message = await self.queue.get()
            try:
                await self.handle(message)
            except Exception:
                logger.exception("message_handling_failed", message_id=message.id)
            finally:
                clear_context()
                self.queue.task_done()

    async def handle(self, message: discord.Message) -> None:
        ctx = self.ctx
        if message.author.bot:
            return
        if not is_allowed(message, ctx):
            return

        bind_context(user_id=message.author.id, channel_id=message.channel.id)

        if is_pending(message, ctx):
            await complete_verification(message, [message.content], ctx)
            return

        parsed = parse_command(message.content, ctx.prefix)
        if parsed is None:
            return
        command, args = parsed
        logger.info("command_dispatched", command=command.value, args=len(args))
        await COMMAND_HANDLERS[command](message, args, ctx)
