"""Player commands and riddle play.

    /help, /start   show the command list
    /startriddle    ask for a riddle code, then start that riddle
    /stopriddle     abandon the running riddle

Any other text goes to whatever the chat is waiting for: a riddle code after
/startriddle, or the running riddle's next input.
"""

import logging

from backend.state import Context
from backend.telegram import describe_commands, parse_command
from riddler import play
from riddler.delivery import ChatApplier
from riddler.errors import RiddleNotFoundError

logger = logging.getLogger(__name__)

COMMANDS = {
    "help": "display this text.",
    "start": "display this text.",
    "startriddle": "start the riddle.",
    "stopriddle": "stop the current riddle.",
}

HELP_TEXT = describe_commands("These commands are supported:", COMMANDS)


async def handle(ctx: Context) -> None:
    command = parse_command(ctx.text)
    if command is not None and command[0] in COMMANDS:
        await _run_command(ctx, command[0])
    elif ctx.chat_id in ctx.state.awaiting_code:
        await riddle_code(ctx)
    elif ctx.chat_id in ctx.state.sessions:
        await riddle_input(ctx)
    # Anything else is chatter outside a riddle; ignore it.


def _reset(ctx: Context) -> None:
    ctx.state.awaiting_code.clear(ctx.chat_id)
    ctx.state.sessions.clear(ctx.chat_id)


async def _run_command(ctx: Context, name: str) -> None:
    if name in ("help", "start"):
        _reset(ctx)
        await ctx.reply(HELP_TEXT)

    elif name == "startriddle":
        _reset(ctx)
        ctx.state.awaiting_code.set(ctx.chat_id, True)
        await ctx.reply("What is the code of the riddle?")

    elif name == "stopriddle":
        ctx.state.awaiting_code.clear(ctx.chat_id)
        if play.stop_riddle(sessions=ctx.state.sessions, chat_id=ctx.chat_id):
            await ctx.reply("Riddle stopped")
        else:
            await ctx.reply("No riddle is running")


async def riddle_code(ctx: Context) -> None:
    code = ctx.text.strip()
    try:
        riddle = play.start_riddle(
            riddles=ctx.state.riddles,
            sessions=ctx.state.sessions,
            chat_id=ctx.chat_id,
            code=code,
        )
    except RiddleNotFoundError:
        await ctx.reply("Riddle not found")
        return

    ctx.state.awaiting_code.clear(ctx.chat_id)
    await ctx.reply("Let's get started!")
    await ctx.reply(f"{riddle.name}\n\n{riddle.description}")


async def riddle_input(ctx: Context) -> None:
    applier = ChatApplier(ctx.state.messenger, ctx.chat_id)
    try:
        result = await play.play_turn(
            riddles=ctx.state.riddles,
            sessions=ctx.state.sessions,
            chat_id=ctx.chat_id,
            text=ctx.text,
            applier=applier,
        )
    except RiddleNotFoundError:
        await ctx.reply("Riddle not found")
        return

    if result.solved:
        await ctx.reply("You solved the riddle!")
