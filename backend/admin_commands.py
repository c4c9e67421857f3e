"""Admin commands: creating, removing and listing riddles.

Only users listed in Settings.admins get here. /newriddle walks the admin
through a short wizard:

    code → name → description → definition (JSON)

Answering RANDOM for the code lets the registry pick one. A definition that
fails to compile is reported back and the wizard waits for a corrected one.
"""

import logging

from backend.commands import COMMANDS
from backend.state import Context, NewRiddleDraft, RemoveRiddlePending
from backend.telegram import describe_commands, parse_command
from riddler.definition import compile_definition
from riddler.errors import DefinitionError, RiddleExistsError

logger = logging.getLogger(__name__)

ADMIN_COMMANDS = {
    "help": "display this text.",
    "newriddle": "create a new riddle.",
    "removeriddle": "remove a riddle.",
    "listriddles": "list all riddles.",
}

RANDOM_RIDDLE_CODE = "RANDOM"


async def handle(ctx: Context) -> bool:
    """Handle the message if it belongs to the admin flow.

    Returns False when the sender is not an admin or the message is not for
    the admin flow, so the player flow can take it.
    """
    if not ctx.state.settings.is_admin(ctx.user_id):
        return False

    command = parse_command(ctx.text)
    if command is not None and command[0] in ADMIN_COMMANDS:
        await _run_command(ctx, command[0])
        return True

    wizard = ctx.state.wizards.get(ctx.chat_id)
    if isinstance(wizard, NewRiddleDraft):
        await new_riddle_step(ctx, wizard)
        return True
    if isinstance(wizard, RemoveRiddlePending):
        await remove_riddle_code(ctx)
        return True
    return False


async def _run_command(ctx: Context, name: str) -> None:
    wizards = ctx.state.wizards

    if name == "help":
        wizards.clear(ctx.chat_id)
        await ctx.reply(describe_commands("These commands are supported:", COMMANDS))
        await ctx.reply(describe_commands("These admin commands are supported:", ADMIN_COMMANDS))

    elif name == "listriddles":
        wizards.clear(ctx.chat_id)
        await ctx.reply(format_riddle_list(ctx))

    elif name == "newriddle":
        wizards.set(ctx.chat_id, NewRiddleDraft())
        await ctx.reply(
            f"What is the code for your riddle? ({RANDOM_RIDDLE_CODE} if you want us to randomize)"
        )

    elif name == "removeriddle":
        wizards.set(ctx.chat_id, RemoveRiddlePending())
        await ctx.reply("What is the code of the riddle?")


def format_riddle_list(ctx: Context) -> str:
    blocks = [
        f"{r.name} (code: {r.code})\nAuthor: {r.creator}\nDescription:\n{r.description}"
        for r in ctx.state.riddles.list_riddles()
    ]
    return "\n\n".join(["List of riddles:", *blocks])


# ---------------------------------------------------------------------------
# /newriddle wizard
# ---------------------------------------------------------------------------

async def new_riddle_step(ctx: Context, draft: NewRiddleDraft) -> None:
    wizards = ctx.state.wizards
    text = ctx.text

    if draft.step == "code":
        code = text.strip()
        if code in ctx.state.riddles:
            await ctx.reply(f"Riddle with code {code} already exists!")
            return
        wizards.set(ctx.chat_id, draft.model_copy(update={
            "step": "name",
            "code": None if code == RANDOM_RIDDLE_CODE else code,
        }))
        await ctx.reply("What is the name of the riddle?")

    elif draft.step == "name":
        wizards.set(ctx.chat_id, draft.model_copy(update={"step": "description", "name": text}))
        await ctx.reply("What is the description of the riddle?")

    elif draft.step == "description":
        wizards.set(ctx.chat_id, draft.model_copy(update={"step": "definition", "description": text}))
        await ctx.reply("What is the state machine of the riddle? Send it as JSON.")

    elif draft.step == "definition":
        await _create_riddle(ctx, draft)


async def _create_riddle(ctx: Context, draft: NewRiddleDraft) -> None:
    try:
        definition = compile_definition(ctx.text)
    except DefinitionError as e:
        logger.info("rejected riddle definition chat_id=%s: %s", ctx.chat_id, e)
        await ctx.reply(f"Error: {e}")
        return

    ctx.state.wizards.clear(ctx.chat_id)
    try:
        riddle = ctx.state.riddles.add(
            code=draft.code,
            name=draft.name,
            description=draft.description,
            creator=ctx.user_id or 0,
            definition=definition,
        )
    except RiddleExistsError:
        await ctx.reply(f"Riddle with code {draft.code} already exists!")
        return

    await ctx.reply(f"Riddle created! Code: {riddle.code}")


# ---------------------------------------------------------------------------
# /removeriddle
# ---------------------------------------------------------------------------

async def remove_riddle_code(ctx: Context) -> None:
    if ctx.state.riddles.remove(ctx.text.strip()):
        ctx.state.wizards.clear(ctx.chat_id)
        await ctx.reply("Riddle removed!")
    else:
        await ctx.reply("Riddle not found!")
