import asyncio
import logging

import asyncpg
import discord
from discord.ext import commands

from tebak_bot import db
from tebak_bot.config import LOG_LEVEL, require_bot_token
from tebak_bot.llm.judge import check_answer
from tebak_bot.llm.persona import analyze_user_pattern
from tebak_bot.llm.riddles import generate_riddle
from tebak_bot.riddle.constants import (
    RESULT_DELAY_SECONDS,
    STATUS_CLOSE,
    STATUS_CORRECT,
)
from tebak_bot.riddle.errors import JudgeError, SubmissionBusy
from tebak_bot.riddle.session import close_session, end_session, load_next_riddle, start_session
from tebak_bot.riddle.state import GameState, SubmissionPhase
from tebak_bot.riddle.submission import SubmissionResult, submit_answer

logger = logging.getLogger(__name__)

intents = discord.Intents.default()
intents.message_content = True

bot = commands.Bot(
    command_prefix="!",
    intents=intents,
    help_command=None,
)

# (guild_id, channel_id) -> running session
GAMES: dict[tuple[int, int], GameState] = {}

STATUS_HEADERS = {
    STATUS_CORRECT: "✅ **Correct!**",
    STATUS_CLOSE: "🤏 **So close!**",
}


# -----------------------------
# RENDERING
# -----------------------------
def format_result(state: GameState, result: SubmissionResult) -> str:
    riddle = result.riddle
    header = STATUS_HEADERS.get(result.status, "❌ **Nope.**")
    lines = [header]

    if result.validation.feedback:
        lines.append(f"> {result.validation.feedback}")

    lines.append(f"Answer: **{riddle.answer}**")
    if riddle.fun_fact:
        lines.append(f"💡 {riddle.fun_fact}")

    if result.points:
        lines.append(f"+{result.points} pts · Score **{state.score}** · Streak 🔥{state.streak}")
    else:
        lines.append(f"Score **{state.score}** · Streak reset")

    return "\n".join(lines)


async def ask_next_riddle(channel: discord.abc.Messageable, state: GameState) -> None:
    try:
        riddle = await load_next_riddle(state, db, generate_riddle)
    except JudgeError as e:
        await channel.send(f"⚠️ {e.user_message}")
        await stop_session(channel, state)
        return
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError):
        logger.exception("Could not load the next riddle for player %s", state.player_id)
        close_session(state)
        await channel.send("⚠️ I lost my riddle notebook (storage error). Session over, try /tebak again later.")
        return

    await channel.send(f"🧩 **Riddle #{len(state.history)}**\n{riddle.question}")


async def stop_session(channel: discord.abc.Messageable, state: GameState) -> None:
    await end_session(state, db)
    await channel.send(
        f"🏁 **Session over.** Score: **{state.score}** · High score: **{state.high_score}**"
    )


def _game_for(interaction: discord.Interaction):
    if interaction.guild is None or interaction.channel is None:
        return None
    return GAMES.get((interaction.guild.id, interaction.channel.id))


# -----------------------------
# BOT EVENTS
# -----------------------------
@bot.event
async def on_ready():
    logger.info("Logged in as %s (ID: %s)", bot.user, bot.user.id)

    await db.init_schema()

    try:
        synced = await bot.tree.sync()
        logger.info("✅ Synced %d app commands.", len(synced))
    except discord.DiscordException:
        logger.exception("❌ Error syncing app commands")


# -----------------------------
# COMMANDS
# -----------------------------
@bot.tree.command(name="ping", description="Simple test command.")
async def ping(interaction: discord.Interaction):
    await interaction.response.send_message("Pong! Riddles are loaded.", ephemeral=True)


@bot.tree.command(name="tebak", description="Start a riddle session in this channel.")
async def tebak(interaction: discord.Interaction):
    if interaction.guild is None or interaction.channel is None:
        await interaction.response.send_message(
            "I can only run games inside a server text channel.",
            ephemeral=True,
        )
        return

    key = (interaction.guild.id, interaction.channel.id)
    existing = GAMES.get(key)
    if existing and existing.in_progress:
        await interaction.response.send_message(
            "There’s already a riddle session running in this channel.",
            ephemeral=True,
        )
        return

    state = GameState.new(interaction.user.id)
    GAMES[key] = state

    await interaction.response.send_message(
        f"🧠 {interaction.user.mention}, riddle time! Type your answers right here."
    )
    await start_session(state, db)
    await ask_next_riddle(interaction.channel, state)


@bot.tree.command(name="tebak_stop", description="Stop the riddle session.")
async def tebak_stop(interaction: discord.Interaction):
    state = _game_for(interaction)
    if not state or not state.in_progress:
        await interaction.response.send_message(
            "There’s no riddle session running here.",
            ephemeral=True,
        )
        return

    if state.phase == SubmissionPhase.REMOTE_CHECK:
        await interaction.response.send_message(
            "Hold on, I’m still judging the last answer. Stop again in a moment.",
            ephemeral=True,
        )
        return

    await interaction.response.send_message("⛔ **Riddle session stopped.**")
    await stop_session(interaction.channel, state)


@bot.tree.command(name="hint", description="Show the hint for the current riddle.")
async def hint(interaction: discord.Interaction):
    state = _game_for(interaction)
    if not state or not state.accepting_answers:
        await interaction.response.send_message("No riddle to hint at.", ephemeral=True)
        return

    await interaction.response.send_message(f"💡 **Hint:** {state.current_riddle.hint}")


@bot.tree.command(name="skip", description="Give up on the current riddle.")
async def skip(interaction: discord.Interaction):
    state = _game_for(interaction)
    if not state or not state.accepting_answers or interaction.user.id != state.player_id:
        await interaction.response.send_message("Nothing for you to skip.", ephemeral=True)
        return

    state.apply_result(False)
    state.phase = SubmissionPhase.RESOLVED
    await interaction.response.send_message(
        f"⏭️ Skipped. The answer was **{state.current_riddle.answer}**."
    )
    await ask_next_riddle(interaction.channel, state)


@bot.tree.command(name="profile", description="Show your riddle profile.")
async def profile(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)

    key = str(interaction.user.id)
    player = await db.get_user_profile(key)
    attempts = await db.get_attempt_count(interaction.user.id)

    await interaction.followup.send(
        embed=discord.Embed(
            title=f"🧩 {interaction.user.display_name}",
            description=(
                f"**Style:** {player.persona or 'Not enough answers yet.'}\n"
                f"**High score:** {player.high_score}\n"
                f"**Answers given:** {attempts}"
            ),
        ),
        ephemeral=True,
    )


# -----------------------------
# MESSAGE LISTENER
# -----------------------------
@bot.event
async def on_message(message: discord.Message):
    if message.author.bot or message.guild is None:
        await bot.process_commands(message)
        return

    channel = message.channel
    state = GAMES.get((message.guild.id, channel.id))
    user_answer = message.content.strip()

    if not state or message.author.id != state.player_id or not user_answer:
        await bot.process_commands(message)
        return

    if state.phase == SubmissionPhase.REMOTE_CHECK:
        await channel.send("⏳ Hold on, still judging your last answer.")
        return

    if not state.accepting_answers:
        await bot.process_commands(message)
        return

    try:
        result = await submit_answer(
            state,
            user_answer,
            store=db,
            judge=check_answer,
            summarizer=analyze_user_pattern,
        )
    except SubmissionBusy:
        await channel.send("⏳ Hold on, still judging your last answer.")
        return
    except JudgeError as e:
        await channel.send(f"⚠️ Couldn’t judge that: {e.user_message}")
        return

    await channel.send(format_result(state, result))

    await asyncio.sleep(RESULT_DELAY_SECONDS)
    if state.in_progress:
        await ask_next_riddle(channel, state)


# -----------------------------
# ENTRY POINT
# -----------------------------
def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    bot.run(require_bot_token(), log_handler=None)


if __name__ == "__main__":
    main()
