"""
Main Discord bot entry for the Alliance War Tracker.
"""

import atexit
import logging
import os

try:
    import msvcrt  # Windows-only
except ImportError:  # pragma: no cover
    msvcrt = None

try:
    import fcntl  # Unix-only
except ImportError:  # pragma: no cover
    fcntl = None

# Configure logging BEFORE importing discord to prevent duplicate handlers
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,  # Override any existing handlers (e.g., from discord.py)
)
logger = logging.getLogger("war_tracker")


# Suppress PyNaCl warning since voice support isn't needed
class _PyNaClFilter(logging.Filter):
    """Filter out the PyNaCl warning from discord.py."""

    def filter(self, record):
        return "PyNaCl is not installed" not in record.getMessage()


logging.getLogger("discord.client").addFilter(_PyNaClFilter())

import discord
from discord.ext import commands

# discord.py adds its own handler to the 'discord' logger on import
_discord_logger = logging.getLogger("discord")
_discord_logger.handlers.clear()
_discord_logger.setLevel(logging.INFO)

from config import ADMIN_USER_IDS, DB_PATH, DISCORD_BOT_TOKEN
from rating_system import WarRatingSystem
from repositories.battlegroup_death_repository import BattlegroupDeathRepository
from repositories.difficulty_repository import DifficultyRepository
from repositories.node_entry_repository import NodeEntryRepository
from repositories.player_repository import PlayerRepository
from repositories.season_repository import SeasonRepository
from repositories.streak_repository import StreakRepository
from services.import_service import ImportService
from services.rating_service import RatingService
from services.roster_service import RosterService
from services.season_service import SeasonService
from services.streak_service import StreakService

_instance_lock_handle = None
_instance_lock_method = None
_instance_lock_path = os.path.join(os.path.dirname(__file__), ".bot.lock")


def _pid_is_running(pid: int) -> bool:
    """Return True if a process with the given PID is running."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    else:
        return True


def _cleanup_stale_lock(lock_path: str) -> None:
    """Remove the lock file if it belongs to a dead process."""
    try:
        if not os.path.exists(lock_path):
            return
        with open(lock_path, encoding="utf-8") as lock_file:
            content = lock_file.read().strip()
        try:
            pid = int(content) if content else -1
        except ValueError:
            pid = -1
        if pid == -1 or not _pid_is_running(pid):
            os.remove(lock_path)
    except OSError as exc:
        logger.debug(f"Could not clean up stale lock {lock_path}: {exc}")


def _acquire_single_instance_lock() -> bool:
    """
    Prevent multiple bot.py processes from running at the same time.
    This avoids duplicated slash command handling (multiple processes receive the same interaction).
    """
    global _instance_lock_handle, _instance_lock_method
    try:
        _cleanup_stale_lock(_instance_lock_path)
        _instance_lock_handle = open(_instance_lock_path, "a+", encoding="utf-8")
        if msvcrt is not None:
            msvcrt.locking(_instance_lock_handle.fileno(), msvcrt.LK_NBLCK, 1)
            _instance_lock_method = "msvcrt"
        elif fcntl is not None:
            fcntl.flock(_instance_lock_handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
            _instance_lock_method = "fcntl"
        else:  # pragma: no cover
            logger.warning(
                "No platform lock mechanism available; continuing without single-instance protection."
            )
            return True

        _instance_lock_handle.seek(0)
        _instance_lock_handle.truncate()
        _instance_lock_handle.write(str(os.getpid()))
        _instance_lock_handle.flush()
        return True
    except OSError:
        if _instance_lock_handle:
            _instance_lock_handle.close()
        _instance_lock_handle = None
        _instance_lock_method = None
        logger.error(
            "Another bot instance appears to be running. "
            "Stop other 'python bot.py' processes/terminals and retry."
        )
        return False


def _release_single_instance_lock() -> None:
    """Release and remove the single-instance lock file."""
    global _instance_lock_handle, _instance_lock_method
    if not _instance_lock_handle:
        return
    try:
        if _instance_lock_method == "msvcrt" and msvcrt is not None:
            msvcrt.locking(_instance_lock_handle.fileno(), msvcrt.LK_UNLCK, 1)
        elif _instance_lock_method == "fcntl" and fcntl is not None:
            fcntl.flock(_instance_lock_handle, fcntl.LOCK_UN)
        _instance_lock_handle.close()
        if os.path.exists(_instance_lock_path):
            os.remove(_instance_lock_path)
    except OSError as exc:
        logger.debug(f"Error releasing instance lock: {exc}")
    finally:
        _instance_lock_handle = None
        _instance_lock_method = None


atexit.register(_release_single_instance_lock)

intents = discord.Intents.default()

bot = commands.Bot(command_prefix="!", intents=intents)

# Lazy-initialized services (created on first access to avoid blocking test collection)
_services_initialized = False


def _init_services():
    """Initialize repositories and services lazily (on first use, not at import time)."""
    global _services_initialized
    if _services_initialized:
        return

    player_repo = PlayerRepository(DB_PATH)
    entry_repo = NodeEntryRepository(DB_PATH)
    bg_death_repo = BattlegroupDeathRepository(DB_PATH)
    difficulty_repo = DifficultyRepository(DB_PATH)
    season_repo = SeasonRepository(DB_PATH)
    streak_repo = StreakRepository(DB_PATH)

    import_service = ImportService(player_repo, difficulty_repo, streak_repo)
    rating_service = RatingService(
        player_repo,
        entry_repo,
        bg_death_repo,
        difficulty_repo,
        import_service=import_service,
        rating_system=WarRatingSystem(),
    )
    roster_service = RosterService(player_repo, entry_repo, bg_death_repo, season_repo)
    season_service = SeasonService(season_repo, player_repo, entry_repo, bg_death_repo)
    streak_service = StreakService(player_repo, entry_repo, streak_repo, season_repo)

    # Expose on bot for cogs
    bot.player_repo = player_repo
    bot.import_service = import_service
    bot.rating_service = rating_service
    bot.roster_service = roster_service
    bot.season_service = season_service
    bot.streak_service = streak_service

    _services_initialized = True


bot.ADMIN_USER_IDS = ADMIN_USER_IDS

EXTENSIONS = [
    "commands.stats",
    "commands.admin",
]


async def _load_extensions():
    """Load command extensions if not already loaded."""
    _init_services()

    loaded_extensions = []
    failed_extensions = []
    for ext in EXTENSIONS:
        if ext in bot.extensions:
            logger.debug(f"Extension {ext} already loaded, skipping")
            continue
        try:
            await bot.load_extension(ext)
            loaded_extensions.append(ext)
            logger.info(f"Loaded extension: {ext}")
        except commands.ExtensionError as exc:
            failed_extensions.append(ext)
            logger.error(f"Failed to load extension {ext}: {exc}", exc_info=True)

    logger.info(
        f"Extension loading complete: {len(loaded_extensions)} loaded, "
        f"{len(failed_extensions)} failed"
    )


@bot.event
async def setup_hook():
    """Load command cogs."""
    if not _acquire_single_instance_lock():
        raise SystemExit(2)
    _init_services()
    await _load_extensions()


@bot.event
async def on_ready():
    """Called when bot is ready."""
    logger.info(f"{bot.user} connected. Guilds: {len(bot.guilds)}")
    try:
        synced = await bot.tree.sync()
        logger.info(f"Slash commands synced globally: {len(synced)} commands.")
    except discord.HTTPException as exc:
        logger.error(f"Failed to sync commands: {exc}", exc_info=True)


@bot.tree.error
async def on_app_command_error(interaction: discord.Interaction, error: discord.app_commands.AppCommandError):
    """Global error handler for app commands - prevents infinite 'thinking...' state."""
    logger.error(
        f"App command error in '{interaction.command.name if interaction.command else 'unknown'}': {error}",
        exc_info=error,
    )
    error_msg = "An error occurred while processing your command. Please try again."
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content=f"❌ {error_msg}", ephemeral=True)
        else:
            await interaction.response.send_message(content=f"❌ {error_msg}", ephemeral=True)
    except discord.HTTPException as followup_error:
        logger.error(f"Failed to send error message to user: {followup_error}")


def main():
    """Run the bot."""
    token = DISCORD_BOT_TOKEN
    if not token:
        print("ERROR: DISCORD_BOT_TOKEN not found!")
        return

    try:
        # Pass log_handler=None to prevent discord.py from adding its own handler
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")


if __name__ == "__main__":
    main()
