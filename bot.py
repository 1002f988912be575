#    Cadence - flags accounts whose activity is too regular to be human
#    Licensed under the GNU Affero General Public License v3.0

import discord
from discord.ext import commands
import os
import sys
import signal
import asyncio
import time
import contextlib
from utils.logger import get_logger, set_debug

log = get_logger()

try:
    from config import Environment, shared_config
except ValueError as e:
    log.error(f"Error: {e}. Please check your .env file.")
    sys.exit(1)

set_debug(shared_config.ENVIRONMENT == Environment.DEVELOPMENT)

from detection.ledger import ActivityKind, ActivityLedger
from detection.monitor import ActivityMonitor
from detection.regularity import RegularityDetector
from utils.permissions import check_bot_permissions, format_missing_permissions

class Cadence(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.members = True # Required for managing roles
        intents.message_content = True # Required to spot command prefixes
        intents.guild_messages = True
        intents.guild_reactions = True
        intents.guild_typing = True

        super().__init__(
            command_prefix="cd!", # Fallback, we mainly use slash commands
            intents=intents,
            help_command=None
        )
        self.start_time = time.time()
        self._ready_once = asyncio.Event()

        # One ledger for the whole process; cogs reach it through self.monitor
        configs = shared_config.detection_configs()
        self.activity_prefix = shared_config.COMMAND_PREFIX
        self.monitor = ActivityMonitor(
            ActivityLedger(configs),
            RegularityDetector(configs),
            on_verdict=self.dispatch_verdict
        )

    def dispatch_verdict(self, user_id: int, guild_id: int, kind: ActivityKind, reason: str):
        """Fire-and-forget: discord.py runs each on_regular_activity listener as its own task."""
        self.dispatch("regular_activity", user_id, guild_id, kind, reason)

    async def setup_hook(self):
        """
        Async setup hook to load extensions.
        """
        await self._load_extensions_from("activity_modules")
        await self._load_extensions_from("services")
        await self._load_extensions_from("commands")

        # Sync generic commands (global)
        try:
            synced = await self.tree.sync()
            log.discord(f"Synced {len(synced)} command(s) globally.")
        except Exception as e:
            log.error("Failed to sync commands", exc_info=e)

    async def _load_extensions_from(self, folder: str):
        if not os.path.exists(folder):
            log.warning(f"Extension folder '{folder}' not found, skipping.")
            return

        failed_extensions = []
        for filename in sorted(os.listdir(folder)):
            if filename.endswith(".py") and not filename.startswith("__") and filename != "base.py":
                extension_name = f"{folder}.{filename[:-3]}"
                try:
                    await self.load_extension(extension_name)
                    log.info(f"Loaded extension: {extension_name}")
                except Exception as e:
                    failed_extensions.append(extension_name)
                    log.error(f"Failed to load extension {extension_name}", exc_info=e)

        if failed_extensions:
            log.error(f"Failed to load extensions: {failed_extensions}")
        else:
            log.discord(f"All extensions in '{folder}' loaded successfully.")

    async def on_ready(self):
        if self._ready_once.is_set():
            log.network(f"Session resumed after {time.time() - self.start_time:.2f} seconds.")
            return

        log.network(f"Logged in as {self.user} (ID: {self.user.id})")
        log.network(f"Watching {len(self.guilds)} guild(s).")

        for guild in self.guilds:
            missing = check_bot_permissions(guild)
            if missing:
                log.warning(f"Missing permissions in {guild.name} ({guild.id}):\n{format_missing_permissions(missing)}")

        await self.change_presence(activity=discord.Activity(
            type=discord.ActivityType.watching,
            name="for suspiciously regular activity"
        ))
        self._ready_once.set()

    async def on_disconnect(self):
        log.network("Disconnected from gateway - waiting for resume.")

# Bot Instance
bot = Cadence()

async def graceful_shutdown():
    log.info("Shutdown signal received - performing cleanup...")

    for kind in ActivityKind:
        log.info(f"Discarding {bot.monitor.ledger.tracked_users(kind)} tracked {kind.value} log(s).")

    with contextlib.suppress(Exception):
        await bot.close()

    log.info("Shutdown complete. Cadence signing off.")

async def main():
    async with bot:
        shutdown_signal = asyncio.get_running_loop().create_future()

        def _signal_handler():
            if not shutdown_signal.done():
                shutdown_signal.set_result(True)

        loop = asyncio.get_running_loop()
        # Windows doesn't support add_signal_handler; Ctrl+C arrives as KeyboardInterrupt there
        if sys.platform != 'win32':
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, _signal_handler)
                except Exception as e:
                    log.error(f"Failed to register signal handler for {sig!r}: {e}")

        bot_task = asyncio.create_task(bot.start(shared_config.DISCORD_TOKEN))

        try:
            if sys.platform != 'win32':
                await asyncio.wait({bot_task, shutdown_signal}, return_when=asyncio.FIRST_COMPLETED)
                if bot_task.done() and not bot_task.cancelled() and bot_task.exception():
                    log.error("Bot stopped unexpectedly", exc_info=bot_task.exception())
            else:
                await bot_task
        except asyncio.CancelledError:
            log.info("Main task cancelled; initiating cleanup.")
        except KeyboardInterrupt:
            log.info("KeyboardInterrupt received; initiating cleanup.")
        finally:
            if not bot_task.done():
                bot_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await bot_task

            try:
                await graceful_shutdown()
            except Exception as e:
                log.error(f"Error during graceful shutdown: {e}", exc_info=e)
                sys.exit(1)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        log.error("Fatal crash in main", exc_info=e)
        sys.exit(1)
