from discord.ext import commands, tasks
from config import shared_config
from detection.ledger import ActivityKind, now_ms
from utils.logger import get_logger

log = get_logger()

class SweepService(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.sweep_task.change_interval(minutes=shared_config.SWEEP_INTERVAL_MINUTES)
        self.sweep_task.start()

    def cog_unload(self):
        self.sweep_task.cancel()

    @tasks.loop(minutes=60)
    async def sweep_task(self):
        """
        Drops expired timestamps for every kind so idle users don't stay in memory.
        """
        self.run_sweep()

    def run_sweep(self) -> int:
        try:
            evicted = self.bot.monitor.on_sweep_tick(now_ms())
        except Exception as e:
            log.error("Failed to run activity sweep", exc_info=e)
            return 0

        ledger = self.bot.monitor.ledger
        remaining = ", ".join(f"{kind.value}={ledger.tracked_users(kind)}" for kind in ActivityKind)
        log.sweep(f"Periodic cleanup completed. Evicted {evicted} idle entr{'y' if evicted == 1 else 'ies'} ({remaining}).")
        return evicted

    @sweep_task.before_loop
    async def before_sweep(self):
        await self.bot.wait_until_ready()

async def setup(bot: commands.Bot):
    await bot.add_cog(SweepService(bot))
