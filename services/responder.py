import discord
import time
from typing import Optional
from discord.ext import commands
from config import shared_config
from detection.ledger import ActivityKind
from utils.embed_builder import EmbedBuilder
from utils.logger import get_logger
from utils.permissions import can_assign_role
from utils.rate_limiter import send_with_backoff

log = get_logger()

TAG_REASON = "Potential self-bot detected"
# How long a fresh tag is trusted over a member cache that hasn't caught up yet
TAG_MEMO_SECONDS = 60.0

class Responder(commands.Cog):
    """
    Escalation side of a detection: tags the account with the suspicious role
    and tells the moderators. Runs as its own task via bot.dispatch, so nothing
    here can stall or corrupt event processing.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.moderator_role_id = shared_config.MODERATOR_ROLE_ID
        self.suspicious_role_id = shared_config.SUSPICIOUS_ROLE_ID
        self.log_channel_id = shared_config.LOG_CHANNEL_ID
        # (guild_id, user_id) currently being escalated. One message can yield a
        # MESSAGE and a COMMAND verdict at once, and the member cache doesn't see
        # the new role until the gateway echoes it back.
        self._in_flight: set[tuple[int, int]] = set()
        self._recent_tags: dict[tuple[int, int], float] = {}

    @commands.Cog.listener()
    async def on_regular_activity(self, user_id: int, guild_id: int, kind: ActivityKind, reason: str):
        await self.respond(user_id, guild_id, reason)

    async def respond(self, user_id: int, guild_id: int, reason: str):
        key = (guild_id, user_id)
        if key in self._in_flight:
            return

        self._in_flight.add(key)
        try:
            guild = self.bot.get_guild(guild_id)
            if guild is None:
                return

            member = await self._resolve_member(guild, user_id)
            if member is None:
                return

            tagged = await self.tag_member(guild, member)
            if tagged is False:
                # Already carries the role; this account has been reported before.
                return

            embed = EmbedBuilder.selfbot_alert(member, guild, reason)
            await self.post_log(embed)
            await self.notify_moderators(guild, embed)

        except Exception as e:
            log.error(f"Error handling self-bot detection for user {user_id}", exc_info=e)
        finally:
            self._in_flight.discard(key)

    async def _resolve_member(self, guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException:
            # Left the guild (404) or we can't see them
            return None

    async def tag_member(self, guild: discord.Guild, member: discord.Member) -> Optional[bool]:
        """
        True if the role was added now, False if the member already had it,
        None if tagging wasn't possible (role missing, above us, or the edit failed).
        """
        role = guild.get_role(self.suspicious_role_id)
        if role is None:
            log.warning(f"Suspicious role {self.suspicious_role_id} not found in guild {guild.id}")
            return None

        if role in member.roles or self._recently_tagged(guild.id, member.id):
            return False

        if not can_assign_role(guild, role):
            log.warning(f"Suspicious role {role.id} is above my top role in guild {guild.id}")
            return None

        ok, err = await send_with_backoff(lambda: member.add_roles(role, reason=TAG_REASON))
        if not ok:
            log.error(f"Failed to tag {member.id} in guild {guild.id}", exc_info=err)
            return None

        self._recent_tags[(guild.id, member.id)] = time.monotonic()
        log.discord(f"Tagged {member} ({member.id}) as suspicious in {guild.name}")
        return True

    def _recently_tagged(self, guild_id: int, user_id: int) -> bool:
        now = time.monotonic()
        for key, tagged_at in list(self._recent_tags.items()):
            if now - tagged_at > TAG_MEMO_SECONDS:
                del self._recent_tags[key]
        return (guild_id, user_id) in self._recent_tags

    async def post_log(self, embed: discord.Embed) -> bool:
        channel = self.bot.get_channel(self.log_channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(self.log_channel_id)
            except discord.HTTPException:
                channel = None

        if not isinstance(channel, discord.TextChannel):
            log.warning("Log channel not found or is not a text channel.")
            return False

        ok, err = await send_with_backoff(lambda: channel.send(embed=embed))
        if not ok:
            log.error(f"Failed to post alert to log channel {channel.id}", exc_info=err)
        return ok

    async def notify_moderators(self, guild: discord.Guild, embed: discord.Embed) -> int:
        role = guild.get_role(self.moderator_role_id)
        if role is None:
            log.warning(f"Moderator role {self.moderator_role_id} not found in guild {guild.id}")
            return 0

        delivered = 0
        for moderator in role.members:
            if moderator.bot:
                continue
            # Closed DMs are expected; one failure must not stop the rest.
            ok, _ = await send_with_backoff(lambda m=moderator: m.send(embed=embed), max_attempts=2)
            if ok:
                delivered += 1

        log.discord(f"Notified {delivered}/{len(role.members)} moderator(s) in {guild.name}")
        return delivered

async def setup(bot: commands.Bot):
    await bot.add_cog(Responder(bot))
