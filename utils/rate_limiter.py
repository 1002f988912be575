# Retry wrapper for the Discord calls an escalation makes
# (role edits, log channel posts, moderator DMs)

import asyncio
from typing import Optional, Callable, Awaitable, Any
import discord
from utils.logger import get_logger

log = get_logger()

RETRIABLE_STATUSES = {408, 429, 500, 502, 503, 504}

class ExponentialBackoff:
    """Delays of base, 2*base, 4*base ... capped at max_delay, for max_attempts tries."""

    def __init__(self, base_delay: float = 1.0, max_delay: float = 32.0, max_attempts: int = 5):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_attempts = max_attempts
        self._attempt = 0

    def get_delay(self) -> float:
        delay = min(self.base_delay * (2 ** self._attempt), self.max_delay)
        self._attempt += 1
        return delay

    @property
    def attempts_exhausted(self) -> bool:
        return self._attempt >= self.max_attempts

async def send_with_backoff(
    coro_factory: Callable[[], Awaitable[Any]],
    max_attempts: int = 5,
    base_delay: float = 1.0
) -> tuple[bool, Optional[Exception]]:
    """
    Await coro_factory() until it succeeds, retrying 429s and transient 5xx.

    Anything else (403 for closed DMs, 404 for a vanished member, non-HTTP
    errors) ends the attempt straight away. Never raises.

    Returns:
        (success, last_exception)
    """
    backoff = ExponentialBackoff(base_delay=base_delay, max_attempts=max_attempts)
    last_error = None

    while not backoff.attempts_exhausted:
        try:
            await coro_factory()
            return True, None
        except discord.RateLimited as e:
            # Discord told us exactly how long; this wait is free
            await asyncio.sleep(e.retry_after + 0.1)
        except discord.HTTPException as e:
            last_error = e
            if e.status not in RETRIABLE_STATUSES:
                log.warning(f"[Backoff] HTTP {e.status}, not retrying.")
                return False, e
            delay = backoff.get_delay()
            log.warning(f"[Backoff] HTTP {e.status}, retrying in {delay:.1f}s")
            await asyncio.sleep(delay)
        except Exception as e:
            return False, e

    return False, last_error
