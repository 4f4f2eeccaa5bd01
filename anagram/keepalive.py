import asyncio
import logging
from typing import Callable

from .config import PING_INTERVAL
from .errors import WriteError
from .ws_constants import PING_PAYLOAD

logger = logging.getLogger(__name__)


async def keepalive_loop(
    conn,
    on_failure: Callable[[WriteError], None],
    *,
    interval: float = PING_INTERVAL,
) -> None:
    """Write a ping every ``interval`` seconds until cancelled.

    The first failed write is reported through ``on_failure`` and ends the
    loop; it is not restarted.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            await conn.send_text(PING_PAYLOAD)
        except WriteError as exc:
            logger.warning("Keepalive stopped after failed ping: %s", exc)
            on_failure(exc)
            return
        logger.debug("Sent keepalive ping")
