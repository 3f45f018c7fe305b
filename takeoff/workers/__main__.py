"""
Standalone extraction worker.

Runs the extraction scheduler without the API, until SIGINT or SIGTERM.

Usage:
    python -m takeoff.workers
"""

import asyncio
import logging
import signal

from takeoff.boundary.db.create_tables import create_all_tables
from takeoff.configs import get_settings
from takeoff.observability.logger import configure_logging
from takeoff.workers.scheduler import build_scheduler

logger = logging.getLogger(__name__)


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    await create_all_tables()
    scheduler = build_scheduler(settings)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await scheduler.start()
    logger.info(f"{__name__}:main - Worker running, press Ctrl+C to stop")
    await stop_event.wait()
    await scheduler.stop()


if __name__ == "__main__":
    asyncio.run(main())
