from __future__ import annotations

import asyncio
import logging

import uvicorn

from . import config
from .orchestrator import FetchOrchestrator
from .poller import StationFeed, log_outcome, run_polling
from .sources import default_sources


def configure_logging() -> None:
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    feed = StationFeed(FetchOrchestrator(default_sources()))
    asyncio.run(run_polling(feed, log_outcome))


def serve() -> None:
    configure_logging()
    uvicorn.run("villo.app.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
