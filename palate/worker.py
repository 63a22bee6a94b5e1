from __future__ import annotations

import argparse
import logging
import signal

from redis import Redis
from rq import Queue, Worker

from palate.core.config import settings

WORKER_LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"


def _configure_logging() -> None:
    logging.basicConfig(level=settings.log_level, format=WORKER_LOG_FORMAT, force=True)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a Palate background worker")
    parser.add_argument(
        "--queues",
        nargs="+",
        default=settings.worker_queue_names,
        help="Queues to listen on, highest priority first (default: WORKER_QUEUE_NAMES)",
    )
    parser.add_argument("--burst", action="store_true", help="Exit once the queues are empty")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    _configure_logging()
    logger = logging.getLogger("palate.worker")
    if not args.queues:
        logger.error("No worker queues configured; set WORKER_QUEUE_NAMES or pass --queues.")
        return
    redis_connection = Redis.from_url(settings.redis_url)
    queues = [Queue(name, connection=redis_connection) for name in args.queues]
    logger.info("Starting worker for queues: %s", ", ".join(args.queues))
    worker = Worker(queues, connection=redis_connection, name=f"palate-worker-{'-'.join(args.queues)}")
    try:
        # The scheduler thread enqueues RQ retries and the periodic embedding backfill.
        worker.work(with_scheduler=True, burst=args.burst)
    except KeyboardInterrupt:
        worker.request_stop(signal.SIGINT, None)
        logger.info("Worker shutdown requested")


if __name__ == "__main__":
    main()
