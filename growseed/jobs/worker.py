"""
Headless job runner.

Reads the desired job name from CLI args or the WORKER_JOB environment
variable and runs it against a freshly built tracker runtime.
"""

import asyncio
import os
import sys
from collections.abc import Awaitable, Callable

from growseed.config import settings
from growseed.infrastructure.observability.logging import get_logger, setup_logging
from growseed.runtime import TrackerRuntime

logger = get_logger(__name__)

JobCoroutine = Callable[[TrackerRuntime], Awaitable[None]]


async def run_tick_loop(runtime: TrackerRuntime) -> None:
    """Tick forever with whatever context is configured in ACTIVE_CONTEXT."""
    runtime.driver.active_identifier = os.getenv("ACTIVE_CONTEXT") or None
    await runtime.driver.run_forever()


async def run_pull(runtime: TrackerRuntime) -> None:
    record = await runtime.orchestrator.pull()
    logger.info("Pull job finished", whitelist_size=len(record.whitelist or []))


async def run_push(runtime: TrackerRuntime) -> None:
    await runtime.orchestrator.push()
    logger.info("Push job finished")


async def run_submit_score(runtime: TrackerRuntime) -> None:
    payload = await runtime.event_store.submit_score(runtime.store, runtime.accumulator.now())
    logger.info("Score job finished", score=payload.score)


JOB_REGISTRY: dict[str, JobCoroutine] = {
    "tick_loop": run_tick_loop,
    "pull": run_pull,
    "push": run_push,
    "submit_score": run_submit_score,
}


def _resolve_job_name() -> str:
    """Pick the target job from CLI args or WORKER_JOB env variable."""
    if len(sys.argv) > 1:
        return sys.argv[1].strip().lower()
    return os.getenv("WORKER_JOB", "tick_loop").strip().lower()


async def run_worker(job_name: str | None = None, runtime: TrackerRuntime | None = None) -> None:
    """Run the requested job."""
    name = (job_name or _resolve_job_name()).strip().lower()
    if name not in JOB_REGISTRY:
        raise ValueError(
            f"Unknown worker job '{name}'. "
            f"Available jobs: {', '.join(sorted(JOB_REGISTRY.keys()))}"
        )

    runtime = runtime or TrackerRuntime.build()
    logger.info("Starting worker", job=name)
    await runtime.start(run_tick_loop=False)
    try:
        await JOB_REGISTRY[name](runtime)
    finally:
        await runtime.stop()


def main() -> None:
    """CLI entrypoint."""
    setup_logging(log_level=settings.LOG_LEVEL)
    job_name = _resolve_job_name()
    asyncio.run(run_worker(job_name))


if __name__ == "__main__":
    main()
