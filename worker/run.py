"""Temporal Worker entry point.

This worker polls the sweep queue for workflow and activity tasks and makes
sure the daily expiry sweep cron workflow is registered.
"""
import asyncio
import logging
import signal
from concurrent.futures import ThreadPoolExecutor

from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.worker import Worker

from worker.activities import sweep_contracts, sweep_tasks
from worker.config import WorkerSettings
from worker.workflows import ExpirySweepWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger("worker")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """Install signal handlers for graceful shutdown."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            signal.signal(sig, lambda *_: stop_event.set())


async def register_sweep_schedule(client: Client, settings: WorkerSettings) -> bool:
    """Start the cron sweep workflow unless it is already running.

    Returns:
        True if a new cron workflow was started, False if one already existed.
    """
    try:
        await client.start_workflow(
            ExpirySweepWorkflow.run,
            id=settings.SWEEP_WORKFLOW_ID,
            task_queue=settings.WORKER_TASK_QUEUE,
            cron_schedule=settings.cron_schedule,
        )
    except WorkflowAlreadyStartedError:
        logger.info("Sweep workflow %s already scheduled", settings.SWEEP_WORKFLOW_ID)
        return False

    logger.info(
        "Scheduled sweep workflow %s with cron %r",
        settings.SWEEP_WORKFLOW_ID,
        settings.cron_schedule,
    )
    return True


async def run_worker() -> None:
    """Run the Temporal worker."""
    # Load configuration
    settings = WorkerSettings()

    logger.info("Starting worker: %r", settings)

    # Connect to Temporal
    client = await Client.connect(
        settings.TEMPORAL_ADDRESS,
        namespace=settings.TEMPORAL_NAMESPACE
    )

    # Create thread pool for sync activities
    activity_executor = ThreadPoolExecutor(max_workers=settings.MAX_ACTIVITY_WORKERS)

    # Create worker with workflows and activities
    worker = Worker(
        client,
        task_queue=settings.WORKER_TASK_QUEUE,
        workflows=[ExpirySweepWorkflow],
        activities=[sweep_contracts, sweep_tasks],
        activity_executor=activity_executor,
    )

    await register_sweep_schedule(client, settings)

    # Setup graceful shutdown
    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    # Run worker
    logger.info("Worker running, polling for tasks...")
    worker_task = asyncio.create_task(worker.run())

    # Wait for shutdown signal
    await stop_event.wait()
    logger.info("Shutdown signal received, stopping worker...")

    # Cancel worker task and shutdown executor
    worker_task.cancel()
    await asyncio.gather(worker_task, return_exceptions=True)
    activity_executor.shutdown(wait=True)
    logger.info("Worker stopped")


def main() -> None:
    """Main entry point."""
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
