"""Temporal Workflows for the daily expiry sweep.

ExpirySweepWorkflow runs two independent activities:
sweep_contracts -> sweep_tasks
A failure in one pass is recorded and does not stop the other.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from worker.activities import sweep_contracts, sweep_tasks


@workflow.defn
class ExpirySweepWorkflow:
    """Workflow that notifies about expiring contracts and due tasks.

    Registered as a cron workflow by the worker (daily at 09:00 by default)
    and also started on demand through the API. Activities are not retried:
    a retry would resend notifications already delivered for earlier items.
    """

    @workflow.run
    async def run(self) -> dict:
        """Execute both sweep passes.

        Returns:
            Dict keyed by pass name with the per-pass counters, or a failure entry.
        """
        workflow.logger.info("Starting expiry sweep")

        results: dict = {}
        for name, sweep in (("contracts", sweep_contracts), ("tasks", sweep_tasks)):
            try:
                results[name] = await workflow.execute_activity(
                    sweep,
                    start_to_close_timeout=timedelta(minutes=10),
                    retry_policy=RetryPolicy(maximum_attempts=1),
                )
            except ActivityError as e:
                cause = e.cause or e
                workflow.logger.error(f"Sweep pass {name} failed: {cause}")
                results[name] = {"status": "failed", "error": str(cause)}

        workflow.logger.info(f"Expiry sweep finished: {results}")
        return results


__all__ = ["ExpirySweepWorkflow"]
