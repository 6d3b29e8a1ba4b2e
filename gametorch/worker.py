"""
Temporal Worker Service

Runs the animation generation workflow and its activities, and offers the
client side helper that starts a run and waits for its outcome.
"""

import asyncio
import logging
import signal
import uuid
from typing import Dict, Any, Optional

from temporalio.client import Client
from temporalio.worker import Worker

from gametorch.activities.animation_activities import (
    submit_animation,
    check_animation_status,
    download_animation_zip
)
from gametorch.config import AppConfig, get_config
from gametorch.workflows.animation_workflow import AnimationGenerationWorkflow, AnimationWorkflowInput

logger = logging.getLogger(__name__)


class AnimationWorkerService:
    """Temporal Worker Service with proper lifecycle management."""

    def __init__(self, app_config: Optional[AppConfig] = None):
        self.config = app_config or get_config()
        self.client: Optional[Client] = None
        self.worker: Optional[Worker] = None
        self.shutdown_event = asyncio.Event()
        self._running = False

    async def initialize(self):
        """Connect to Temporal and build the worker."""
        temporal = self.config.temporal
        logger.info(f"Connecting to Temporal server at {temporal.host}")

        self.client = await Client.connect(temporal.host, namespace=temporal.namespace)

        self.worker = Worker(
            self.client,
            task_queue=temporal.task_queue,
            workflows=[AnimationGenerationWorkflow],
            activities=[
                submit_animation,
                check_animation_status,
                download_animation_zip
            ],
            max_concurrent_activities=temporal.max_concurrent_activities
        )

        logger.info("Worker initialized successfully:")
        logger.info(f"  Task Queue: {temporal.task_queue}")
        logger.info(f"  Max Concurrent Activities: {temporal.max_concurrent_activities}")

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self.shutdown)

    async def start(self):
        """Run the worker until ``shutdown`` is called."""
        if not self.worker:
            raise RuntimeError("Worker not initialized. Call initialize() first.")

        if self._running:
            logger.warning("Worker is already running")
            return

        self._running = True
        self._setup_signal_handlers()
        logger.info("Starting Temporal Worker Service...")

        try:
            async with self.worker:
                logger.info("Worker is ready to process workflows and activities")
                await self.shutdown_event.wait()
                logger.info("Shutdown signal received, stopping worker...")
        finally:
            self._running = False

    def shutdown(self):
        """Request a graceful shutdown."""
        logger.info("Initiating graceful shutdown...")
        self.shutdown_event.set()

    def health_check(self) -> bool:
        """Check if the worker service is healthy."""
        return self.client is not None and self._running


async def execute_animation_workflow(
    payload: Dict[str, Any],
    base_url: str,
    output_file: Optional[str] = None,
    app_config: Optional[AppConfig] = None,
    client: Optional[Client] = None
) -> Dict[str, Any]:
    """Start an AnimationGenerationWorkflow and wait for its outcome.

    Args:
        payload: Validated request body
        base_url: GameTorch endpoint the worker should call
        output_file: Destination of the ZIP on the worker host
        app_config: Configuration, defaults to the global one
        client: Existing Temporal client

    Returns:
        WorkflowOutcome as a dict
    """
    app_config = app_config or get_config()
    if client is None:
        client = await Client.connect(app_config.temporal.host, namespace=app_config.temporal.namespace)

    workflow_id = f"animation-{uuid.uuid4()}"
    logger.info(f"Starting workflow {workflow_id} on {app_config.temporal.task_queue}")

    return await client.execute_workflow(
        AnimationGenerationWorkflow.run,
        AnimationWorkflowInput(
            payload=payload,
            base_url=base_url,
            output_file=output_file,
            poll_interval=app_config.polling.poll_interval,
            progress_interval=app_config.polling.progress_interval,
            download_timeout=app_config.download_timeout(),
            download_heartbeat_timeout=app_config.download_heartbeat_timeout()
        ),
        id=workflow_id,
        task_queue=app_config.temporal.task_queue
    )


async def run_worker(app_config: Optional[AppConfig] = None):
    """Main entry point for the worker service."""
    worker_service = AnimationWorkerService(app_config)
    await worker_service.initialize()
    await worker_service.start()
