"""Animation generation workflow using Temporal."""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Any, Optional, Union

from temporalio import workflow
from temporalio.exceptions import ApplicationError

with workflow.unsafe.imports_passed_through():
    from gametorch.activities.animation_activities import (
        submit_animation,
        check_animation_status,
        download_animation_zip
    )
    from gametorch.animations import (
        poll_animation_results,
        extract_animation_id,
        extract_result_id
    )
    from gametorch.config.retry_policies import get_retry_policy, GameTorchError
    from gametorch.models.animation_result import WorkflowOutcome


@dataclass
class AnimationWorkflowInput:
    """Input of one generation run; the request payload is already validated."""
    payload: Dict[str, Any]
    base_url: str
    output_file: Optional[str] = None
    poll_interval: int = 5
    progress_interval: int = 30
    download_timeout: int = 900  # seconds, see AppConfig.download_timeout
    download_heartbeat_timeout: int = 65  # seconds


@workflow.defn
class AnimationGenerationWorkflow:
    """Submit an animation, wait for the render and download its ZIP."""

    def __init__(self):
        self.animation_id: Optional[Union[int, str]] = None
        self.result_id: Optional[Union[int, str]] = None
        self.artifact_path: Optional[str] = None
        self.phase: str = "pending"

    @workflow.run
    async def run(self, request: AnimationWorkflowInput) -> Dict[str, Any]:
        """Main workflow execution.

        Returns:
            WorkflowOutcome as a dict
        """
        try:
            return await self._generate(request)
        except GameTorchError as e:
            self.phase = "failed"
            # Domain failures end the run, they are never retried
            raise ApplicationError(str(e), type=type(e).__name__, non_retryable=True) from e

    async def _generate(self, request: AnimationWorkflowInput) -> Dict[str, Any]:
        self.phase = "submitting"
        response = await workflow.execute_activity(
            submit_animation,
            args=[request.payload, request.base_url],
            start_to_close_timeout=timedelta(seconds=60),
            retry_policy=get_retry_policy("submit_animation")
        )
        self.animation_id = extract_animation_id(response)
        workflow.logger.info(f"Animation created successfully (ID: {self.animation_id})")

        self.phase = "generating"
        results = await poll_animation_results(
            lambda: workflow.execute_activity(
                check_animation_status,
                args=[self.animation_id, request.base_url],
                start_to_close_timeout=timedelta(seconds=30),
                retry_policy=get_retry_policy("check_animation_status")
            ),
            animation_id=self.animation_id,
            interval=request.poll_interval,
            sleep=asyncio.sleep,
            progress_interval=request.progress_interval,
            on_progress=lambda elapsed: workflow.logger.info(
                f"Still polling animation {self.animation_id} ({elapsed} total seconds elapsed)"
            )
        )
        self.result_id = extract_result_id(results)

        self.phase = "downloading"
        self.artifact_path = await workflow.execute_activity(
            download_animation_zip,
            args=[self.animation_id, self.result_id, request.output_file, request.base_url],
            start_to_close_timeout=timedelta(seconds=request.download_timeout),
            heartbeat_timeout=timedelta(seconds=request.download_heartbeat_timeout),
            retry_policy=get_retry_policy("download_animation_zip")
        )

        self.phase = "complete"
        return WorkflowOutcome(
            animation_id=self.animation_id,
            result_id=self.result_id,
            artifact_path=self.artifact_path
        ).model_dump()

    @workflow.query
    def get_status(self) -> Dict[str, Any]:
        """Query current workflow status."""
        return {
            "phase": self.phase,
            "animation_id": self.animation_id,
            "result_id": self.result_id,
            "artifact_path": self.artifact_path
        }
