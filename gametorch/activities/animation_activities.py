"""Animation generation activities for Temporal workflows.

Each activity opens its own API client from the worker's configuration; the
API key never travels through workflow history, only the base URL does.
"""

import asyncio
from typing import Dict, Any, Optional, Union
from temporalio import activity

from gametorch.animations import (
    fetch_result_zip,
    resolve_artifact_path,
    save_artifact
)
from gametorch.config import get_config
from gametorch.config.retry_policies import GameTorchError
from gametorch.utils.api_client import AnimationsClient


def _make_client(base_url: str) -> AnimationsClient:
    app_config = get_config()
    return AnimationsClient(
        api_key=app_config.api.api_key or "",
        base_url=base_url,
        timeout=app_config.api.request_timeout
    )


async def _heartbeat_sleep(seconds: float) -> None:
    activity.heartbeat()
    await asyncio.sleep(seconds)


@activity.defn
async def submit_animation(payload: Dict[str, Any], base_url: str) -> Dict[str, Any]:
    """Submit an animation generation request.

    Args:
        payload: Request body built by ``AnimationRequest.to_payload``
        base_url: GameTorch endpoint

    Returns:
        The raw submission response
    """
    activity.logger.info(f"Submitting animation request: {payload.get('prompt', '')[:50]}")

    async with _make_client(base_url) as client:
        try:
            response = await client.create_animation(payload)
        except GameTorchError as e:
            activity.logger.error(f"Animation submission failed: {e}")
            raise

    activity.logger.info(f"Animation submitted: {response}")
    return response


@activity.defn
async def check_animation_status(animation_id: Union[int, str], base_url: str) -> Any:
    """Fetch the status payload of an animation once.

    Args:
        animation_id: Animation identifier
        base_url: GameTorch endpoint

    Returns:
        The raw status payload (array or object)
    """
    activity.logger.info(f"Checking animation status: {animation_id}")

    async with _make_client(base_url) as client:
        return await client.get_animation_results(animation_id)


@activity.defn
async def download_animation_zip(
    animation_id: Union[int, str],
    result_id: Union[int, str],
    output_file: Optional[str],
    base_url: str
) -> str:
    """Download the result ZIP and write it on the worker host.

    Heartbeats while the server reports the archive as not ready.

    Returns:
        Path the ZIP was written to
    """
    polling = get_config().polling
    activity.logger.info(f"Downloading result ZIP {result_id} of animation {animation_id}")

    async with _make_client(base_url) as client:
        data = await fetch_result_zip(
            lambda: client.download_result_zip(result_id),
            result_id=result_id,
            interval=polling.artifact_retry_interval,
            max_wait=polling.artifact_max_wait,
            sleep=_heartbeat_sleep,
            on_waiting=lambda: activity.logger.info(f"Result {result_id} rendered, waiting on .zip file")
        )

    path = save_artifact(resolve_artifact_path(output_file, animation_id, result_id), data)
    activity.logger.info(f"ZIP saved to {path} ({len(data)} bytes)")
    return path
