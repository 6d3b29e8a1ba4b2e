"""Animation operations: submit, poll, download.

``generate`` drives one run end to end:

    build request -> submit -> poll until terminal -> fetch ZIP -> write

The two retry loops (status polling and artifact-not-ready) take an
injectable ``sleep`` so the same code runs in-process, inside a Temporal
workflow (where ``asyncio.sleep`` is a durable timer) and under tests.
Suspension happens only at the HTTP calls and at ``sleep``; the artifact is
written last, so cancelling a run at any suspension point leaves no file
behind.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from gametorch.config import PollingConfig, get_config
from gametorch.config.retry_policies import (
    RemoteError,
    MalformedResponse,
    JobFailedRefunded,
    ArtifactTimeout
)
from gametorch.models.animation_request import build_animation_request
from gametorch.models.animation_result import (
    AnimationStatus,
    WorkflowOutcome,
    decode_animation_result,
    identifier_or_none
)
from gametorch.utils.api_client import AnimationsClient, AnimationId


logger = logging.getLogger(__name__)

# The ZIP endpoint answers 500 until the archive has been materialized
ARTIFACT_NOT_READY_STATUS = 500

Sleep = Callable[[float], Awaitable[Any]]


def _reporter(silent: bool) -> Callable[[str], None]:
    def say(message: str) -> None:
        if not silent:
            logger.info(message)
    return say


def extract_animation_id(response: Any) -> AnimationId:
    """Pull ``animation_id`` out of a submission/regeneration response."""
    animation_id = None
    if isinstance(response, dict):
        animation_id = identifier_or_none(response.get("animation_id"))
    if animation_id is None:
        raise MalformedResponse("animation_id missing from response")
    return animation_id


def extract_result_id(payload: Any) -> AnimationId:
    """Pull the result ``id`` out of a terminal status payload."""
    decoded = decode_animation_result(payload)
    result_id = decoded.record.id if decoded.ok else None
    if result_id is None:
        raise MalformedResponse("result id missing")
    return result_id


def resolve_artifact_path(
    output_file: Optional[Union[str, Path]],
    animation_id: AnimationId,
    result_id: AnimationId
) -> str:
    """Destination for the ZIP: caller supplied or ``animation_<id>_<result>.zip``."""
    if output_file:
        return str(output_file)
    return f"animation_{animation_id}_{result_id}.zip"


def save_artifact(path: Union[str, Path], data: bytes) -> str:
    """Write the artifact, fully replacing any existing file at ``path``.

    The bytes go to a sibling temporary file first and are moved into place,
    so a failed or interrupted write never leaves a truncated archive.
    """
    destination = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        os.replace(tmp_name, destination)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return str(destination)


async def poll_animation_results(
    check_status: Callable[[], Awaitable[Any]],
    *,
    animation_id: Optional[AnimationId] = None,
    interval: float = 5,
    sleep: Sleep = asyncio.sleep,
    progress_interval: Optional[float] = 30,
    on_progress: Optional[Callable[[float], None]] = None
) -> Any:
    """Poll the status resource until the animation reaches a terminal state.

    There is no iteration cap: render time is not bounded by this client.
    Callers that need a deadline cancel the surrounding task.

    Args:
        check_status: Fetches the raw status payload once
        animation_id: Used in error messages and logs
        interval: Seconds between polls
        sleep: Awaitable sleep, swapped for a timer or a fake in tests
        progress_interval: Cumulative wait between ``on_progress`` calls
        on_progress: Called with the elapsed seconds

    Returns:
        The full terminal (status 2) payload, as received

    Raises:
        JobFailedRefunded: the service reported status 3
    """
    elapsed = 0
    while True:
        payload = await check_status()
        decoded = decode_animation_result(payload)

        if not decoded.ok:
            logger.warning(f"Undecodable status payload for animation {animation_id}: {decoded.error}")
        else:
            lifecycle = decoded.record.lifecycle
            if lifecycle is AnimationStatus.COMPLETE:
                logger.debug(f"Animation {animation_id} complete after {elapsed} seconds")
                return payload
            if lifecycle is AnimationStatus.FAILED_REFUNDED:
                raise JobFailedRefunded(animation_id)
            if lifecycle is None:
                # Missing or unknown codes keep the loop going
                logger.warning(
                    f"Unrecognized status {decoded.record.status!r} for animation {animation_id}, still polling"
                )

        await sleep(interval)
        elapsed += interval
        if on_progress and progress_interval and elapsed % progress_interval == 0:
            on_progress(elapsed)


async def fetch_result_zip(
    download: Callable[[], Awaitable[bytes]],
    *,
    result_id: Optional[AnimationId] = None,
    interval: float = 5,
    max_wait: float = 120,
    sleep: Sleep = asyncio.sleep,
    on_waiting: Optional[Callable[[], None]] = None
) -> bytes:
    """Download the result ZIP, waiting while the server says it is not ready.

    Only HTTP 500 is treated as "not yet materialized". Any other remote error
    and every transport error propagate on the first occurrence.

    Raises:
        ArtifactTimeout: still not ready after ``max_wait`` seconds of waiting
        RemoteError: any non-2xx status other than 500
        TransportError: the server could not be reached
    """
    waited = 0
    while True:
        try:
            return await download()
        except RemoteError as e:
            if e.status != ARTIFACT_NOT_READY_STATUS:
                raise
            logger.debug(f"Result {result_id} ZIP not ready yet ({waited}s waited)")

        if waited == 0 and on_waiting:
            on_waiting()
        if waited >= max_wait:
            raise ArtifactTimeout(result_id, waited)

        await sleep(interval)
        waited += interval


async def get_animation(client: AnimationsClient, animation_id: AnimationId) -> Any:
    """Fetch animation results as-is (array or object)."""
    return await client.get_animation_results(animation_id)


async def list_animations(client: AnimationsClient) -> Any:
    """List all animations belonging to the current user."""
    return await client.list_animations()


async def regenerate(client: AnimationsClient, animation_id: AnimationId) -> Any:
    """Regenerate an animation with the parameters of an existing one.

    Returns the service response, ``{"animation_id": <new_id>}``.
    """
    response = await client.regenerate_animation(animation_id)
    extract_animation_id(response)
    return response


async def generate(
    client: AnimationsClient,
    prompt: str,
    duration_seconds: int = 5,
    block: bool = False,
    output_file: Optional[Union[str, Path]] = None,
    input_image_path: Optional[Union[str, Path]] = None,
    model_id: Optional[int] = None,
    model_name: Optional[str] = None,
    silent: bool = False,
    polling: Optional[PollingConfig] = None,
    sleep: Sleep = asyncio.sleep
) -> Dict[str, Any]:
    """Generate a new animation from a prompt.

    Non-blocking runs return the raw submission response. Blocking runs wait
    for the render, download the ZIP and return
    ``{"animation_id", "result_id", "artifact_path"}``.
    """
    polling = polling or get_config().polling
    say = _reporter(silent)

    request = build_animation_request(
        prompt,
        duration_seconds=duration_seconds,
        input_image_path=input_image_path,
        model_id=model_id,
        model_name=model_name,
        default_model_id=polling.default_model_id
    )

    say("Starting animation generation request...")
    response = await client.create_animation(request.to_payload())
    animation_id = extract_animation_id(response)
    say(f"Animation created successfully (ID: {animation_id}).")

    if not block:
        return response

    say(f"Polling for results every {polling.poll_interval} seconds...")
    results = await poll_animation_results(
        lambda: client.get_animation_results(animation_id),
        animation_id=animation_id,
        interval=polling.poll_interval,
        sleep=sleep,
        progress_interval=polling.progress_interval,
        on_progress=lambda elapsed: say(f"Still polling ({elapsed} total seconds elapsed)")
    )
    result_id = extract_result_id(results)

    say("Render complete, downloading ZIP...")
    data = await fetch_result_zip(
        lambda: client.download_result_zip(result_id),
        result_id=result_id,
        interval=polling.artifact_retry_interval,
        max_wait=polling.artifact_max_wait,
        sleep=sleep,
        on_waiting=lambda: say("Animation rendered successfully, waiting on .zip file...")
    )

    path = save_artifact(resolve_artifact_path(output_file, animation_id, result_id), data)
    say(f"ZIP saved to {path}")

    return WorkflowOutcome(
        animation_id=animation_id,
        result_id=result_id,
        artifact_path=path
    ).model_dump()
