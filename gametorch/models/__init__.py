"""Data models for animation requests and results."""

from .animation_request import (
    AnimationRequest,
    build_animation_request,
    encode_input_image,
    ALLOWED_DURATIONS,
    DEFAULT_MODEL_ID
)
from .animation_result import (
    AnimationStatus,
    AnimationRecord,
    DecodeResult,
    WorkflowOutcome,
    decode_animation_result,
    describe_statuses,
    identifier_or_none
)

__all__ = [
    "AnimationRequest",
    "build_animation_request",
    "encode_input_image",
    "ALLOWED_DURATIONS",
    "DEFAULT_MODEL_ID",
    "AnimationStatus",
    "AnimationRecord",
    "DecodeResult",
    "WorkflowOutcome",
    "decode_animation_result",
    "describe_statuses",
    "identifier_or_none"
]
