"""Animation status records and workflow outcome models.

The results endpoint answers either with a single object or with an array
whose first element is the object of interest, depending on the backend
version. ``decode_animation_result`` is the only place that looks at the wire
shape; everything else works on ``AnimationRecord``.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Optional, Dict, Any, Union
from pydantic import BaseModel, Field


class AnimationStatus(IntEnum):
    """Lifecycle state reported by the service."""
    GENERATING = 1
    COMPLETE = 2
    FAILED_REFUNDED = 3


STATUS_LABELS = {
    AnimationStatus.GENERATING: "generating",
    AnimationStatus.COMPLETE: "complete",
    AnimationStatus.FAILED_REFUNDED: "failed_refunded",
}


class AnimationRecord(BaseModel):
    """Canonical view of one animation result element."""

    id: Optional[Union[int, str]] = Field(default=None, description="Result identifier")
    animation_id: Optional[Union[int, str]] = Field(default=None, description="Animation identifier")
    status: Optional[int] = Field(default=None, description="Raw status code")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Element the record was decoded from")

    @property
    def lifecycle(self) -> Optional[AnimationStatus]:
        """Known lifecycle state, or None for a missing/unrecognized code."""
        try:
            return AnimationStatus(self.status)
        except ValueError:
            return None


@dataclass
class DecodeResult:
    """Result of decoding a status payload."""
    ok: bool
    record: Optional[AnimationRecord] = None
    error: Optional[str] = None


def _integer_or_none(value: Any) -> Optional[int]:
    # bool is an int subclass, JSON true/false is not a status code
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def identifier_or_none(value: Any) -> Optional[Union[int, str]]:
    """An int or non-empty string identifier, None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return value
    return None


def decode_animation_result(payload: Any) -> DecodeResult:
    """Normalize an object-or-array status payload into an AnimationRecord.

    Identifiers of an unexpected type decode as None rather than failing, the
    caller decides whether a missing id matters.
    """
    element = payload
    if isinstance(payload, list):
        if not payload:
            return DecodeResult(ok=False, error="empty result array")
        element = payload[0]

    if not isinstance(element, dict):
        return DecodeResult(
            ok=False,
            error=f"expected a JSON object, got {type(element).__name__}"
        )

    record = AnimationRecord(
        id=identifier_or_none(element.get("id")),
        animation_id=identifier_or_none(element.get("animation_id")),
        status=_integer_or_none(element.get("status")),
        raw=element
    )
    return DecodeResult(ok=True, record=record)


def describe_statuses(payload: Any) -> Any:
    """Add a human readable ``status_label`` next to every ``status`` code."""
    if isinstance(payload, list):
        return [describe_statuses(item) for item in payload]
    if isinstance(payload, dict):
        described = dict(payload)
        status = _integer_or_none(payload.get("status"))
        if status is not None:
            try:
                described["status_label"] = STATUS_LABELS[AnimationStatus(status)]
            except ValueError:
                described["status_label"] = "unknown"
        return described
    return payload


class WorkflowOutcome(BaseModel):
    """Durable summary of a successful blocking generation."""

    animation_id: Union[int, str] = Field(..., description="Animation identifier")
    result_id: Union[int, str] = Field(..., description="Result identifier")
    artifact_path: str = Field(..., description="Where the result ZIP was written")
