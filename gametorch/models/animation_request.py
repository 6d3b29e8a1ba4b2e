"""Animation generation request model and builder."""

import base64
from pathlib import Path
from typing import Optional, Dict, Any, Literal, Union
from pydantic import BaseModel, Field, model_validator

from gametorch.config.retry_policies import InvalidParameter, ConflictingParameter


ALLOWED_DURATIONS = (5, 10)
DEFAULT_MODEL_ID = 6


class AnimationRequest(BaseModel):
    """Request body for ``POST /api/animation``."""

    prompt: str = Field(..., description="Text prompt for animation generation")
    duration_seconds: Literal[5, 10] = Field(default=5, description="Animation duration in seconds")
    input_image_base64: str = Field(default="", description="Base64 encoded input image, empty when unused")

    # Model selection, exactly one is sent
    animation_model_id: Optional[int] = Field(default=None, description="Animation model ID")
    animation_model_name: Optional[str] = Field(default=None, description="Animation model name")

    @model_validator(mode="after")
    def validate_model_selector(self):
        """Fill in the default model and reject conflicting selectors."""
        if self.animation_model_id is not None and self.animation_model_name is not None:
            raise ValueError("Specify either animation_model_id or animation_model_name, not both")
        if self.animation_model_id is None and self.animation_model_name is None:
            self.animation_model_id = DEFAULT_MODEL_ID
        return self

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the JSON body sent to the service."""
        return self.model_dump(exclude_none=True)


def encode_input_image(path: Union[str, Path]) -> str:
    """Read an image fully and base64 encode it.

    Raises:
        OSError: the file is missing or unreadable
    """
    data = Path(path).read_bytes()
    return base64.b64encode(data).decode("ascii")


def build_animation_request(
    prompt: str,
    duration_seconds: int = 5,
    input_image_path: Optional[Union[str, Path]] = None,
    model_id: Optional[int] = None,
    model_name: Optional[str] = None,
    default_model_id: int = DEFAULT_MODEL_ID
) -> AnimationRequest:
    """Validate user parameters and assemble an AnimationRequest.

    All checks run before any network access.

    Args:
        prompt: Text prompt
        duration_seconds: 5 or 10
        input_image_path: Optional image to attach
        model_id: Optional numeric model selector
        model_name: Optional named model selector
        default_model_id: Model used when no selector is given

    Raises:
        InvalidParameter: duration is not 5 or 10
        ConflictingParameter: both model_id and model_name were given
        OSError: the input image cannot be read
    """
    if duration_seconds not in ALLOWED_DURATIONS:
        raise InvalidParameter(
            f"duration must be either 5 or 10 seconds, got {duration_seconds}"
        )

    if model_id is not None and model_name is not None:
        raise ConflictingParameter("Specify either model_id or model_name, not both")

    input_image_base64 = ""
    if input_image_path is not None:
        input_image_base64 = encode_input_image(input_image_path)

    if model_id is None and model_name is None:
        model_id = default_model_id

    return AnimationRequest(
        prompt=prompt,
        duration_seconds=duration_seconds,
        input_image_base64=input_image_base64,
        animation_model_id=model_id,
        animation_model_name=model_name
    )
