"""Tests for building animation requests."""

import base64

import pytest
from pydantic import ValidationError as PydanticValidationError

from gametorch.config.retry_policies import InvalidParameter, ConflictingParameter, ValidationError
from gametorch.models.animation_request import (
    AnimationRequest,
    build_animation_request,
    DEFAULT_MODEL_ID
)


class TestBuildAnimationRequest:
    """Test cases for build_animation_request."""

    @pytest.mark.parametrize("duration", [0, 1, 4, 6, 9, 11, 15, -5])
    def test_rejects_durations_other_than_5_or_10(self, duration):
        with pytest.raises(InvalidParameter):
            build_animation_request("a dragon", duration_seconds=duration)

    @pytest.mark.parametrize("duration", [5, 10])
    def test_accepts_allowed_durations(self, duration):
        request = build_animation_request("a dragon", duration_seconds=duration)
        assert request.duration_seconds == duration

    @pytest.mark.parametrize("model_id,model_name", [(1, "alpha/v2.1"), (6, "x"), (0, "")])
    def test_rejects_both_model_selectors(self, model_id, model_name):
        with pytest.raises(ConflictingParameter):
            build_animation_request("a dragon", model_id=model_id, model_name=model_name)

    def test_validation_errors_share_a_base_class(self):
        assert issubclass(InvalidParameter, ValidationError)
        assert issubclass(ConflictingParameter, ValidationError)

    def test_duration_checked_before_image_is_read(self, tmp_path):
        missing = tmp_path / "missing.png"
        with pytest.raises(InvalidParameter):
            build_animation_request("a dragon", duration_seconds=7, input_image_path=missing)

    def test_defaults_to_model_6(self):
        payload = build_animation_request("a dragon").to_payload()

        assert payload == {
            "prompt": "a dragon",
            "duration_seconds": 5,
            "input_image_base64": "",
            "animation_model_id": DEFAULT_MODEL_ID
        }

    def test_model_name_replaces_default_id(self):
        payload = build_animation_request("a dragon", model_name="alpha/v2.1").to_payload()

        assert payload["animation_model_name"] == "alpha/v2.1"
        assert "animation_model_id" not in payload

    def test_explicit_model_id(self):
        payload = build_animation_request("a dragon", model_id=3).to_payload()

        assert payload["animation_model_id"] == 3
        assert "animation_model_name" not in payload

    def test_configured_default_model(self):
        payload = build_animation_request("a dragon", default_model_id=9).to_payload()
        assert payload["animation_model_id"] == 9

    def test_input_image_is_base64_encoded(self, tmp_path):
        image = tmp_path / "input.png"
        image.write_bytes(b"\x89PNG\r\n\x1a\nfake")

        payload = build_animation_request("a dragon", input_image_path=image).to_payload()

        assert base64.b64decode(payload["input_image_base64"]) == b"\x89PNG\r\n\x1a\nfake"

    def test_missing_input_image_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            build_animation_request("a dragon", input_image_path=tmp_path / "missing.png")


class TestAnimationRequestModel:
    """Test cases for the AnimationRequest model itself."""

    def test_model_rejects_conflicting_selectors(self):
        with pytest.raises(PydanticValidationError):
            AnimationRequest(prompt="x", animation_model_id=1, animation_model_name="y")

    def test_model_rejects_bad_duration(self):
        with pytest.raises(PydanticValidationError):
            AnimationRequest(prompt="x", duration_seconds=7)

    def test_model_fills_default_model(self):
        assert AnimationRequest(prompt="x").animation_model_id == DEFAULT_MODEL_ID
