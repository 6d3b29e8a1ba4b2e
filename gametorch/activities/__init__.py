"""Temporal activities for animation generation."""

from .animation_activities import (
    submit_animation,
    check_animation_status,
    download_animation_zip
)

__all__ = [
    "submit_animation",
    "check_animation_status",
    "download_animation_zip"
]
