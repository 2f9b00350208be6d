"""Display capture: frame sources, transcoding and composition."""

from .compose import FILL_RGBA, compose
from .frame import CanonicalImage, DisplayInfo, RawFrame
from .source import (
    NOT_READY,
    FrameSource,
    SourceProvider,
    available_backends,
    create_provider,
    register_backend,
)
from .transcode import channel_indices, transcode

# Importing the backend registers it under "mss".
from . import mss_backend  # noqa: E402,F401

__all__ = [
    "CanonicalImage",
    "DisplayInfo",
    "FILL_RGBA",
    "FrameSource",
    "NOT_READY",
    "RawFrame",
    "SourceProvider",
    "available_backends",
    "channel_indices",
    "compose",
    "create_provider",
    "register_backend",
    "transcode",
]
