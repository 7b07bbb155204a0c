"""Validator module for checking media URL liveness."""

from .liveness import (
    ProbeResult,
    LivenessProbe,
)

__all__ = [
    "ProbeResult",
    "LivenessProbe",
]
