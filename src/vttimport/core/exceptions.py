"""Exception hierarchy for the VTT import pipeline.

Every error is terminal for the current import attempt; nothing is retried.
"""

from __future__ import annotations


class VTTImportError(Exception):
    """Base exception for all import pipeline errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedFormat(VTTImportError):
    """Raised when a document matches neither the legacy nor the canonical schema."""


class UnsupportedForSceneCreation(VTTImportError):
    """Raised when scene creation is requested for legacy input or input without an image."""


class MissingResolution(VTTImportError):
    """Raised when the document has no usable pixels-per-grid value."""


class ImageDecodeError(VTTImportError):
    """Raised when the embedded map image cannot be decoded or re-encoded."""


class TransportError(VTTImportError):
    """Raised when the scene store rejects or fails a submission."""


class SceneNotReady(TransportError):
    """Raised when the target scene is not loaded yet."""
