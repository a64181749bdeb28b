"""Scene store collaborators and the factory used by the CLI."""

from __future__ import annotations

from pathlib import Path

from vttimport.core.contracts import StoreConfig
from .base import Notifier, SceneStore, Severity
from .remote import HttpSceneStore
from .local import LocalSceneStore
from .notifier import ConsoleNotifier, LoggingNotifier


def build_store(config: StoreConfig, data_root: Path) -> SceneStore:
    """Instantiate the store described by ``config``."""
    if config.kind == "http":
        return HttpSceneStore(config.base_url, timeout=config.timeout_seconds)
    return LocalSceneStore(
        Path(data_root) / "store",
        pixel_density=config.pixel_density,
        anchor=config.selection,
        scene_ready=config.scene_ready,
    )


__all__ = [
    "SceneStore",
    "Notifier",
    "Severity",
    "LocalSceneStore",
    "HttpSceneStore",
    "LoggingNotifier",
    "ConsoleNotifier",
    "build_store",
]
