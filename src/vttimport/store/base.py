"""Collaborator interfaces: the scene store and user notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from vttimport.core.contracts import Anchor, PathPrimitive, SceneBundle

Severity = Literal["INFO", "SUCCESS", "WARNING", "ERROR"]


class SceneStore(ABC):
    """Remote (or local) scene the importer writes into.

    Submission methods raise ``TransportError`` when the store rejects a call.
    """

    @abstractmethod
    def is_scene_ready(self) -> bool:
        ...

    @abstractmethod
    def get_pixel_density(self) -> float:
        """Grid-to-pixel multiplier of the current scene."""
        ...

    @abstractmethod
    def get_selection_anchor(self) -> Anchor | None:
        """Position and scale of the first selected item, if any."""
        ...

    @abstractmethod
    def submit_primitive_batch(self, items: list[PathPrimitive]) -> None:
        ...

    @abstractmethod
    def submit_scene_bundle(self, bundle: SceneBundle) -> None:
        ...

    @abstractmethod
    def set_fog_filled(self, filled: bool) -> None:
        ...


class Notifier(ABC):
    """Fire-and-forget user feedback."""

    @abstractmethod
    def notify(self, message: str, severity: Severity = "INFO") -> None:
        ...
