"""HTTP client for a remote scene store.

Endpoints (relative to ``base_url``):

    GET  /scene/ready        -> {"ready": bool}
    GET  /scene/grid/dpi     -> {"dpi": number}
    GET  /player/selection   -> {"items": [{"position": {x, y}, "scale": {x, y}}, ...]}
    POST /scene/items        <- {"items": [...]}
    POST /assets/scenes      <- multipart: "scene" (JSON) + "image" (file)
    PUT  /scene/fog          <- {"filled": bool}
"""

from __future__ import annotations

import json
import logging

import requests
from pydantic import ValidationError

from vttimport.core.contracts import Anchor, PathPrimitive, SceneBundle, Vector2
from vttimport.core.exceptions import TransportError
from .base import SceneStore

logger = logging.getLogger(__name__)


class HttpSceneStore(SceneStore):
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}", {"url": url}) from e
        return response

    def _json(self, method: str, path: str, **kwargs) -> dict:
        response = self._request(method, path, **kwargs)
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned invalid JSON", {"error": str(e)}) from e
        if not isinstance(data, dict):
            raise TransportError(
                f"{method} {path} returned {type(data).__name__}, expected an object",
                {"response": str(data)},
            )
        return data

    def is_scene_ready(self) -> bool:
        return bool(self._json("GET", "/scene/ready").get("ready", False))

    def get_pixel_density(self) -> float:
        data = self._json("GET", "/scene/grid/dpi")
        try:
            return float(data["dpi"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError("Scene store returned no grid dpi", {"response": str(data)}) from e

    def get_selection_anchor(self) -> Anchor | None:
        data = self._json("GET", "/player/selection")
        items = data.get("items") or []
        if not items:
            return None
        try:
            first = items[0]
            scale = first.get("scale") or {"x": 1, "y": 1}
            return Anchor(position=Vector2(**first["position"]), scale=Vector2(**scale))
        except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as e:
            raise TransportError("Scene store returned a malformed selection", {"response": str(data)}) from e

    def submit_primitive_batch(self, items: list[PathPrimitive]) -> None:
        self._request("POST", "/scene/items", json={"items": [i.to_store_dict() for i in items]})

    def submit_scene_bundle(self, bundle: SceneBundle) -> None:
        base_map = bundle.base_map
        scene = {
            "name": bundle.name,
            "gridType": bundle.grid_type,
            "baseMap": {"name": base_map.name, "dpi": base_map.dpi},
            "items": [item.to_store_dict() for item in bundle.items],
        }
        with open(base_map.path, "rb") as f:
            self._request(
                "POST",
                "/assets/scenes",
                data={"scene": json.dumps(scene)},
                files={"image": (base_map.filename, f, base_map.mime_type)},
            )
        logger.info(f"Uploaded scene '{bundle.name}' with {len(bundle.items)} items")

    def set_fog_filled(self, filled: bool) -> None:
        self._request("PUT", "/scene/fog", json={"filled": filled})
