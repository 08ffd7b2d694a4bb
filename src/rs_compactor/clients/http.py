"""HTTP bridge client.

Talks JSON to a small bridge that fronts a Refined Storage network (for
example a computer on the network relaying component calls). Endpoints:

    GET  /methods     -> ["getPatterns", "getPattern", ...]
    GET  /connected   -> {"connected": true}
    GET  /patterns    -> [{"name", "label", "damage"}, ...]
    POST /pattern     {"name", "damage"} -> {"inputs": [[stack, ...], ...]}
    POST /item        {"name", "damage"} -> {"name", "damage", "size"}
    POST /tasks       {"pattern": {...}, "quantity": n} -> {"scheduled": true}

``/pattern`` and ``/item`` answer 404 (or a JSON null) for unknown recipes and
absent items; those map to ``None``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..errors import ServiceError
from ..models import ItemStack, PatternDefinition, PatternInfo

logger = logging.getLogger(__name__)

# remote component method name -> protocol method name
REMOTE_METHODS = {
    "getPatterns": "list_pattern_identifiers",
    "getPattern": "get_pattern",
    "getItem": "get_item",
    "scheduleTask": "schedule_task",
    "isConnected": "is_connected",
}


class HttpStorageClient:
    """StorageService over an HTTP bridge."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.address = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.address, timeout=timeout, transport=transport)

    def __enter__(self) -> "HttpStorageClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None,
                 allow_missing: bool = False) -> Any:
        try:
            response = self._client.request(method, path, json=payload)
            logger.debug("%s %s -> %d", method, path, response.status_code)
            if allow_missing and response.status_code == 404:
                return None
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.TimeoutException as e:
            raise ServiceError(f"{method} {self.address}{path} timed out") from e
        except httpx.HTTPStatusError as e:
            raise ServiceError(
                f"{method} {self.address}{path} failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {self.address}{path} failed: {e}") from e
        except ValueError as e:
            raise ServiceError(f"{method} {self.address}{path} returned invalid JSON") from e

    # -----------------------------
    # Capability probing
    # -----------------------------

    def available_methods(self) -> List[str]:
        remote = self._request("GET", "/methods") or []
        return [REMOTE_METHODS[name] for name in remote if name in REMOTE_METHODS]

    def is_connected(self) -> bool:
        data = self._request("GET", "/connected")
        if isinstance(data, dict):
            return bool(data.get("connected"))
        return bool(data)

    # -----------------------------
    # StorageService
    # -----------------------------

    def list_pattern_identifiers(self) -> List[PatternInfo]:
        data = self._request("GET", "/patterns") or []
        if not isinstance(data, list):
            raise ServiceError(f"Expected a list of patterns from {self.address}, got {type(data).__name__}")
        try:
            return [PatternInfo.from_mapping(entry) for entry in data]
        except (AttributeError, TypeError, ValueError) as e:
            raise ServiceError(f"Malformed pattern list from {self.address}: {e}") from e

    def get_pattern(self, info: PatternInfo) -> Optional[PatternDefinition]:
        data = self._request("POST", "/pattern", info.to_dict(), allow_missing=True)
        if data is None:
            return None
        try:
            return PatternDefinition.from_mapping(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise ServiceError(f"Malformed pattern {info.name} from {self.address}: {e}") from e

    def get_item(self, ref: Mapping[str, Any]) -> Optional[ItemStack]:
        payload = {"name": ref["name"], "damage": ref.get("damage", 0)}
        data = self._request("POST", "/item", payload, allow_missing=True)
        if data is None:
            return None
        try:
            return ItemStack.from_mapping(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise ServiceError(f"Malformed item {payload['name']} from {self.address}: {e}") from e

    def schedule_task(self, info: PatternInfo, quantity: int) -> bool:
        data = self._request("POST", "/tasks", {"pattern": info.to_dict(), "quantity": int(quantity)})
        if isinstance(data, dict):
            return bool(data.get("scheduled", True))
        return data is None or bool(data)
