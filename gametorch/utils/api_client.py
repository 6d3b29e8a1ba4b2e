"""
GameTorch API Client

Thin async wrapper over the GameTorch HTTP API. Every request carries the
bearer token; failures are mapped onto the client's error taxonomy so callers
never see raw httpx exceptions.
"""

import logging
from typing import Dict, Any, Optional, Union

import httpx

from gametorch.config import AppConfig, get_config
from gametorch.config.retry_policies import TransportError, RemoteError, MalformedResponse


logger = logging.getLogger(__name__)

AnimationId = Union[int, str]


class AnimationsClient:
    """Client for the GameTorch animation endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, app_config: Optional[AppConfig] = None, local: bool = False) -> "AnimationsClient":
        """Build a client from application configuration."""
        app_config = app_config or get_config()
        return cls(
            api_key=app_config.api.api_key or "",
            base_url=app_config.api.resolve_base_url(local),
            timeout=app_config.api.request_timeout
        )

    async def __aenter__(self) -> "AnimationsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def get_http_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._http_client

    async def close(self):
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        client = self.get_http_client()
        logger.debug(f"{method} {self.base_url}{path}")

        try:
            response = await client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.debug(f"Request error for {method} {path}: {e}")
            raise TransportError(f"{method} {self.base_url}{path} failed: {e}") from e

        if not response.is_success:
            raise RemoteError(response.status_code, response.text, url=str(response.url))

        return response

    async def request_json(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        """Perform one authenticated call and decode the JSON body as-is.

        Raises:
            TransportError: the server could not be reached
            RemoteError: the server answered with a non-2xx status
            MalformedResponse: the body is not JSON
        """
        response = await self._send(method, path, json=json)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {path} returned a non-JSON body") from e

    async def request_bytes(self, method: str, path: str) -> bytes:
        """Perform one authenticated call and return the raw body."""
        response = await self._send(method, path)
        return response.content

    async def get_animation_results(self, animation_id: AnimationId) -> Any:
        """``GET /api/animation_results/<animation_id>`` (array or object)."""
        return await self.request_json("GET", f"/api/animation_results/{animation_id}")

    async def list_animations(self) -> Any:
        """``GET /api/animations``"""
        return await self.request_json("GET", "/api/animations")

    async def create_animation(self, body: Dict[str, Any]) -> Any:
        """``POST /api/animation``"""
        return await self.request_json("POST", "/api/animation", json=body)

    async def download_result_zip(self, result_id: AnimationId) -> bytes:
        """``GET /api/animation_result_zip/<result_id>``"""
        return await self.request_bytes("GET", f"/api/animation_result_zip/{result_id}")

    async def regenerate_animation(self, animation_id: AnimationId) -> Any:
        """``POST /api/animation/regenerate/<animation_id>``"""
        return await self.request_json("POST", f"/api/animation/regenerate/{animation_id}")
