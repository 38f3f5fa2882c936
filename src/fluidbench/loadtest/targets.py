"""Call targets exercised by the load driver."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class CallOutcome:
    """Result reported by a call target for a single attempt."""

    success: bool
    error_reason: Optional[str] = None


CallTarget = Callable[[], Awaitable[CallOutcome]]


def default_base_url() -> str:
    """Base URL for HTTP targets, overridable via FLUIDBENCH_BASE_URL."""
    return os.environ.get("FLUIDBENCH_BASE_URL", DEFAULT_BASE_URL)


class HttpCallTarget:
    """POSTs a JSON payload to an endpoint and reports the outcome.

    A non-2xx status or a transport error is reported as a failed outcome
    rather than raised. The body must decode as JSON for the call to count
    as a success.
    """

    def __init__(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the HTTP call target.

        Args:
            path: Endpoint path, e.g. ``/api/fluid/cpu-intensive``
            payload: JSON body sent with every call
            base_url: Server base URL (default: FLUIDBENCH_BASE_URL or localhost:3000)
            timeout: Per-request timeout in seconds; None disables it
            client: Existing AsyncClient to reuse (not closed by this target)
        """
        self.path = path
        self.payload = payload or {}
        self.base_url = (base_url or default_base_url()).rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    async def __aenter__(self) -> "HttpCallTarget":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __call__(self) -> CallOutcome:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        try:
            response = await self._client.post(self.url, json=self.payload)
        except httpx.HTTPError as e:
            logger.debug(f"Transport error calling {self.url}: {e}")
            return CallOutcome(success=False, error_reason=str(e) or e.__class__.__name__)

        if not response.is_success:
            return CallOutcome(success=False, error_reason=f"HTTP {response.status_code}")

        try:
            response.json()
        except ValueError as e:
            return CallOutcome(success=False, error_reason=f"Invalid JSON response: {e}")

        return CallOutcome(success=True)
