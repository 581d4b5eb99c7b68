"""HTTPX-based implementation of PeerStatusPort.

Asks a peer node for the role it reports about itself, using the
``GET /ha/status`` endpoint served by ha_arbiter_fastapi.
"""

from __future__ import annotations

import httpx

from ha_arbiter.adapters.ports import PeerStatusPort
from ha_arbiter.domain.cluster import ClusterNodeState
from ha_arbiter.domain.exceptions import HAConfigError, StoreUnavailableError

STATUS_PATH = "/ha/status"


class HTTPXPeerStatusProbe:
    """Fetches a peer's self-reported HA status over HTTP.

    Args:
        timeout: Request timeout in seconds. Defaults to 2.0.
        client: Optional httpx.Client for dependency injection (testing).
               If not provided, a new client is created per request.
    """

    def __init__(
        self,
        timeout: float = 2.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client

    def fetch_status(self, url: str) -> ClusterNodeState:
        """Fetch the status a peer reports about itself.

        Args:
            url: Base URL of the peer (e.g., "http://10.0.0.12:8080").

        Returns:
            ClusterNodeState built from the peer's response.

        Raises:
            StoreUnavailableError: On network errors, non-2xx responses or
                a malformed body.
        """
        target_url = url.rstrip("/") + STATUS_PATH

        try:
            if self._client is not None:
                response = self._client.get(target_url, timeout=self._timeout)
            else:
                with httpx.Client() as client:
                    response = client.get(target_url, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise StoreUnavailableError(
                f"peer {url} unreachable: {e}", original_error=e
            ) from e
        except ValueError as e:
            raise StoreUnavailableError(
                f"peer {url} returned invalid JSON", original_error=e
            ) from e

        try:
            return ClusterNodeState(
                node_name=payload["node_name"],
                is_active=payload["role"] == "active",
                term=payload.get("term"),
            )
        except (KeyError, TypeError, HAConfigError) as e:
            raise StoreUnavailableError(
                f"peer {url} returned an unexpected status payload: {e}",
                original_error=e,
            ) from e


# Runtime protocol check
assert isinstance(HTTPXPeerStatusProbe(), PeerStatusPort)
