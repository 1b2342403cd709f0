"""Fallback lookup consulted only when local verification fails.

Contract:
- Input: chain id and contract address
- Output: Compiler settings known to the lookup service, or None
- Side Effects: One HTTP request per lookup (HttpLookupMiddleware)
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtensionLookup:
    """A fallback hit.

    Attributes:
        settings: Compiler settings to merge into the input before retrying
        expected_bytecode: Bytecode the service has on record for the address
    """

    settings: dict[str, Any] = field(default_factory=dict)
    expected_bytecode: str | None = None


class ExtensionMiddleware(Protocol):
    """Capability interface for fallback lookups."""

    async def lookup(self, chain_id: str, contract_address: str) -> ExtensionLookup | None:
        """Look up settings for a deployed contract; None when unknown."""
        ...


class HttpLookupMiddleware:
    """ExtensionMiddleware backed by an HTTP lookup service.

    Queries `GET {base_url}/api/v1/contracts/{chain_id}/{address}`. A 404 is
    a miss; transport failures and malformed bodies are logged and treated
    as a miss so the fallback never turns a verification failure into a
    system failure.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def lookup(self, chain_id: str, contract_address: str) -> ExtensionLookup | None:
        url = f"{self.base_url}/api/v1/contracts/{chain_id}/{contract_address.lower()}"
        try:
            response = await self._http.get(url)
            if response.status_code == 404:
                logger.debug(f"Fallback lookup miss for {chain_id}:{contract_address}")
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Fallback lookup for {chain_id}:{contract_address} failed: {e}")
            return None

        settings = data.get("settings") if isinstance(data, dict) else None
        if not isinstance(settings, dict):
            logger.warning(f"Fallback lookup for {chain_id}:{contract_address} returned no settings")
            return None

        logger.info(f"Fallback lookup hit for {chain_id}:{contract_address}")
        return ExtensionLookup(settings=settings, expected_bytecode=data.get("expectedBytecode"))

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()
