"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client with a bounded request timeout."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods by query."""
        response = await self.http_client.post(
            f"{self.base_url}/foods/search",
            params={"api_key": self.api_key},
            json={"query": query, "pageSize": page_size},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        response = await self.http_client.get(
            f"{self.base_url}/food/{fdc_id}",
            params={"api_key": self.api_key},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
