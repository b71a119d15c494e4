from __future__ import annotations

from typing import Any, cast

import httpx


class BinanceApiError(RuntimeError):
    def __init__(self, *, status_code: int, payload: Any):
        super().__init__(f"Binance API error: status={status_code} payload={payload!r}")
        self.status_code = status_code
        self.payload = payload


class BinanceSpotClient:
    """
    Read-only market data endpoints. A failed call raises; nothing is retried.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.binance.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"X-MBX-APIKEY": api_key} if api_key else {},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def exchange_info(self) -> dict[str, Any]:
        data = await self._request("GET", "/api/v3/exchangeInfo", params={})
        return cast(dict[str, Any], data)

    async def ticker_24h(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/v3/ticker/24hr", params={})
        if isinstance(data, dict):
            return [cast(dict[str, Any], data)]
        return cast(list[dict[str, Any]], data)

    async def _request(self, method: str, path: str, *, params: dict[str, Any]) -> Any:
        response = await self._client.request(method, path, params=params)
        if response.status_code >= 400:
            payload: Any
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise BinanceApiError(status_code=response.status_code, payload=payload)
        return response.json()
