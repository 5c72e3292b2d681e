"""Etherscan V2 multichain client — token balances and read-only contract calls."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import NetworkProfile
from ...errors import DataSourceError, RateLimitError, TerminalError
from ...logging_setup import shorten_address
from .parser import is_empty_result

logger = logging.getLogger(__name__)

USER_AGENT = "wallet-token-scanner"

_TERMINAL_STATUSES = (400, 401, 403)


def raise_for_http_status(status: int, source: str) -> None:
    """Map an HTTP status onto the retryable / terminal error split."""
    if status == 200:
        return
    if status == 429:
        raise RateLimitError(f"{source}: HTTP 429 rate limited")
    if status in _TERMINAL_STATUSES:
        raise TerminalError(f"{source}: HTTP {status}")
    raise DataSourceError(f"{source}: HTTP {status}")


def _check_api_message(data: dict[str, Any], network: NetworkProfile) -> None:
    """Raise for provider-level failures hidden behind an HTTP 200."""
    result = data.get("result")
    text = f"{data.get('message', '')} {result if isinstance(result, str) else ''}".lower()
    if "rate limit" in text:
        raise RateLimitError(f"Rate limit exceeded on {network.name}")
    if "invalid api key" in text or "missing/invalid api key" in text:
        raise TerminalError(f"Invalid API key for {network.name}")


class EtherscanClient:
    """Single-attempt reads against the Etherscan V2 API.

    Retrying, pacing and timeouts are applied by the caller's
    ``RateLimitedCaller``; every method here performs exactly one request.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    async def _request(self, network: NetworkProfile, params: dict[str, str]) -> dict[str, Any]:
        query = {"chainid": str(network.chain_id), **params, "apikey": network.api_key}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                network.api_url,
                params=query,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                raise_for_http_status(response.status, network.name)
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise DataSourceError(f"{network.name}: invalid JSON response") from e

        if not isinstance(data, dict):
            raise DataSourceError(f"{network.name}: unexpected response {type(data).__name__}")
        return data

    async def get_token_balance(
        self, network: NetworkProfile, wallet_address: str, token_address: str
    ) -> str:
        """Return the raw integer balance as a base-10 string."""
        data = await self._request(
            network,
            {
                "module": "account",
                "action": "tokenbalance",
                "contractaddress": token_address,
                "address": wallet_address,
                "tag": "latest",
            },
        )

        if str(data.get("status")) != "1":
            _check_api_message(data, network)
            logger.debug(
                "Token balance returned status %s on %s for %s/%s: %s",
                data.get("status"),
                network.name,
                shorten_address(wallet_address),
                shorten_address(token_address),
                data.get("message"),
            )
            return "0"

        raw = str(data.get("result") or "0").strip()
        if not raw.isdigit():
            raise DataSourceError(f"{network.name}: non-numeric balance {raw!r}")
        return raw

    async def eth_call(
        self, network: NetworkProfile, contract_address: str, data: str
    ) -> str | None:
        """Execute a read-only call; None when the contract returned nothing."""
        payload = await self._request(
            network,
            {
                "module": "proxy",
                "action": "eth_call",
                "to": contract_address,
                "data": data,
                "tag": "latest",
            },
        )

        if "error" in payload:
            logger.debug(
                "eth_call %s on %s reverted: %s",
                data,
                shorten_address(contract_address),
                payload["error"],
            )
            return None

        result = payload.get("result")
        if not isinstance(result, str) or not result.startswith("0x"):
            # Proxy endpoints report key and rate problems as a plain status body.
            _check_api_message(payload, network)
            return None
        if is_empty_result(result):
            return None
        return result
