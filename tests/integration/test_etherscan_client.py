"""Integration tests for the Etherscan client — request shape and error mapping."""
from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from walletscan.chains.etherscan.client import EtherscanClient
from walletscan.config import NetworkProfile
from walletscan.errors import DataSourceError, RateLimitError, TerminalError

WALLET = "0x" + "a1" * 20
TOKEN = "0x" + "11" * 20
CLIENT_MODULE = "walletscan.chains.etherscan.client"


def _mock_session(
    response_data: Any = None, status: int = 200, error: Exception | None = None
):
    """Create a mock aiohttp session whose GET returns the given data or raises."""
    mock_response = AsyncMock()
    mock_response.status = status
    if isinstance(response_data, Exception):
        mock_response.json = AsyncMock(side_effect=response_data)
    else:
        mock_response.json = AsyncMock(return_value=response_data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    if error:
        mock_session.get = MagicMock(side_effect=error)
    else:
        mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


async def _balance(session: Any, profile: NetworkProfile) -> str:
    with patch(f"{CLIENT_MODULE}.aiohttp.ClientSession", return_value=session):
        with patch(f"{CLIENT_MODULE}.aiohttp.TCPConnector"):
            return await EtherscanClient(timeout=5).get_token_balance(profile, WALLET, TOKEN)


async def _eth_call(session: Any, profile: NetworkProfile) -> str | None:
    with patch(f"{CLIENT_MODULE}.aiohttp.ClientSession", return_value=session):
        with patch(f"{CLIENT_MODULE}.aiohttp.TCPConnector"):
            return await EtherscanClient(timeout=5).eth_call(profile, TOKEN, "0x313ce567")


class TestGetTokenBalance:
    @pytest.mark.asyncio
    async def test_returns_raw_balance(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session({"status": "1", "message": "OK", "result": "1500000"})
        assert await _balance(session, eth_profile) == "1500000"

    @pytest.mark.asyncio
    async def test_request_parameters(self, base_profile: NetworkProfile) -> None:
        session = _mock_session({"status": "1", "message": "OK", "result": "0"})
        await _balance(session, base_profile)

        url = session.get.call_args[0][0]
        params = session.get.call_args.kwargs["params"]
        assert url == "https://api.etherscan.io/v2/api"
        assert params["chainid"] == "8453"
        assert params["module"] == "account"
        assert params["action"] == "tokenbalance"
        assert params["contractaddress"] == TOKEN
        assert params["address"] == WALLET
        assert params["tag"] == "latest"
        assert params["apikey"] == "test-key"

    @pytest.mark.asyncio
    async def test_non_success_status_is_zero(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session({"status": "0", "message": "NOTOK", "result": "Error! Bad"})
        assert await _balance(session, eth_profile) == "0"

    @pytest.mark.asyncio
    async def test_rate_limit_body_raises(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session(
            {"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}
        )
        with pytest.raises(RateLimitError):
            await _balance(session, eth_profile)

    @pytest.mark.asyncio
    async def test_invalid_key_body_is_terminal(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session({"status": "0", "message": "NOTOK", "result": "Invalid API Key"})
        with pytest.raises(TerminalError):
            await _balance(session, eth_profile)

    @pytest.mark.asyncio
    async def test_http_429_is_rate_limit(self, eth_profile: NetworkProfile) -> None:
        with pytest.raises(RateLimitError):
            await _balance(_mock_session({}, status=429), eth_profile)

    @pytest.mark.asyncio
    async def test_http_5xx_is_retryable(self, eth_profile: NetworkProfile) -> None:
        with pytest.raises(DataSourceError):
            await _balance(_mock_session({}, status=503), eth_profile)

    @pytest.mark.asyncio
    async def test_http_403_is_terminal(self, eth_profile: NetworkProfile) -> None:
        with pytest.raises(TerminalError):
            await _balance(_mock_session({}, status=403), eth_profile)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session(ValueError("Expecting value"))
        with pytest.raises(DataSourceError, match="invalid JSON"):
            await _balance(session, eth_profile)

    @pytest.mark.asyncio
    async def test_non_object_body_raises(self, eth_profile: NetworkProfile) -> None:
        with pytest.raises(DataSourceError):
            await _balance(_mock_session(["unexpected"]), eth_profile)

    @pytest.mark.asyncio
    async def test_non_numeric_result_raises(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session({"status": "1", "message": "OK", "result": "0x10"})
        with pytest.raises(DataSourceError):
            await _balance(session, eth_profile)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session(error=aiohttp.ClientConnectionError("reset"))
        with pytest.raises(aiohttp.ClientError):
            await _balance(session, eth_profile)


class TestEthCall:
    @pytest.mark.asyncio
    async def test_returns_hex(self, eth_profile: NetworkProfile) -> None:
        value = "0x" + f"{6:064x}"
        session = _mock_session({"jsonrpc": "2.0", "id": 1, "result": value})
        assert await _eth_call(session, eth_profile) == value

        params = session.get.call_args.kwargs["params"]
        assert params["module"] == "proxy"
        assert params["action"] == "eth_call"
        assert params["to"] == TOKEN
        assert params["data"] == "0x313ce567"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", ["0x", "0x0"])
    async def test_empty_result_is_none(self, eth_profile: NetworkProfile, result: str) -> None:
        session = _mock_session({"jsonrpc": "2.0", "id": 1, "result": result})
        assert await _eth_call(session, eth_profile) is None

    @pytest.mark.asyncio
    async def test_reverted_call_is_none(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session(
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}}
        )
        assert await _eth_call(session, eth_profile) is None

    @pytest.mark.asyncio
    async def test_rate_limit_status_body_raises(self, eth_profile: NetworkProfile) -> None:
        session = _mock_session(
            {"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}
        )
        with pytest.raises(RateLimitError):
            await _eth_call(session, eth_profile)
