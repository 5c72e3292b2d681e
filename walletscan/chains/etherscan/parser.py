"""ABI helpers for ERC-20 introspection calls — pure functions, no I/O."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# 4-byte function selectors
NAME_SELECTOR = "0x06fdde03"
SYMBOL_SELECTOR = "0x95d89b41"
DECIMALS_SELECTOR = "0x313ce567"
BALANCE_OF_SELECTOR = "0x70a08231"

_WORD = 64  # hex chars per 32-byte ABI word


def _strip(hex_value: str | None) -> str:
    if not hex_value:
        return ""
    hex_value = hex_value.strip()
    if hex_value[:2].lower() == "0x":
        hex_value = hex_value[2:]
    return hex_value


def is_empty_result(hex_value: str | None) -> bool:
    body = _strip(hex_value)
    return body in ("", "0")


def encode_balance_of(wallet_address: str) -> str:
    """Calldata for ``balanceOf(address)``."""
    return BALANCE_OF_SELECTOR + _strip(wallet_address).lower().rjust(_WORD, "0")


def _printable(raw: bytes) -> str:
    return "".join(chr(b) for b in raw if 32 <= b <= 126).strip()


def decode_string(hex_value: str | None) -> str:
    """Decode an ABI ``string`` return value.

    Handles the dynamic encoding (offset, length, data) and falls back to
    ``bytes32``-style fixed strings used by older tokens such as MKR.
    Non-printable bytes are dropped. Returns ``""`` when nothing decodes.
    """
    body = _strip(hex_value)
    if not body or len(body) % 2:
        return ""

    try:
        if len(body) >= 2 * _WORD:
            offset = int(body[:_WORD], 16) * 2
            if offset + _WORD <= len(body):
                length = int(body[offset:offset + _WORD], 16) * 2
                start = offset + _WORD
                if 0 < length <= len(body) - start:
                    return _printable(bytes.fromhex(body[start:start + length]))
        return _printable(bytes.fromhex(body[:_WORD]))
    except ValueError as e:
        logger.debug("Could not decode ABI string %s: %s", hex_value, e)
        return ""


def decode_uint(hex_value: str | None) -> int | None:
    """Decode an ABI ``uint`` return value; None for empty or malformed input."""
    body = _strip(hex_value)
    if not body:
        return None
    try:
        return int(body, 16)
    except ValueError:
        return None
