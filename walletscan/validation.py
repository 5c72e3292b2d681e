"""Address validation and request guards. Pure functions, no I/O."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from .config import AnalysisConfig
from .errors import InvalidAddressError

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_INPUT_SPLIT_RE = re.compile(r"[\n,;|\s]+")


@dataclass(frozen=True)
class AddressValidation:
    valid: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.valid) + len(self.invalid)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": list(self.valid),
            "invalid": list(self.invalid),
            "totalValid": len(self.valid),
            "totalInvalid": len(self.invalid),
        }


def is_valid_address(value: Any) -> bool:
    return isinstance(value, str) and bool(ADDRESS_RE.match(value.strip()))


def normalize_address(value: Any) -> str:
    """Return the lower-cased address or raise InvalidAddressError."""
    if not is_valid_address(value):
        raise InvalidAddressError(f"Invalid address: {value!r}", invalid_wallets=[str(value)])
    return value.strip().lower()


def validate_addresses(addresses: Iterable[Any] | None) -> AddressValidation:
    """Split input into valid (normalised) and invalid entries.

    Both lists are de-duplicated keeping first-seen order. Blank entries are
    skipped. Never raises for malformed input.
    """
    if addresses is None:
        return AddressValidation()
    if isinstance(addresses, str):
        addresses = [addresses]

    valid: dict[str, None] = {}
    invalid: dict[str, None] = {}
    for entry in addresses:
        text = "" if entry is None else str(entry).strip()
        if not text:
            continue
        if is_valid_address(text):
            valid.setdefault(text.lower(), None)
        else:
            invalid.setdefault(text, None)

    return AddressValidation(valid=tuple(valid), invalid=tuple(invalid))


def parse_address_input(text: str | None) -> list[str]:
    """Split free-form text on newlines, commas, semicolons, pipes or spaces."""
    if not text or not isinstance(text, str):
        return []
    return [part.strip().lower() for part in _INPUT_SPLIT_RE.split(text) if part.strip()]


def validate_request_limits(
    wallets: Any, tokens: Any, analysis: AnalysisConfig | None = None
) -> list[str]:
    """Return a list of problems with the request's size; empty means OK."""
    analysis = analysis or AnalysisConfig()
    errors: list[str] = []

    if not isinstance(wallets, (list, tuple)):
        errors.append("Wallets must be a list")
    elif not wallets:
        errors.append("At least one wallet address is required")
    elif len(wallets) > analysis.max_wallets:
        errors.append(f"Too many wallets (max: {analysis.max_wallets})")

    if not isinstance(tokens, (list, tuple)):
        errors.append("Tokens must be a list")
    elif not tokens:
        errors.append("At least one token address is required")
    elif len(tokens) > analysis.max_tokens:
        errors.append(f"Too many tokens (max: {analysis.max_tokens})")

    return errors
