"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import UnsupportedNetworkError
from .networks import BUILTIN_NETWORKS, DEFAULT_NETWORK, NetworkId, RegistryToken

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateLimitConfig:
    call_delay: float = 0.2
    token_delay: float = 0.3
    wallet_delay: float = 0.8
    max_retries: int = 3
    backoff_base_delay: float = 0.2
    timeout: float = 30.0


@dataclass(frozen=True)
class AnalysisConfig:
    default_decimals: int = 18
    min_balance_threshold: float = 0.000001
    max_wallets: int = 50
    max_tokens: int = 20


@dataclass(frozen=True)
class PricingConfig:
    dexscreener_url: str = "https://api.dexscreener.com/latest/dex"
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: str = ""
    timeout: float = 10.0
    dexscreener_batch_size: int = 30


@dataclass(frozen=True)
class NetworkProfile:
    id: NetworkId
    name: str
    chain_id: int
    api_url: str
    api_key: str = ""
    explorer_url: str = ""
    native_symbol: str = "ETH"
    native_decimals: int = 18
    dexscreener_chain_id: str = ""
    delay_multiplier: float = 1.0
    tokens: dict[str, RegistryToken] = field(default_factory=dict)
    coingecko_ids: dict[str, str] = field(default_factory=dict)

    def scaled(self, delay: float) -> float:
        """Apply the network's delay multiplier to a base delay."""
        return delay * self.delay_multiplier


@dataclass(frozen=True)
class AppConfig:
    default_network: NetworkId = DEFAULT_NETWORK
    networks: dict[NetworkId, NetworkProfile] = field(default_factory=dict)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_rate_limits(raw: dict[str, Any]) -> RateLimitConfig:
    return RateLimitConfig(
        call_delay=float(raw.get("call_delay", 0.2)),
        token_delay=float(raw.get("token_delay", 0.3)),
        wallet_delay=float(raw.get("wallet_delay", 0.8)),
        max_retries=int(raw.get("max_retries", 3)),
        backoff_base_delay=float(raw.get("backoff_base_delay", 0.2)),
        timeout=float(raw.get("timeout", 30.0)),
    )


def _build_analysis(raw: dict[str, Any]) -> AnalysisConfig:
    return AnalysisConfig(
        default_decimals=int(raw.get("default_decimals", 18)),
        min_balance_threshold=float(raw.get("min_balance_threshold", 0.000001)),
        max_wallets=int(raw.get("max_wallets", 50)),
        max_tokens=int(raw.get("max_tokens", 20)),
    )


def _build_pricing(raw: dict[str, Any]) -> PricingConfig:
    dex = raw.get("dexscreener", {}) or {}
    cg = raw.get("coingecko", {}) or {}
    return PricingConfig(
        dexscreener_url=str(dex.get("url", PricingConfig.dexscreener_url)).rstrip("/"),
        coingecko_url=str(cg.get("url", PricingConfig.coingecko_url)).rstrip("/"),
        coingecko_api_key=cg.get("api_key", "") or "",
        timeout=float(raw.get("timeout", 10.0)),
        dexscreener_batch_size=int(dex.get("batch_size", 30)),
    )


def _build_registry(raw: dict[str, Any]) -> dict[str, RegistryToken]:
    tokens: dict[str, RegistryToken] = {}
    for address, meta in raw.items():
        tokens[str(address).lower()] = RegistryToken(
            symbol=meta.get("symbol", ""),
            name=meta.get("name", ""),
            decimals=int(meta.get("decimals", 18)),
        )
    return tokens


def _build_networks(raw: dict[str, Any]) -> dict[NetworkId, NetworkProfile]:
    for name in raw:
        try:
            NetworkId.parse(str(name))
        except ValueError:
            raise ValueError(f"Unknown network '{name}' in configuration") from None

    overrides = {NetworkId.parse(str(k)): (v or {}) for k, v in raw.items()}
    eth_key = overrides.get(NetworkId.ETHEREUM, {}).get("api_key", "") or ""

    networks: dict[NetworkId, NetworkProfile] = {}
    for network_id, builtin in BUILTIN_NETWORKS.items():
        cfg = overrides.get(network_id, {})
        tokens = dict(builtin["tokens"])
        tokens.update(_build_registry(cfg.get("tokens", {}) or {}))
        coingecko_ids = dict(builtin["coingecko_ids"])
        coingecko_ids.update(
            {str(k).lower(): str(v) for k, v in (cfg.get("coingecko_ids", {}) or {}).items()}
        )
        networks[network_id] = NetworkProfile(
            id=network_id,
            name=builtin["name"],
            chain_id=builtin["chain_id"],
            api_url=cfg.get("api_url", builtin["api_url"]),
            # Etherscan V2 keys are multichain; reuse the mainnet key.
            api_key=cfg.get("api_key", "") or eth_key,
            explorer_url=builtin["explorer_url"],
            native_symbol=builtin["native_symbol"],
            native_decimals=builtin["native_decimals"],
            dexscreener_chain_id=builtin["dexscreener_chain_id"],
            delay_multiplier=float(cfg.get("delay_multiplier", builtin["delay_multiplier"])),
            tokens=tokens,
            coingecko_ids=coingecko_ids,
        )
    return networks


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level above the package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    default_name = str(raw.get("default_network", DEFAULT_NETWORK.value))
    try:
        default_network = NetworkId.parse(default_name)
    except ValueError:
        raise ValueError(f"Unknown default network '{default_name}'") from None

    cfg = AppConfig(
        default_network=default_network,
        networks=_build_networks(raw.get("networks", {}) or {}),
        rate_limits=_build_rate_limits(raw.get("rate_limits", {}) or {}),
        analysis=_build_analysis(raw.get("analysis", {}) or {}),
        pricing=_build_pricing(raw.get("pricing", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    default = cfg.networks.get(cfg.default_network)
    if default is None:
        raise ValueError(f"Default network '{cfg.default_network.value}' is not configured")
    if not default.api_key:
        raise ValueError(
            f"Network '{default.id.value}' has no API key (set ETHERSCAN_API_KEY)"
        )

    rl = cfg.rate_limits
    for name in ("call_delay", "token_delay", "wallet_delay", "backoff_base_delay"):
        if getattr(rl, name) < 0:
            raise ValueError(f"rate_limits.{name} must not be negative")
    if rl.max_retries < 0:
        raise ValueError("rate_limits.max_retries must not be negative")
    if rl.timeout <= 0:
        raise ValueError("rate_limits.timeout must be positive")

    for profile in cfg.networks.values():
        if profile.delay_multiplier < 0:
            raise ValueError(f"Network '{profile.id.value}' has a negative delay_multiplier")

    if cfg.analysis.max_wallets < 1 or cfg.analysis.max_tokens < 1:
        raise ValueError("analysis.max_wallets and analysis.max_tokens must be at least 1")
    if cfg.pricing.dexscreener_batch_size < 1:
        raise ValueError("pricing.dexscreener.batch_size must be at least 1")


def get_network(cfg: AppConfig, network_id: str | NetworkId | None = None) -> NetworkProfile:
    """Resolve a network id (or the configured default) to its profile."""
    if network_id is None or network_id == "":
        resolved = cfg.default_network
    elif isinstance(network_id, NetworkId):
        resolved = network_id
    else:
        try:
            resolved = NetworkId.parse(network_id)
        except ValueError:
            raise UnsupportedNetworkError(
                f"Unsupported network: {network_id}. "
                f"Supported: {', '.join(n.value for n in NetworkId)}"
            ) from None

    profile = cfg.networks.get(resolved)
    if profile is None:
        raise UnsupportedNetworkError(f"Network not configured: {resolved.value}")
    return profile
