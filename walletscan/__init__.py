"""Multi-chain wallet token holdings scanner."""

__version__ = "0.3.0"
