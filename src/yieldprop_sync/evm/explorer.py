"""Block explorer links."""

from __future__ import annotations


def tx_url(explorer_url: str, tx_hash: str | None) -> str:
    """Link to a transaction, or the explorer root when no hash is known."""
    base = explorer_url.rstrip("/")
    if not tx_hash:
        return base
    return f"{base}/tx/{tx_hash}"


def address_url(explorer_url: str, address: str) -> str:
    return f"{explorer_url.rstrip('/')}/address/{address}"
