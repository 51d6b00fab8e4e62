"""AsyncWeb3 client construction."""

from __future__ import annotations

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3


def make_web3(rpc_url: str, timeout: int = 10) -> AsyncWeb3:
    """Build an AsyncWeb3 bound to an HTTP JSON-RPC endpoint."""
    provider = AsyncHTTPProvider(
        rpc_url, request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
    )
    return AsyncWeb3(provider)


async def close_web3(w3: AsyncWeb3) -> None:
    """Release the provider's HTTP session."""
    await w3.provider.disconnect()
