"""ContractReader protocol - live view-function reads."""

from __future__ import annotations

from typing import Any, Protocol, Sequence


class ContractReader(Protocol):
    """Performs on-chain reads. Returns None when the read fails."""

    async def read(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any | None:
        ...
