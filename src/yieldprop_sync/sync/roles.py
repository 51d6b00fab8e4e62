"""Role gate - live on-chain role membership checks that fail closed."""

from __future__ import annotations

import logging

from yieldprop_sync.abis import Abi
from yieldprop_sync.interfaces.reader import ContractReader

log = logging.getLogger(__name__)

MANAGER_ROLE_FUNCTION = "PROPERTY_MANAGER_ROLE"


class RoleGate:
    """Answers "does this address hold this role right now?".

    Membership is always read live from the access-controlled contract.
    Any missing input or failed read counts as "not held".
    """

    def __init__(
        self,
        reader: ContractReader,
        address: str,
        abi: Abi,
        role_reader: ContractReader | None = None,
    ) -> None:
        self._reader = reader
        self._role_reader = role_reader or reader
        self._address = address
        self._abi = abi

    async def manager_role(self) -> bytes | None:
        """Resolve the manager role identifier. Returns None if unavailable."""
        return await self._role_reader.read(self._address, self._abi, MANAGER_ROLE_FUNCTION)

    async def has_role(self, role_id: bytes | None, address: str | None) -> bool:
        if not role_id or not address:
            return False
        held = await self._reader.read(self._address, self._abi, "hasRole", (role_id, address))
        return held is True

    async def check_manager(self, address: str | None) -> bool | None:
        """Like ``is_manager`` but returns None when a chain read failed."""
        if not address:
            return False
        role_id = await self.manager_role()
        if role_id is None:
            log.debug("Manager role id unresolved, treating %s as non-manager", address)
            return None
        held = await self._reader.read(self._address, self._abi, "hasRole", (role_id, address))
        if held is None:
            return None
        return held is True

    async def is_manager(self, address: str | None) -> bool:
        return await self.check_manager(address) is True
