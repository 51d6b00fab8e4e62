"""Registration coordinator - deduplicated, role-gated registerHolder() writes."""

from __future__ import annotations

import asyncio
import logging

from yieldprop_sync.abis import ZERO_ADDRESS, Abi
from yieldprop_sync.evm.explorer import tx_url
from yieldprop_sync.interfaces.notifier import NotificationSink
from yieldprop_sync.interfaces.reader import ContractReader
from yieldprop_sync.interfaces.store import StateStore
from yieldprop_sync.interfaces.writer import ContractWriter
from yieldprop_sync.models.records import AttemptState, NotifyLevel, RegistrationAttempt
from yieldprop_sync.sync.account import ActiveAccount
from yieldprop_sync.sync.confirmation import TransactionConfirmationTracker
from yieldprop_sync.sync.errors import describe_error
from yieldprop_sync.sync.roles import RoleGate

log = logging.getLogger(__name__)

REGISTER_FUNCTION = "registerHolder"


class HolderRegistry:
    """In-flight registration attempts keyed by lower-cased address.

    Holds at most one PENDING attempt per key. Settled attempts are
    removed, returning the key to IDLE.
    """

    def __init__(self) -> None:
        self._attempts: dict[str, RegistrationAttempt] = {}

    def __len__(self) -> int:
        return len(self._attempts)

    def __contains__(self, address: str) -> bool:
        return address.lower() in self._attempts

    def state_of(self, address: str) -> AttemptState:
        attempt = self._attempts.get(address.lower())
        return attempt.state if attempt else AttemptState.IDLE

    def pending(self) -> list[RegistrationAttempt]:
        return [a for a in self._attempts.values() if a.state == AttemptState.PENDING]

    def try_begin(self, holder: str) -> RegistrationAttempt | None:
        """Mark ``holder`` PENDING. Returns None if already pending."""
        key = holder.lower()
        if key in self._attempts:
            return None
        attempt = RegistrationAttempt(holder=holder, key=key)
        self._attempts[key] = attempt
        return attempt

    def release(self, attempt: RegistrationAttempt) -> None:
        if self._attempts.get(attempt.key) is attempt:
            del self._attempts[attempt.key]


class RegistrationCoordinator:
    """Decides whether a transfer recipient gets a registerHolder() write.

    Rejects the zero address, rejects unless the active account holds the
    manager role, and drops recipients that already have a pending attempt.
    Accepted attempts run as background tasks; whatever their outcome the
    dedup entry is released when they settle.
    """

    def __init__(
        self,
        *,
        distributor_address: str,
        distributor_abi: Abi,
        account: ActiveAccount,
        role_gate: RoleGate,
        reader: ContractReader,
        writer: ContractWriter,
        tracker: TransactionConfirmationTracker,
        notifier: NotificationSink,
        registry: HolderRegistry | None = None,
        store: StateStore | None = None,
        explorer_url: str = "https://sepolia.etherscan.io",
        settle_timeout: float = 600,
        skip_registered: bool = True,
    ) -> None:
        self._address = distributor_address
        self._abi = distributor_abi
        self._account = account
        self._role_gate = role_gate
        self._reader = reader
        self._writer = writer
        self._tracker = tracker
        self._notifier = notifier
        self.registry = registry if registry is not None else HolderRegistry()
        self._store = store
        self._explorer_url = explorer_url
        self._settle_timeout = settle_timeout
        self._skip_registered = skip_registered
        self._tasks: set[asyncio.Task] = set()
        self._role_unavailable = False
        self.submitted = 0

    async def consider(self, recipient: str | None) -> bool:
        """Start a registration for ``recipient`` if allowed.

        Returns True when a new attempt was started.
        """
        if not recipient or recipient.lower() == ZERO_ADDRESS:
            return False

        held = await self._role_gate.check_manager(self._account.address)
        if held is None:
            await self._report_role_unavailable(recipient)
            return False
        if self._role_unavailable:
            log.info("Manager role check available again")
            self._role_unavailable = False
        if not held:
            log.debug("Skipping registration of %s: account is not a manager", recipient)
            return False

        # No await between the pending check and the mark.
        attempt = self.registry.try_begin(recipient)
        if attempt is None:
            log.debug("Registration of %s already pending", recipient)
            return False

        log.info("Registering new holder %s", recipient)
        task = asyncio.create_task(self._run(attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def drain(self) -> None:
        """Wait until every in-flight attempt has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.drain()

    async def _report_role_unavailable(self, recipient: str) -> None:
        """Notify once per outage that the manager role could not be read."""
        log.warning("Role check failed, not registering %s", recipient)
        if self._role_unavailable:
            return
        self._role_unavailable = True
        await self._notifier.notify(
            NotifyLevel.ERROR,
            "Could not read the manager role; holder auto-registration is paused",
        )

    async def _run(self, attempt: RegistrationAttempt) -> None:
        try:
            if self._settle_timeout > 0:
                await asyncio.wait_for(self._attempt(attempt), timeout=self._settle_timeout)
            else:
                await self._attempt(attempt)
        except asyncio.TimeoutError:
            attempt.state = AttemptState.FAILED
            attempt.error = f"not settled after {self._settle_timeout:g}s"
            log.warning("Registration of %s timed out, releasing", attempt.holder)
            await self._notifier.notify(
                NotifyLevel.ERROR,
                f"Registration of {_short(attempt.holder)} did not settle; it can be retried",
                tx_url(self._explorer_url, attempt.tx_hash) if attempt.tx_hash else None,
            )
        except Exception as exc:
            attempt.state = AttemptState.FAILED
            attempt.error = str(exc)
            log.error("Registration of %s failed unexpectedly: %s", attempt.holder, exc, exc_info=True)
            await self._notifier.notify(NotifyLevel.ERROR, describe_error(exc))
        finally:
            self.registry.release(attempt)
            if self._store is not None and attempt.state != AttemptState.PENDING:
                await self._store.save_registration(attempt)

    async def _attempt(self, attempt: RegistrationAttempt) -> None:
        if self._skip_registered:
            registered = await self._reader.read(
                self._address, self._abi, "isRegisteredHolder", (attempt.holder,),
            )
            if registered is True:
                attempt.state = AttemptState.SKIPPED
                log.info("Holder %s already registered, nothing to do", attempt.holder)
                return
            if registered is None:
                log.warning("isRegisteredHolder(%s) unknown, submitting anyway", attempt.holder)

        result = await self._writer.write(
            self._address, self._abi, REGISTER_FUNCTION, (attempt.holder,),
        )
        self.submitted += 1
        if not result.success or not result.tx_hash:
            attempt.state = AttemptState.FAILED
            attempt.error = result.error
            log.warning("registerHolder(%s) rejected: %s", attempt.holder, result.error)
            await self._notifier.notify(NotifyLevel.ERROR, describe_error(result.error or "unknown error"))
            return

        attempt.tx_hash = result.tx_hash
        receipt = await self._tracker.wait(result.tx_hash)
        link = tx_url(self._explorer_url, result.tx_hash)
        if receipt.success:
            attempt.state = AttemptState.CONFIRMED
            await self._notifier.notify(
                NotifyLevel.SUCCESS,
                f"New holder {_short(attempt.holder)} registered for yields",
                link,
            )
        else:
            attempt.state = AttemptState.FAILED
            attempt.error = receipt.error
            await self._notifier.notify(
                NotifyLevel.ERROR, describe_error(receipt.error or "transaction reverted"), link,
            )


def _short(address: str) -> str:
    return f"{address[:10]}…"
