"""Error message mapping."""

from __future__ import annotations

import pytest

from yieldprop_sync.sync.errors import describe_error


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("execution reverted: NotWhitelisted()", "Address is not whitelisted. Contact the property manager."),
        ("simulation_failed: DistributionPoolEmpty", "No funds in distribution pool."),
        (
            "AccessControlUnauthorizedAccount(0xf39f, 0xabab)",
            "Connected account lacks the required role.",
        ),
        ("HolderAlreadyRegistered()", "This address is already registered for yield distribution."),
        ("nonce too low: next nonce 5, tx nonce 4", "A conflicting transaction is pending. Retry shortly."),
        ("insufficient funds for gas * price + value", "Insufficient ETH to pay for gas."),
    ],
)
def test_known_errors_are_translated(raw, expected):
    assert describe_error(raw) == expected


def test_exceptions_are_accepted():
    assert describe_error(RuntimeError("SaleNotActive")) == "The token sale is not active."


def test_unknown_error_passes_through():
    assert describe_error("receipt_timeout") == "receipt_timeout"
