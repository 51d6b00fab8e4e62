"""Maps raw RPC / revert errors to operator-readable messages."""

from __future__ import annotations

import re

# Checked in order; first match wins.
ERROR_MAPPINGS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"TransferRestricted|transfer restricted", re.I), "Sender or recipient must be whitelisted."),
    (re.compile(r"NotWhitelisted|not whitelisted", re.I), "Address is not whitelisted. Contact the property manager."),
    (re.compile(r"PaymentBelowRentalPrice|payment below", re.I), "Payment is below the current rental price."),
    (re.compile(r"InsufficientTokenBalance|insufficient balance", re.I), "Insufficient token balance."),
    (re.compile(r"InsufficientPartitionBalance", re.I), "Insufficient balance in partition."),
    (re.compile(r"ExceedsOffering|exceeds offering", re.I), "Amount exceeds tokens offered for sale."),
    (re.compile(r"SaleNotActive|sale not active", re.I), "The token sale is not active."),
    (re.compile(r"CannotBuyOwnTokens", re.I), "You cannot purchase your own tokens."),
    (re.compile(r"InvalidAmount|invalid amount", re.I), "Please enter a valid amount."),
    (re.compile(r"DistributionPoolEmpty|pool empty", re.I), "No funds in distribution pool."),
    (re.compile(r"NoTokenHolders|no token holders", re.I), "No registered token holders for distribution."),
    (re.compile(r"TransferFailed|transfer failed", re.I), "Token transfer failed. Please try again."),
    (re.compile(r"RecommendationAlreadyProcessed", re.I), "This recommendation has already been accepted or rejected."),
    (re.compile(r"ERC20: insufficient allowance", re.I), "Approve USDC spending first, then retry."),
    (re.compile(r"ERC20: transfer amount exceeds allowance", re.I), "Approve more USDC, then retry."),
    (re.compile(r"AccessControlUnauthorizedAccount|AccessControl: account", re.I), "Connected account lacks the required role."),
    (re.compile(r"HolderAlreadyRegistered|already registered", re.I), "This address is already registered for yield distribution."),
    (re.compile(r"nonce too low|replacement transaction underpriced", re.I), "A conflicting transaction is pending. Retry shortly."),
    (re.compile(r"insufficient funds", re.I), "Insufficient ETH to pay for gas."),
    (re.compile(r"user rejected|user denied|rejected the request", re.I), "Transaction was rejected in your wallet."),
]


def describe_error(error: BaseException | str) -> str:
    """Return a human-readable message for a write/read failure."""
    msg = str(error)
    for pattern, message in ERROR_MAPPINGS:
        if pattern.search(msg):
            return message
    return msg
