"""EVM (web3.py) implementations of the chain collaborators."""

from yieldprop_sync.evm.client import close_web3, make_web3
from yieldprop_sync.evm.reader import Web3ContractReader
from yieldprop_sync.evm.receipts import Web3ReceiptProvider
from yieldprop_sync.evm.watcher import Web3LogWatcher
from yieldprop_sync.evm.writer import Web3ContractWriter

__all__ = [
    "close_web3", "make_web3",
    "Web3ContractReader", "Web3ReceiptProvider", "Web3LogWatcher", "Web3ContractWriter",
]
