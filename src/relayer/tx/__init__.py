"""
Transaction module.

Handles message building, transaction assembly and signing.
"""

from relayer.tx.assembler import TransactionAssembler, TransactionBuildError
from relayer.tx.builder import MessageBuilder
from relayer.tx.signer import SignerError, TransactionSigner

__all__ = [
    "MessageBuilder",
    "TransactionAssembler",
    "TransactionBuildError",
    "TransactionSigner",
    "SignerError",
]
