"""Key management and transaction signers."""

from .signers import ImpersonatedSigner, LocalKeySigner, Signer, SignerBook

__all__ = ["ImpersonatedSigner", "LocalKeySigner", "Signer", "SignerBook"]
