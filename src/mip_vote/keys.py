"""Signing key material, held in memory only."""

from __future__ import annotations

from stellar_sdk import Keypair
from stellar_sdk.exceptions import SdkError

from mip_vote.exceptions import KeyDerivationError


class KeyMaterial:
    """A signing keypair derived from a secret seed.

    The secret never appears in repr(), str() or raised errors.
    """

    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair) -> None:
        if not keypair.can_sign():
            raise KeyDerivationError("keypair has no private key")
        self._keypair = keypair

    @classmethod
    def from_secret(cls, secret: str) -> KeyMaterial:
        """Derive key material from an encoded secret seed ("S...")."""
        if not secret or not secret.strip():
            raise KeyDerivationError("no secret key supplied")
        try:
            keypair = Keypair.from_secret(secret.strip())
        except (ValueError, TypeError, SdkError):
            # The SDK error text echoes the seed, so the cause is dropped.
            raise KeyDerivationError("secret key is not a valid encoded seed") from None
        return cls(keypair)

    @property
    def address(self) -> str:
        return self._keypair.public_key

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    def __repr__(self) -> str:
        return f"KeyMaterial(address={self.address!r})"

    __str__ = __repr__
