"""Stellar integration components."""

from mip_vote.stellar.horizon import HorizonNetworkClient
from mip_vote.stellar.signer import StellarSigner

__all__ = ["HorizonNetworkClient", "StellarSigner"]
