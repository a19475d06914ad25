"""Protocol interfaces for mip_vote components."""

from mip_vote.interfaces.network import NetworkClient
from mip_vote.interfaces.signer import Prover, Signer

__all__ = ["NetworkClient", "Prover", "Signer"]
