"""mip_vote - cast improvement-proposal votes as self-transfer memo transactions."""

__version__ = "0.1.0"
