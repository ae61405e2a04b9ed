"""
Clients for the external services minting depends on.
"""

from .chain_client import ChainClient
from .pinata_client import PinataClient

__all__ = ["ChainClient", "PinataClient"]
