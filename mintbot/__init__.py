"""
Mintbot - conversational NFT data collection and minting.

This package provides the pieces an agent runtime needs to mint NFTs from chat:
- Slot-filling collection of NFT name, description and recipient
- Metadata upload to IPFS and on-chain minting on Base Sepolia
- Status text for the model describing what is still missing
"""

__version__ = "0.1.0"
__author__ = "Mintbot Team"
