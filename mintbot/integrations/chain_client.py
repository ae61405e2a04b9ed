"""
Chain Client

This module provides the on-chain side of minting: resolving ENS names to
addresses on Ethereum mainnet and submitting safeMint transactions to the
deployed NFT contract, signed with the process wallet.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp
from eth_account import Account
from ens.utils import normalize_name
from web3 import AsyncHTTPProvider, AsyncWeb3

from ..config import CHAIN_ID, DEPLOYED_CONTRACT_ADDRESS, ChainConfig
from ..exceptions import ChainSubmissionError, ConfigurationError, NameResolutionError

logger = logging.getLogger(__name__)

ENS_SUFFIX = ".eth"

SAFE_MINT_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "safeMint",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "uri", "type": "string"},
        ],
        "outputs": [],
    }
]


class ChainClient:
    """Resolves recipients and submits mint transactions."""

    def __init__(
        self,
        w3: AsyncWeb3,
        ens_w3: AsyncWeb3,
        account,
        contract_address: str = DEPLOYED_CONTRACT_ADDRESS,
        chain_id: int = CHAIN_ID,
    ):
        """
        Initialize the chain client.

        Args:
            w3: Web3 connected to the chain the contract is deployed on
            ens_w3: Web3 connected to Ethereum mainnet for ENS lookups
            account: eth_account LocalAccount that signs mint transactions
            contract_address: Address of the deployed NFT contract
            chain_id: Chain id the transaction is signed for
        """
        self.w3 = w3
        self.ens_w3 = ens_w3
        self.account = account
        self.chain_id = chain_id
        self.contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address), abi=SAFE_MINT_ABI
        )

    @classmethod
    def from_config(cls, config: ChainConfig) -> "ChainClient":
        """Build a client from chain settings, loading the signing key."""
        if not config.private_key:
            raise ConfigurationError("CHAIN_PRIVATE_KEY is required for minting")
        if not config.rpc_url:
            raise ConfigurationError("CHAIN_RPC_URL is required for minting")

        request_kwargs = {"timeout": aiohttp.ClientTimeout(total=config.request_timeout)}
        w3 = AsyncWeb3(AsyncHTTPProvider(config.rpc_url, request_kwargs=request_kwargs))
        ens_w3 = AsyncWeb3(AsyncHTTPProvider(config.ens_rpc_url, request_kwargs=request_kwargs))
        try:
            account = Account.from_key(config.private_key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"CHAIN_PRIVATE_KEY is not a valid private key: {e}") from e

        logger.info(f"ChainClient: Minting from {account.address} on chain {CHAIN_ID}")
        return cls(w3, ens_w3, account)

    @staticmethod
    def is_ens_name(recipient: str) -> bool:
        return recipient.lower().endswith(ENS_SUFFIX)

    async def resolve_address(self, recipient: str) -> str:
        """
        Turn a recipient into a checksummed address.

        ENS names are normalised and resolved on mainnet; anything else must
        already be an address.

        Raises:
            NameResolutionError: If the name does not resolve or the value is not an address
        """
        recipient = recipient.strip()
        address: Optional[str] = recipient

        if self.is_ens_name(recipient):
            try:
                address = await self.ens_w3.ens.address(normalize_name(recipient))
            except Exception as e:
                raise NameResolutionError(recipient, f"ENS lookup for '{recipient}' failed: {e}") from e
            if not address:
                raise NameResolutionError(recipient)
            logger.info(f"ChainClient: Resolved {recipient} to {address}")

        if not AsyncWeb3.is_address(address):
            raise NameResolutionError(recipient, f"'{recipient}' is not an Ethereum address")
        return AsyncWeb3.to_checksum_address(address)

    async def mint(self, to_address: str, token_uri: str) -> str:
        """
        Submit safeMint(to, uri) to the deployed contract.

        Returns:
            The transaction hash as a 0x-prefixed hex string

        Raises:
            ChainSubmissionError: If building, signing or sending the transaction fails
        """
        try:
            nonce = await self.w3.eth.get_transaction_count(self.account.address)
            transaction = await self.contract.functions.safeMint(to_address, token_uri).build_transaction(
                {"from": self.account.address, "nonce": nonce, "chainId": self.chain_id}
            )
            signed_tx = self.account.sign_transaction(transaction)
            tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            raise ChainSubmissionError(f"safeMint to {to_address} failed: {e}") from e

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(f"ChainClient: Minted NFT with transaction hash: {tx_hash_hex}")
        return tx_hash_hex
