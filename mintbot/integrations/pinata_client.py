"""
Pinata IPFS Client

This module uploads NFT metadata JSON to IPFS through the Pinata pinning API
and builds the URIs that reference the pinned content.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import MetadataUploadError

logger = logging.getLogger(__name__)


class PinataClient:
    """Client for pinning JSON metadata to IPFS via Pinata."""

    def __init__(
        self,
        jwt: Optional[str],
        api_url: str = "https://api.pinata.cloud",
        gateway_url: str = "https://gateway.pinata.cloud/ipfs",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Pinata client.

        Args:
            jwt: Pinata API JWT used as bearer token
            api_url: Pinata API base URL
            gateway_url: IPFS gateway URL for constructing public URLs
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.jwt = jwt
        self.api_url = api_url.rstrip("/")
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.jwt)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.jwt}",
            "Content-Type": "application/json",
        }

    async def upload_json(self, name: str, description: str) -> str:
        """
        Pin NFT metadata to IPFS.

        Args:
            name: NFT name
            description: NFT description

        Returns:
            The IPFS content identifier (CID) of the pinned JSON

        Raises:
            MetadataUploadError: If the client is unconfigured or the upload fails
        """
        if not self.is_configured():
            raise MetadataUploadError("Pinata JWT is not configured")

        body: Dict[str, Any] = {
            "pinataContent": {"name": name, "description": description},
            "pinataMetadata": {"name": f"{name}.json"},
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/pinning/pinJSONToIPFS",
                    json=body,
                    headers=self._get_headers(),
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"PinataClient: HTTP error during upload: {e.response.status_code} - {e.response.text}"
            )
            raise MetadataUploadError(
                f"Pinata upload failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"PinataClient: Upload failed: {e}")
            raise MetadataUploadError(f"Pinata upload failed: {e}") from e

        if not isinstance(result, dict):
            logger.error(f"PinataClient: Unexpected response body: {result!r}")
            raise MetadataUploadError("Pinata response was not a JSON object")

        cid = result.get("IpfsHash")
        if not cid:
            logger.error(f"PinataClient: Upload succeeded but no IpfsHash in response: {result}")
            raise MetadataUploadError("Pinata response did not include an IpfsHash")

        logger.info(f"PinataClient: Uploaded JSON to IPFS with hash: {cid}")
        return cid

    @staticmethod
    def get_ipfs_uri(cid: str) -> str:
        """Build the ipfs:// URI used as the token URI."""
        return f"ipfs://{cid}"

    def get_gateway_url(self, cid: str) -> str:
        """Build a public HTTP gateway URL for a CID."""
        return f"{self.gateway_url}/{cid}"
