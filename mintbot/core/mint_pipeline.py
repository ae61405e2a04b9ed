"""
Mint Pipeline

Runs once a record is complete: pins the metadata to IPFS, resolves the
recipient, submits the mint transaction and replaces the stored record with
the MintResult. Any failing step aborts the run, leaving the stored record as
it was so the next eligible turn tries again.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..exceptions import IncompleteRecordError
from ..integrations.chain_client import ChainClient
from ..integrations.pinata_client import PinataClient
from .error_handling import ErrorCategory, ErrorTracker, categorize_error
from .record_store import RecordStore
from .records import MintResult, NftRecord, missing_fields, utc_now

logger = logging.getLogger(__name__)


class MintStage(Enum):
    """Steps of the pipeline, in execution order."""
    VALIDATE = "validate"
    UPLOAD = "upload"
    RESOLVE = "resolve"
    MINT = "mint"
    STORE = "store"


@dataclass
class MintOutcome:
    """Result of one pipeline run."""
    success: bool
    tx_hash: Optional[str] = None
    token_uri: Optional[str] = None
    failed_stage: Optional[MintStage] = None
    error: Optional[BaseException] = None

    @property
    def error_category(self) -> Optional[ErrorCategory]:
        if self.error is None:
            return None
        return categorize_error(self.error)


class MintPipeline:
    """Uploads metadata and mints the NFT described by a complete record."""

    def __init__(
        self,
        record_store: RecordStore,
        uploader: PinataClient,
        chain_client: ChainClient,
        error_tracker: ErrorTracker,
        record_ttl_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.record_store = record_store
        self.uploader = uploader
        self.chain_client = chain_client
        self.error_tracker = error_tracker
        self.record_ttl_seconds = record_ttl_seconds
        self._clock = clock

    async def run(self, key: str, record: NftRecord) -> MintOutcome:
        """
        Mint the NFT for a complete record stored at key.

        Never raises: failures are logged, registered with the error tracker
        and reported through the returned MintOutcome.
        """
        missing = missing_fields(record)
        if missing:
            return self._fail(key, MintStage.VALIDATE, IncompleteRecordError(missing))

        stage = MintStage.UPLOAD
        tx_hash: Optional[str] = None
        token_uri: Optional[str] = None
        try:
            cid = await self.uploader.upload_json(record.name, record.description)
            token_uri = self.uploader.get_ipfs_uri(cid)

            stage = MintStage.RESOLVE
            address = await self.chain_client.resolve_address(record.recipient)

            stage = MintStage.MINT
            tx_hash = await self.chain_client.mint(address, token_uri)

            stage = MintStage.STORE
            result = MintResult(tx_hash=tx_hash, last_updated=utc_now())
            await self.record_store.set(key, result, self._clock() + self.record_ttl_seconds)
        except Exception as e:
            if stage == MintStage.STORE:
                # The transaction is already on its way; keep the hash visible
                logger.error(f"MintPipeline: Minted {tx_hash} for {key} but could not store the result")
            outcome = self._fail(key, stage, e)
            outcome.tx_hash = tx_hash
            outcome.token_uri = token_uri
            return outcome

        logger.info(f"MintPipeline: Minted NFT '{record.name}' for {key} with transaction hash: {tx_hash}")
        return MintOutcome(success=True, tx_hash=tx_hash, token_uri=token_uri)

    def _fail(self, key: str, stage: MintStage, error: BaseException) -> MintOutcome:
        self.error_tracker.register_error(
            error, "mint_pipeline", stage.value, {"cache_key": key}
        )
        return MintOutcome(success=False, failed_stage=stage, error=error)
