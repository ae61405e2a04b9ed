"""
NFT Data Collector

The evaluator that runs on every incoming message: it extracts NFT fields from
the text, merges them into the participant's stored record and, once the
record is complete, hands it to the mint pipeline.

Processing for one participant is serialized with a per-key lock so that two
messages arriving together cannot both read the same stale record or mint
twice.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .error_handling import ErrorTracker
from .extractor import FieldExtractor
from .mint_pipeline import MintOutcome, MintPipeline
from .record_store import KeyedLocks, RecordStore
from .records import ExtractedFields, MintResult, NftRecord, cache_key, is_complete, merge

logger = logging.getLogger(__name__)


@dataclass
class IncomingMessage:
    """A chat message as handed over by the agent runtime."""
    participant_id: str
    text: str


@dataclass
class HandleResult:
    """What one handle() call did."""
    key: str
    extracted: Optional[ExtractedFields] = None
    changed: bool = False
    complete: bool = False
    already_minted: bool = False
    mint_outcome: Optional[MintOutcome] = None
    error: Optional[BaseException] = None


class NftDataCollector:
    """Collects NFT name, description and recipient from conversation."""

    name = "GET_NFT_DATA"
    similes = [
        "EXTRACT_NFT_INFO",
        "GET_NFT_INFORMATION",
        "COLLECT_NFT_DATA",
        "NFT_DETAILS",
    ]
    description = (
        "Extract the NFT's name, description, and recipient (an Ethereum address) "
        "from the conversation when explicitly mentioned."
    )
    always_run = True
    examples: List[Dict[str, Any]] = [
        {
            "context": "NFT creation",
            "message": (
                "Hi everyone! I want to create a new NFT called Maserati GranTurismo "
                "with this description: A luxurious grand tourer powered by a high-revving V8 engine, "
                "combining Italian elegance with dynamic performance. "
                "I want the NFT to be sent to the address 0x20c6F9006d563240031A1388f4f25726029a6368"
            ),
            "outcome": {
                "name": "Maserati GranTurismo",
                "description": (
                    "A luxurious grand tourer powered by a high-revving V8 engine, "
                    "combining Italian elegance with dynamic performance."
                ),
                "recipient": "0x20c6F9006d563240031A1388f4f25726029a6368",
            },
        },
        {
            "context": "Purchase discussion",
            "message": "I plan to buy a new Maserati GranTurismo next year.",
            "outcome": {},
        },
        {
            "context": "NFT portfolio discussion",
            "message": "I already own many NFTs in my wallet 0x20c6F9006d563240031A1388f4f25726029a6368",
            "outcome": {},
        },
    ]

    def __init__(
        self,
        agent_name: str,
        record_store: RecordStore,
        extractor: FieldExtractor,
        pipeline: MintPipeline,
        error_tracker: ErrorTracker,
        locks: Optional[KeyedLocks] = None,
        record_ttl_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.agent_name = agent_name
        self.record_store = record_store
        self.extractor = extractor
        self.pipeline = pipeline
        self.error_tracker = error_tracker
        self.locks = locks or KeyedLocks()
        self.record_ttl_seconds = record_ttl_seconds
        self._clock = clock

    def key_for(self, message: IncomingMessage) -> str:
        return cache_key(self.agent_name, message.participant_id)

    async def validate(self, message: IncomingMessage) -> bool:
        """
        Decide whether handle() should run for this message.

        True while the participant's NFT has not been minted yet. Record store
        failures are logged and answered with False.
        """
        key = self.key_for(message)
        try:
            stored = await self.record_store.get(key)
        except Exception as e:
            self.error_tracker.register_error(e, "nft_data_collector", "validate", {"cache_key": key})
            return False
        return not isinstance(stored, MintResult)

    async def handle(self, message: IncomingMessage) -> HandleResult:
        """
        Extract, merge and, when complete, mint.

        Never raises; failures are logged, registered and returned on the result.
        """
        key = self.key_for(message)
        result = HandleResult(key=key)

        async with self.locks.hold(key):
            try:
                stored = await self.record_store.get(key)
                if isinstance(stored, MintResult):
                    result.already_minted = True
                    result.complete = True
                    return result

                record = stored or NftRecord()
                if not is_complete(record):
                    result.extracted = await self.extractor.extract(message.text)
                    record, result.changed = merge(record, result.extracted)
                    if result.changed:
                        await self.record_store.set(
                            key, record, self._clock() + self.record_ttl_seconds
                        )
                        logger.debug(f"NftDataCollector: Updated record for {key}")

                result.complete = is_complete(record)
                if result.complete:
                    logger.info(f"NftDataCollector: NFT data collection completed for {key}")
                    result.mint_outcome = await self.pipeline.run(key, record)
            except Exception as e:
                self.error_tracker.register_error(e, "nft_data_collector", "handle", {"cache_key": key})
                result.error = e

        return result

    async def process(self, message: IncomingMessage) -> Optional[HandleResult]:
        """Run validate() and, if it passes, handle()."""
        if not await self.validate(message):
            return None
        return await self.handle(message)
