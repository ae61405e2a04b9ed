"""
Global test configuration and fixtures.
"""

from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from mintbot.config import AIConfig
from mintbot.core.collector import IncomingMessage, NftDataCollector
from mintbot.core.error_handling import ErrorTracker
from mintbot.core.extractor import FieldExtractor
from mintbot.core.mint_pipeline import MintPipeline
from mintbot.core.record_store import InMemoryRecordStore, KeyedLocks
from mintbot.core.records import ExtractedFields, NftRecord

AGENT_NAME = "TestAgent"
PARTICIPANT_ID = "user-123"
RECIPIENT = "0x20c6F9006d563240031A1388f4f25726029a6368"
TX_HASH = "0x" + "ab" * 32
CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def record_store(clock: FakeClock) -> InMemoryRecordStore:
    """Provide an empty in-memory record store driven by the fake clock."""
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def error_tracker() -> ErrorTracker:
    return ErrorTracker()


@pytest.fixture
def ai_config() -> AIConfig:
    return AIConfig(openrouter_api_key="sk-test-key", small_model="test/small-model")


@pytest.fixture
def mock_extractor() -> AsyncMock:
    """Provide a mocked FieldExtractor that finds nothing by default."""
    extractor = AsyncMock(spec=FieldExtractor)
    extractor.extract.return_value = ExtractedFields()
    return extractor


@pytest.fixture
def mock_uploader() -> MagicMock:
    """Provide a mocked PinataClient returning a fixed CID."""
    uploader = MagicMock()
    uploader.upload_json = AsyncMock(return_value=CID)
    uploader.get_ipfs_uri = MagicMock(side_effect=lambda cid: f"ipfs://{cid}")
    return uploader


@pytest.fixture
def mock_chain_client() -> MagicMock:
    """Provide a mocked ChainClient that resolves to RECIPIENT and mints TX_HASH."""
    chain_client = MagicMock()
    chain_client.resolve_address = AsyncMock(return_value=RECIPIENT)
    chain_client.mint = AsyncMock(return_value=TX_HASH)
    return chain_client


@pytest.fixture
def pipeline(record_store, mock_uploader, mock_chain_client, error_tracker, clock) -> MintPipeline:
    return MintPipeline(
        record_store, mock_uploader, mock_chain_client, error_tracker,
        record_ttl_seconds=600, clock=clock,
    )


@pytest.fixture
def collector(record_store, mock_extractor, pipeline, error_tracker, clock) -> NftDataCollector:
    return NftDataCollector(
        agent_name=AGENT_NAME,
        record_store=record_store,
        extractor=mock_extractor,
        pipeline=pipeline,
        error_tracker=error_tracker,
        locks=KeyedLocks(),
        record_ttl_seconds=600,
        clock=clock,
    )


@pytest.fixture
def make_message() -> Callable[[str], IncomingMessage]:
    def _make(text: str, participant_id: str = PARTICIPANT_ID) -> IncomingMessage:
        return IncomingMessage(participant_id=participant_id, text=text)
    return _make


@pytest.fixture
def complete_record() -> NftRecord:
    return NftRecord(
        name="Maserati GranTurismo",
        description="A luxurious grand tourer",
        recipient=RECIPIENT,
    )
