"""
Application Context

Builds every collaborator once from settings and hands them around explicitly,
so nothing in the package reaches for module-level clients or keys.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import AppConfig
from ..exceptions import ConfigurationError
from ..integrations.chain_client import ChainClient
from ..integrations.pinata_client import PinataClient
from .ai_engine import AIEngine
from .collector import NftDataCollector
from .error_handling import ErrorTracker
from .extractor import FieldExtractor
from .mint_pipeline import MintPipeline
from .narrators import MintResultNarrator, StatusNarrator
from .record_store import InMemoryRecordStore, KeyedLocks, RecordStore, SqliteRecordStore

logger = logging.getLogger(__name__)


@dataclass
class MintbotContext:
    """Everything an agent runtime needs to collect and mint."""
    settings: AppConfig
    record_store: RecordStore
    error_tracker: ErrorTracker
    ai_engine: AIEngine
    collector: NftDataCollector
    status_narrator: StatusNarrator
    mint_result_narrator: MintResultNarrator

    @property
    def agent_name(self) -> str:
        return self.settings.collector.agent_name

    async def cleanup(self) -> None:
        await self.ai_engine.cleanup()


def create_record_store(settings: AppConfig) -> RecordStore:
    backend = settings.collector.store_backend.lower()
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "sqlite":
        Path(settings.collector.db_path).parent.mkdir(parents=True, exist_ok=True)
        return SqliteRecordStore(settings.collector.db_path)
    raise ConfigurationError(f"Unknown COLLECTOR_STORE_BACKEND '{settings.collector.store_backend}'")


def create_context(settings: AppConfig) -> MintbotContext:
    """
    Wire up the collector, pipeline and narrators from settings.

    Raises:
        ConfigurationError: If required settings are missing
    """
    missing = settings.check_required()
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    record_store = create_record_store(settings)
    error_tracker = ErrorTracker()
    ai_engine = AIEngine(settings.ai)
    uploader = PinataClient(
        jwt=settings.pinata.jwt,
        api_url=settings.pinata.api_url,
        gateway_url=settings.pinata.gateway_url,
        timeout=settings.pinata.timeout,
    )
    chain_client = ChainClient.from_config(settings.chain)
    ttl = settings.collector.record_ttl_seconds

    pipeline = MintPipeline(record_store, uploader, chain_client, error_tracker, record_ttl_seconds=ttl)
    collector = NftDataCollector(
        agent_name=settings.collector.agent_name,
        record_store=record_store,
        extractor=FieldExtractor(ai_engine),
        pipeline=pipeline,
        error_tracker=error_tracker,
        locks=KeyedLocks(),
        record_ttl_seconds=ttl,
    )

    logger.debug(f"Mintbot context created for agent {settings.collector.agent_name}")
    return MintbotContext(
        settings=settings,
        record_store=record_store,
        error_tracker=error_tracker,
        ai_engine=ai_engine,
        collector=collector,
        status_narrator=StatusNarrator(record_store, error_tracker),
        mint_result_narrator=MintResultNarrator(
            record_store, error_tracker, settings.chain.explorer_url
        ),
    )
