"""
Core collection and minting logic.
"""

from .collector import HandleResult, IncomingMessage, NftDataCollector
from .mint_pipeline import MintOutcome, MintPipeline, MintStage
from .narrators import MintResultNarrator, StatusNarrator
from .records import MintResult, NftRecord, cache_key, is_complete, merge, missing_fields

__all__ = [
    "HandleResult",
    "IncomingMessage",
    "MintOutcome",
    "MintPipeline",
    "MintResult",
    "MintResultNarrator",
    "MintStage",
    "NftDataCollector",
    "NftRecord",
    "StatusNarrator",
    "cache_key",
    "is_complete",
    "merge",
    "missing_fields",
]
