"""
Status Narrators

Providers that turn the stored record into text for the model's next turn:
- StatusNarrator: what has been collected and how to ask for the rest
- MintResultNarrator: the explorer link once the NFT has been minted

Both are read-only and never raise; on failure they return a fallback string.
"""

import logging
from typing import Dict

from .error_handling import ErrorTracker
from .record_store import RecordStore
from .records import MintResult, NftRecord, cache_key, missing_fields

logger = logging.getLogger(__name__)

STATUS_FALLBACK = "Error accessing NFT information. Continuing conversation normally."

STATUS_HEADER = "NFT Information Status:\n\n"

COLLECTION_COMPLETE = (
    "Status: All necessary information has been collected.\n"
    "Continue natural conversation without information gathering."
)

FIELD_GUIDANCE: Dict[str, Dict[str, str]] = {
    "name": {
        "description": "NFT name",
        "valid": "Maserati GranTurismo, Samsung Galaxy S25, Adidas Campus",
        "invalid": "future plans, past possessions, or aspirational items",
        "instructions": "Extract only when user directly states the NFT's name",
    },
    "description": {
        "description": "NFT description",
        "valid": "A great car, a smartphone, a pair of shoes",
        "invalid": "future plans, past possessions, or aspirational items",
        "instructions": "Extract only when user directly states the NFT's description",
    },
    "recipient": {
        "description": "NFT recipient's Ethereum address for the NFT",
        "valid": (
            "0x742d35Cc6634C0532925a3b844Bc454e4438f44e, "
            "0x66f820a414680B5bcda5eECA5dea238543F42054, vitalik.eth, wevm.eth"
        ),
        "invalid": "email addresses, phone numbers, home addresses, or other types of addresses",
        "instructions": "Extract only when user directly states the NFT's recipient",
    },
}


def tx_url(explorer_url: str, tx_hash: str) -> str:
    """Block explorer link for a transaction."""
    return f"{explorer_url.rstrip('/')}/tx/{tx_hash}"


def render_status(record: NftRecord, agent_name: str) -> str:
    """Render the collection status of a record."""
    response = STATUS_HEADER

    known = record.known_fields()
    if known:
        response += "Current Information:\n"
        response += "\n".join(f"- {field.capitalize()}: {value}" for field, value in known.items())
        response += "\n\n"

    missing = missing_fields(record)
    if not missing:
        return response + COLLECTION_COMPLETE

    response += f"CURRENT TASK FOR {agent_name}:\n"
    response += (
        f"{agent_name} should try to prioritize getting this information from the user "
        "by asking them questions\n"
        "Missing Information and Extraction Guidelines:\n\n"
    )
    for field in missing:
        guidance = FIELD_GUIDANCE[field]
        response += f"{field.capitalize()}:\n"
        response += f"- Description: {guidance['description']}\n"
        response += f"- Valid Examples: {guidance['valid']}\n"
        response += f"- Do Not Extract: {guidance['invalid']}\n"
        response += f"- Instructions: {guidance['instructions']}\n\n"

    response += "Overall Guidance:\n"
    response += (
        "- Try to extract all missing information through natural conversation, "
        "but be very direct and aggressive in getting that info\n"
    )
    response += "- Only extract information when clearly and directly stated by the user\n"
    response += "- Verify information is current, not past or future\n"
    return response


class StatusNarrator:
    """Describes the collected NFT data and what is still missing."""

    def __init__(self, record_store: RecordStore, error_tracker: ErrorTracker):
        self.record_store = record_store
        self.error_tracker = error_tracker

    async def render(self, agent_name: str, participant_id: str) -> str:
        key = cache_key(agent_name, participant_id)
        try:
            stored = await self.record_store.get(key) or NftRecord()
            if isinstance(stored, MintResult):
                # Minting replaced the record, so collection is over
                return STATUS_HEADER + COLLECTION_COMPLETE
            return render_status(stored, agent_name)
        except Exception as e:
            self.error_tracker.register_error(e, "status_narrator", "render", {"cache_key": key})
            return STATUS_FALLBACK


class MintResultNarrator:
    """Reports the mint transaction once one exists for the participant."""

    def __init__(self, record_store: RecordStore, error_tracker: ErrorTracker, explorer_url: str):
        self.record_store = record_store
        self.error_tracker = error_tracker
        self.explorer_url = explorer_url

    async def render(self, agent_name: str, participant_id: str) -> str:
        key = cache_key(agent_name, participant_id)
        try:
            stored = await self.record_store.get(key)
            if not isinstance(stored, MintResult) or not stored.has_tx_hash():
                return ""

            url = tx_url(self.explorer_url, stored.tx_hash)
            logger.debug(f"MintResultNarrator: Block explorer URL: {self.explorer_url}")
            return (
                "The NFT has been created successfully!\n"
                f"The transaction hash is {stored.tx_hash}\n"
                f"The transaction URL on the block explorer is: {url}"
            )
        except Exception as e:
            self.error_tracker.register_error(e, "mint_result_narrator", "render", {"cache_key": key})
            return ""
