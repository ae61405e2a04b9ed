"""
NFT Record Model

Defines the per-participant record stored between conversation turns and the
slot-filling rules applied to it:
- NftRecord: the partially collected name/description/recipient
- MintResult: what replaces the record once the NFT has been minted
- merge(): first-write-wins merge of newly extracted fields
- is_complete() / missing_fields(): the completion gate

Both record shapes share one storage slot, so they are modelled as a union
discriminated on the ``state`` field.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

REQUIRED_FIELDS: Tuple[str, ...] = ("name", "description", "recipient")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def cache_key(agent_name: str, participant_id: str) -> str:
    """Build the record store key for one (agent, participant) pair."""
    return f"{agent_name}/{participant_id}/data"


class NftRecord(BaseModel):
    """NFT data collected so far from one participant."""

    state: Literal["collecting"] = "collecting"
    name: Optional[str] = None
    description: Optional[str] = None
    recipient: Optional[str] = None
    last_updated: Optional[datetime] = None

    def known_fields(self) -> Dict[str, str]:
        """Return the required fields that already hold a value, in display order."""
        return {
            field: getattr(self, field)
            for field in REQUIRED_FIELDS
            if getattr(self, field)
        }


class MintResult(BaseModel):
    """Outcome of a successful mint, stored in place of the NftRecord."""

    state: Literal["minted"] = "minted"
    tx_hash: Optional[str] = None
    last_updated: Optional[datetime] = None

    def has_tx_hash(self) -> bool:
        return bool(self.tx_hash and self.tx_hash.strip())


StoredRecord = Annotated[Union[NftRecord, MintResult], Field(discriminator="state")]

stored_record_adapter: TypeAdapter = TypeAdapter(StoredRecord)


class ExtractedFields(BaseModel):
    """Fields the extractor found in a single message.

    Blank or missing values are normalised to None so that only real
    statements ever reach the merge.
    """

    model_config = {"extra": "ignore"}

    name: Optional[str] = None
    description: Optional[str] = None
    recipient: Optional[str] = None

    @field_validator("name", "description", "recipient", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            value = str(value)
        value = value.strip()
        return value or None


def missing_fields(record: NftRecord) -> List[str]:
    """List the required fields that are still unset, in collection order."""
    return [field for field in REQUIRED_FIELDS if not getattr(record, field)]


def is_complete(record: NftRecord) -> bool:
    """True iff name, description and recipient are all set."""
    return not missing_fields(record)


def merge(
    cached: NftRecord,
    extracted: Union[ExtractedFields, Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> Tuple[NftRecord, bool]:
    """
    Merge newly extracted fields into a cached record.

    A field is adopted only when the extractor produced a non-empty value and
    the cached record has no value for it yet. Known fields are never
    overwritten or cleared.

    Args:
        cached: The record as currently stored
        extracted: Fields found in the latest message
        now: Timestamp to stamp on a changed record (defaults to current UTC time)

    Returns:
        Tuple of (merged record, whether any field changed)
    """
    if not isinstance(extracted, ExtractedFields):
        extracted = ExtractedFields.model_validate(dict(extracted))

    updates: Dict[str, str] = {}
    for field in REQUIRED_FIELDS:
        new_value = getattr(extracted, field)
        if new_value and not getattr(cached, field):
            updates[field] = new_value

    if not updates:
        return cached, False

    updates["last_updated"] = now or utc_now()
    return cached.model_copy(update=updates), True
