"""
NFT Field Extractor

Asks the small model tier which NFT fields the user explicitly stated in the
latest message.
"""

import logging
from typing import Protocol

from ..exceptions import ExtractionError
from .ai_engine import ModelClass
from .records import ExtractedFields

logger = logging.getLogger(__name__)

EXTRACTION_TEMPLATE = """
Analyze the following conversation to extract NFT information.
Only extract information when it is explicitly and clearly stated by the user about themselves.

Conversation:
{message_text}

Return a JSON object containing only the fields where information was clearly found:
{{
    "name": "extracted NFT's name if stated",
    "description": "extracted NFT's description if stated",
    "recipient": "extracted Ethereum address of the NFT's recipient if stated"
}}

Only include fields where information is explicitly stated and current.
Omit fields if information is unclear, hypothetical, or about others.
"""


class ObjectGenerator(Protocol):
    async def generate_object(self, prompt: str, model_class: ModelClass = ModelClass.SMALL) -> dict:
        ...


def build_extraction_prompt(message_text: str) -> str:
    return EXTRACTION_TEMPLATE.format(message_text=message_text)


class FieldExtractor:
    """Extracts name, description and recipient from one message."""

    def __init__(self, ai_engine: ObjectGenerator, model_class: ModelClass = ModelClass.SMALL):
        self.ai_engine = ai_engine
        self.model_class = model_class

    async def extract(self, message_text: str) -> ExtractedFields:
        """
        Extract the NFT fields stated in message_text.

        Raises:
            ExtractionError: If the model call fails or returns no JSON object
        """
        prompt = build_extraction_prompt(message_text)
        try:
            raw = await self.ai_engine.generate_object(prompt, self.model_class)
        except Exception as e:
            raise ExtractionError(f"Field extraction failed: {e}") from e

        extracted = ExtractedFields.model_validate(raw)
        logger.debug(f"FieldExtractor: Extracted {extracted.model_dump(exclude_none=True)}")
        return extracted
