"""
AI Engine

Thin client for the generative model used to extract NFT fields from chat.

Key Features:
-   Model tiers (small / medium / large) mapped to configured OpenRouter models.
-   JSON object output, recovered from plain text or markdown code blocks.
-   A single attempt per call; failures propagate to the caller.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from ..config import AIConfig

logger = logging.getLogger(__name__)


class ModelClass(Enum):
    """Model tier selector."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


JSON_OBJECT_INSTRUCTIONS = """
RESPONSE FORMATTING:
Your entire response MUST be a single, valid JSON object.
Do not include any text, markdown, or explanations outside of the JSON object.
Ensure all strings are enclosed in double quotes.
Do not add comments or trailing commas.
"""


class AIEngine:
    """Calls OpenRouter chat completions and returns parsed JSON objects."""

    def __init__(self, config: AIConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.http_client = client or httpx.AsyncClient(timeout=config.timeout)
        logger.debug(f"AIEngine initialized with small model '{config.small_model}'")

    def model_for(self, model_class: ModelClass) -> str:
        """Resolve a model tier to the configured model id."""
        return {
            ModelClass.SMALL: self.config.small_model,
            ModelClass.MEDIUM: self.config.medium_model,
            ModelClass.LARGE: self.config.large_model,
        }[model_class]

    async def chat_completion(self, messages: List[Dict[str, Any]], model: str) -> str:
        """Send one chat completion request and return the message content."""
        if not self.config.openrouter_api_key:
            raise ValueError("OpenRouter API key is not configured")

        headers = {
            "Authorization": f"Bearer {self.config.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.config.http_referer,
            "X-Title": self.config.x_title,
        }
        payload = {
            "model": model,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        logger.debug(f"AIEngine: Sending request to OpenRouter with model {model}")
        response = await self.http_client.post(self.config.api_url, headers=headers, json=payload)
        response.raise_for_status()
        result = response.json()

        content = result["choices"][0]["message"].get("content") or ""
        if "usage" in result:
            usage = result["usage"]
            logger.debug(
                f"AIEngine: Token usage prompt={usage.get('prompt_tokens')} "
                f"completion={usage.get('completion_tokens')}"
            )
        return content

    async def generate_object(
        self, prompt: str, model_class: ModelClass = ModelClass.SMALL
    ) -> Dict[str, Any]:
        """
        Generate a JSON object from the model.

        Args:
            prompt: The full instruction prompt
            model_class: Which model tier to use

        Returns:
            The parsed JSON object

        Raises:
            httpx.HTTPError: If the request fails
            ValueError: If the response holds no JSON object
        """
        messages = [
            {"role": "system", "content": JSON_OBJECT_INSTRUCTIONS},
            {"role": "user", "content": prompt},
        ]
        raw_content = await self.chat_completion(messages, self.model_for(model_class))
        if not raw_content.strip():
            raise ValueError("AI returned an empty response.")

        parsed = self._extract_json_from_text(raw_content)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed

    def _extract_json_from_text(self, text: str) -> Any:
        """
        Robustly extracts a JSON object from a string, which might include markdown.
        """
        text = text.strip()

        # Strategy 1: Look for markdown code blocks
        match = re.search(r"```(?:json)?\s*\n({.*?})\s*\n```", text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                logger.warning("Found markdown block but failed to parse JSON.")

        # Strategy 2: Find the first '{' and last '}'
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse content between braces: {e}")

        # Strategy 3: Try to parse the entire string
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            raise ValueError(f"Could not extract valid JSON from AI response. Content: {text[:500]}...")

    async def cleanup(self):
        """Closes network connections and cleans up resources."""
        await self.http_client.aclose()
        logger.debug("AIEngine resources have been cleaned up.")
