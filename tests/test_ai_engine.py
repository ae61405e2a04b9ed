"""
Tests for the OpenRouter client and JSON recovery from model output.
"""

import json

import httpx
import pytest

from mintbot.config import AIConfig
from mintbot.core.ai_engine import AIEngine, ModelClass


def openrouter_reply(content):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 7},
    }


def make_engine(config, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AIEngine(config, client=client)


class TestModelSelection:

    def test_model_for_each_tier(self, ai_config):
        engine = AIEngine(ai_config, client=httpx.AsyncClient())
        assert engine.model_for(ModelClass.SMALL) == "test/small-model"
        assert engine.model_for(ModelClass.MEDIUM) == ai_config.medium_model
        assert engine.model_for(ModelClass.LARGE) == ai_config.large_model


class TestGenerateObject:

    @pytest.mark.asyncio
    async def test_request_shape(self, ai_config):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=openrouter_reply('{"name": "Car"}'))

        engine = make_engine(ai_config, handler)
        result = await engine.generate_object("Extract please")

        assert result == {"name": "Car"}
        assert captured["url"] == ai_config.api_url
        assert captured["headers"]["Authorization"] == "Bearer sk-test-key"
        assert captured["body"]["model"] == "test/small-model"
        assert captured["body"]["messages"][0]["role"] == "system"
        assert captured["body"]["messages"][1] == {"role": "user", "content": "Extract please"}
        await engine.cleanup()

    @pytest.mark.asyncio
    async def test_json_in_markdown_block(self, ai_config):
        content = 'Here you go:\n```json\n{"name": "Car", "recipient": "vitalik.eth"}\n```'
        engine = make_engine(ai_config, lambda r: httpx.Response(200, json=openrouter_reply(content)))

        assert await engine.generate_object("x") == {"name": "Car", "recipient": "vitalik.eth"}

    @pytest.mark.asyncio
    async def test_json_surrounded_by_text(self, ai_config):
        content = 'Sure! {"description": "A car"} Hope that helps.'
        engine = make_engine(ai_config, lambda r: httpx.Response(200, json=openrouter_reply(content)))

        assert await engine.generate_object("x") == {"description": "A car"}

    @pytest.mark.asyncio
    async def test_empty_response_raises(self, ai_config):
        engine = make_engine(ai_config, lambda r: httpx.Response(200, json=openrouter_reply("   ")))

        with pytest.raises(ValueError, match="empty"):
            await engine.generate_object("x")

    @pytest.mark.asyncio
    async def test_non_object_raises(self, ai_config):
        engine = make_engine(ai_config, lambda r: httpx.Response(200, json=openrouter_reply("[1, 2]")))

        with pytest.raises(ValueError, match="JSON object"):
            await engine.generate_object("x")

    @pytest.mark.asyncio
    async def test_unparseable_response_raises(self, ai_config):
        engine = make_engine(ai_config, lambda r: httpx.Response(200, json=openrouter_reply("no json here")))

        with pytest.raises(ValueError, match="Could not extract valid JSON"):
            await engine.generate_object("x")

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, ai_config):
        engine = make_engine(ai_config, lambda r: httpx.Response(500, json={"error": "down"}))

        with pytest.raises(httpx.HTTPStatusError):
            await engine.generate_object("x")

    @pytest.mark.asyncio
    async def test_missing_api_key_raises(self):
        engine = make_engine(AIConfig(openrouter_api_key=None), lambda r: httpx.Response(200))

        with pytest.raises(ValueError, match="API key"):
            await engine.generate_object("x")
