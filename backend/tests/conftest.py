"""
Shared fixtures. No test touches the network: remote completions are
served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from pharmaguard.core.config import DEFAULT_FALLBACK_PATH, Settings
from pharmaguard.services.llm.fallback_table import FallbackTable
from pharmaguard.services.llm.openai_client import OpenAIClient
from pharmaguard.services.vcf.knowledge_base import get_knowledge_base


@pytest.fixture
def offline_settings():
    """Settings with no credential configured."""
    return Settings()


@pytest.fixture
def online_settings():
    return Settings(openai_api_key="sk-test", openai_base_url="https://llm.test/v1", request_timeout=5.0)


@pytest.fixture
def knowledge_base():
    return get_knowledge_base()


@pytest.fixture
def fallback_table():
    return FallbackTable.from_file(DEFAULT_FALLBACK_PATH)


@pytest.fixture
def reference_table():
    with open(DEFAULT_FALLBACK_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def completion_client(online_settings):
    """Factory: OpenAIClient whose requests are answered by `handler`."""
    def _make(handler):
        return OpenAIClient(settings=online_settings, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def completion_response():
    """Factory: a chat completion HTTP response carrying `content`."""
    def _make(content, status_code=200):
        return httpx.Response(
            status_code,
            json={"choices": [{"message": {"role": "assistant", "content": content}}]},
        )
    return _make
