import os

# main.py 在导入时构建模块级 app，需要凭据
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")

from typing import AsyncIterator, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from legal_assistant.core.config import Settings
from legal_assistant.main import create_app
from legal_assistant.services.ai_models.language.base import BaseLanguageModel, FragmentStream


class FakeFragmentStream(FragmentStream):
    def __init__(self, fragments: List[str], fail_with: Optional[Exception] = None):
        self._fragments = list(fragments)
        self.fail_with = fail_with
        self.closed = False
        self.consumed = 0

    async def fragments(self) -> AsyncIterator[str]:
        for fragment in self._fragments:
            self.consumed += 1
            yield fragment
        if self.fail_with is not None:
            raise self.fail_with

    async def aclose(self) -> None:
        self.closed = True


class FakeLanguageModel(BaseLanguageModel):
    """记录收到的消息，按预设返回分片或抛出异常。"""

    model_name = "fake/model"

    def __init__(self):
        self.calls: List[List[Dict]] = []
        self.fragments: List[str] = ["Hello", ", ", "world"]
        self.fail_mid_stream: Optional[Exception] = None
        self.open_error: Optional[Exception] = None
        self.streams: List[FakeFragmentStream] = []
        self.closed = False

    async def open_stream(self, messages: List[Dict]) -> FakeFragmentStream:
        self.calls.append(messages)
        if self.open_error is not None:
            raise self.open_error
        stream = FakeFragmentStream(self.fragments, self.fail_mid_stream)
        self.streams.append(stream)
        return stream

    async def aclose(self) -> None:
        self.closed = True


def parse_sse(body: str) -> List[str]:
    """把响应体拆成事件块（去掉末尾空块）"""
    return [block for block in body.split("\n\n") if block]


@pytest.fixture
def settings() -> Settings:
    return Settings(openrouter_api_key="test-key")


@pytest.fixture
def fake_model() -> FakeLanguageModel:
    return FakeLanguageModel()


@pytest.fixture
def app(settings, fake_model):
    return create_app(settings=settings, language_model=fake_model)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
