import asyncio
import json

from conftest import FakeLanguageModel
from legal_assistant.core.config import Settings
from legal_assistant.main import create_app
from legal_assistant.services.ai_models.language.base import FragmentStream


class StallingFragmentStream(FragmentStream):
    """先给出一个分片，然后上游迟迟不再返回数据。"""

    def __init__(self):
        self.consumed = 0
        self.close_started = False
        self.closed = False

    async def fragments(self):
        self.consumed += 1
        yield "a"
        await asyncio.Event().wait()
        self.consumed += 1
        yield "b"

    async def aclose(self) -> None:
        self.close_started = True
        # 关闭上游响应本身也需要让出事件循环
        await asyncio.sleep(0)
        self.closed = True


class StallingLanguageModel(FakeLanguageModel):
    async def open_stream(self, messages):
        self.calls.append(messages)
        stream = StallingFragmentStream()
        self.streams.append(stream)
        return stream


def _scope(body: bytes) -> dict:
    return {
        "type": "http",
        # 2.4 以下 StreamingResponse 会监听 http.disconnect 并取消任务组
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/ask",
        "raw_path": b"/ask",
        "query_string": b"",
        "root_path": "",
        "headers": [
            (b"host", b"testserver"),
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }


async def _ask_then_disconnect(app, body: bytes):
    """发送请求体，收到第一个分片后客户端断开。"""
    first_chunk_sent = asyncio.Event()
    body_delivered = False
    sent = []

    async def receive():
        nonlocal body_delivered
        if not body_delivered:
            body_delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        await first_chunk_sent.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            first_chunk_sent.set()

    await asyncio.wait_for(app(_scope(body), receive, send), timeout=5)
    return sent


def test_client_disconnect_closes_upstream_stream():
    model = StallingLanguageModel()
    app = create_app(settings=Settings(openrouter_api_key="test-key"), language_model=model)
    body = json.dumps({"question": "What is a contract?"}).encode()

    sent = asyncio.run(_ask_then_disconnect(app, body))

    (stream,) = model.streams
    assert stream.close_started
    assert stream.closed
    # 上游只被读取到断开时为止
    assert stream.consumed == 1

    start = sent[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 200
    bodies = [m.get("body", b"") for m in sent if m["type"] == "http.response.body"]
    assert b"".join(bodies) == 'data: {"chunk": "a"}\n\n'.encode()
    assert b"done" not in b"".join(bodies)
