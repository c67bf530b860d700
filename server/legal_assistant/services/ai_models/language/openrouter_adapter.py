"""
OpenRouter 语言模型适配器（OpenAI 兼容接口）
通过 openai SDK 的异步客户端调用 OpenRouter 的流式对话补全端点。
"""

import logging
import time
from typing import AsyncIterator, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from ....core.exceptions import UpstreamError
from .base import BaseLanguageModel, FragmentStream

logger = logging.getLogger(__name__)


class OpenRouterFragmentStream(FragmentStream):
    """把 openai 的 AsyncStream 转换为纯文本分片序列。"""

    def __init__(self, stream):
        self._stream = stream
        self.fragment_count = 0

    async def fragments(self) -> AsyncIterator[str]:
        async for chunk in self._stream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                self.fragment_count += 1
                yield content

    async def aclose(self) -> None:
        # 关闭底层 HTTP 响应，放弃尚未读取的上游数据
        await self._stream.close()
        logger.debug(f"上游流已关闭，共读取 {self.fragment_count} 个分片")


class OpenRouterChatAdapter(BaseLanguageModel):
    """
    通过 OpenAI 兼容接口调用 OpenRouter 上的对话模型。
    base_url 和 api_key 由调用方显式传入（通常来自 Settings）。
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "google/gemini-2.0-flash-exp:free",
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 60.0,
        app_referer: Optional[str] = None,
        app_title: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model_name = model_name
        self.base_url = base_url
        self.timeout = timeout

        default_headers = {}
        if app_referer:
            default_headers["HTTP-Referer"] = app_referer
        if app_title:
            default_headers["X-Title"] = app_title

        # 不做重试：任何上游失败都直接反馈给调用方
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers=default_headers or None,
        )

    async def open_stream(self, messages: List[Dict]) -> OpenRouterFragmentStream:
        call_start_time = time.time()
        logger.info(f"开始调用 OpenRouter API: base_url={self.base_url}, model={self.model_name}, timeout={self.timeout}s")

        try:
            stream = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                stream=True,
            )
        except openai.OpenAIError as e:
            call_duration = time.time() - call_start_time
            logger.error(f"OpenRouter 调用建立失败（耗时 {call_duration:.2f}s）: {e}", exc_info=True)
            raise UpstreamError() from e

        logger.info(f"OpenRouter 流已建立，耗时 {time.time() - call_start_time:.2f}s")
        return OpenRouterFragmentStream(stream)

    async def aclose(self) -> None:
        await self.client.close()
