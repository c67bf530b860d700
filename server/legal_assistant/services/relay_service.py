"""
流式转发服务层
校验问题、构建上游消息、建立上游流，并把文本分片逐个转换为 SSE 事件
"""

import asyncio
import logging
import time
from typing import AsyncGenerator, Awaitable, Callable, Optional

import anyio

from ..core.exceptions import RelayError, UpstreamError, ValidationFailed
from ..models.schemas.ask import AskRequest, ChunkEvent, DoneEvent, ErrorEvent
from .ai_models.language.base import BaseLanguageModel, FragmentStream
from .ai_models.language.prompt_wrapper import PromptWrapper
from .sse import format_sse

logger = logging.getLogger(__name__)

STREAM_ERROR_MESSAGE = "The response stream was interrupted."


class AskRelayService:
    """问答流式转发服务（无状态，可被所有请求共享）"""

    def __init__(
        self,
        language_model: BaseLanguageModel,
        prompt_wrapper: PromptWrapper,
        stream_error_events: bool = False,
    ):
        """
        初始化转发服务

        Args:
            language_model: 上游语言模型适配器
            prompt_wrapper: 消息构建器
            stream_error_events: 流开始后出错时是否先发送 error 事件再断开
        """
        self.language_model = language_model
        self.prompt_wrapper = prompt_wrapper
        self.stream_error_events = stream_error_events
        logger.info(f"转发服务初始化完成 (model={language_model.model_name})")

    async def open(self, request: AskRequest, request_id: str = "-") -> FragmentStream:
        """
        校验请求并建立上游流（进入事件流模式之前的全部工作）

        Raises:
            ValidationFailed: question 与 imageUrl 均为空，不会发起上游调用
            UpstreamError: 上游调用建立失败
        """
        if not request.has_input:
            raise ValidationFailed()

        messages = self.prompt_wrapper.build_messages(request)
        logger.info(f"[{request_id}] 构建上游消息: kind={messages.kind}")

        try:
            return await self.language_model.open_stream(messages.to_openai())
        except RelayError:
            raise
        except Exception as e:
            logger.error(f"[{request_id}] 上游调用建立失败: {e}", exc_info=True)
            raise UpstreamError() from e

    async def relay_events(
        self,
        fragments: FragmentStream,
        request_id: str = "-",
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncGenerator[str, None]:
        """
        把上游分片按到达顺序逐个转换为 SSE 帧

        正常结束时追加 done 事件；中途出错则记录日志并结束（可选先发送 error 事件），
        不会再发送 done。无论何种结束方式都会关闭上游流。

        Yields:
            SSE 帧文本
        """
        start_time = time.time()
        count = 0
        try:
            async for fragment in fragments:
                if is_disconnected is not None and await is_disconnected():
                    logger.info(f"[{request_id}] 客户端已断开，放弃上游流（已转发 {count} 个分片）")
                    return
                count += 1
                yield format_sse(ChunkEvent(chunk=fragment))

            yield format_sse(DoneEvent())
            logger.info(f"[{request_id}] 转发完成: {count} 个分片，耗时 {time.time() - start_time:.2f}s")
        except asyncio.CancelledError:
            logger.info(f"[{request_id}] 转发被取消（已转发 {count} 个分片）")
            raise
        except Exception as e:
            logger.error(f"[{request_id}] 流式转发中断（已转发 {count} 个分片）: {e}", exc_info=True)
            if self.stream_error_events:
                yield format_sse(ErrorEvent(error=STREAM_ERROR_MESSAGE), event="error")
        finally:
            # 断开时 Starlette 会取消整个任务组，关闭上游必须在屏蔽取消的作用域内完成
            with anyio.CancelScope(shield=True):
                await fragments.aclose()
