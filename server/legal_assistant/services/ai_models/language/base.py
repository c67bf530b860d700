"""语言模型基类"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List


class FragmentStream(ABC):
    """
    上游返回的文本分片序列

    惰性、有限、只能遍历一次。调用方负责在结束（或客户端断开）时调用 aclose()，
    以便放弃尚未读取的上游响应。
    """

    def __aiter__(self) -> AsyncIterator[str]:
        return self.fragments()

    @abstractmethod
    def fragments(self) -> AsyncIterator[str]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class BaseLanguageModel(ABC):
    """语言模型通用接口"""

    model_name: str = ""

    @abstractmethod
    async def open_stream(self, messages: List[Dict]) -> FragmentStream:
        """
        建立一次流式对话补全调用

        Args:
            messages: OpenAI 格式的消息列表

        Returns:
            文本分片序列

        Raises:
            UpstreamError: 在读取第一个分片之前上游调用失败
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """释放底层连接池（进程关闭时调用）"""
        return None
