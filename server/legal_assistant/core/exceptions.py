"""转发服务异常定义。"""

from typing import Optional


class ConfigurationError(RuntimeError):
    """启动配置缺失或非法，进程拒绝启动。"""


class RelayError(Exception):
    """流开始之前可以以 JSON 错误体返回给客户端的异常。"""

    status_code: int = 500
    message: str = "An internal server error occurred."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(RelayError):
    status_code = 400
    message = "Question or Image URL is required."


class UpstreamError(RelayError):
    """上游调用建立失败（鉴权、网络、超时等不做区分）。"""

    status_code = 502
    message = "Failed to reach the language model provider."
