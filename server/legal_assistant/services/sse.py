"""Server-Sent Events 帧编码。"""

import json
from typing import Optional

from pydantic import BaseModel

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # 禁止 nginx 等反向代理缓冲事件流
    "X-Accel-Buffering": "no",
}
SSE_MEDIA_TYPE = "text/event-stream"


def format_sse(payload: BaseModel, event: Optional[str] = None) -> str:
    """把一个事件载荷编码为一帧 SSE 文本（JSON 内不含换行，单行 data 即可）"""
    data = json.dumps(payload.model_dump(), ensure_ascii=False)
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"
