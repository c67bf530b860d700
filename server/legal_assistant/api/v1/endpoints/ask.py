"""问答端点：把问题转发给上游模型并以 SSE 流式返回。"""

import logging
import uuid

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from ....models.schemas.ask import AskRequest, ErrorResponse
from ....services.sse import SSE_HEADERS, SSE_MEDIA_TYPE
from ...dependencies import AskRelayServiceDependency

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/ask",
    summary="流式问答",
    responses={
        200: {"content": {SSE_MEDIA_TYPE: {}}, "description": "chunk 事件流，以 done 事件结束"},
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def ask(payload: AskRequest, request: Request, relay_service: AskRelayServiceDependency):
    """
    校验与上游调用建立都在返回响应之前完成，失败时由异常处理器返回 JSON 错误；
    一旦返回 StreamingResponse，响应即切换为事件流模式。
    """
    request_id = uuid.uuid4().hex[:8]
    client_host = request.client.host if request.client else "unknown"
    logger.info(
        f"[{request_id}] 收到问答请求 (来自 {client_host}): "
        f"question={bool(payload.question)}, imageUrl={bool(payload.image_url)}"
    )

    fragments = await relay_service.open(payload, request_id=request_id)

    return StreamingResponse(
        relay_service.relay_events(
            fragments,
            request_id=request_id,
            is_disconnected=request.is_disconnected,
        ),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
