"""健康检查端点。"""

from fastapi import APIRouter
from datetime import datetime

from ...dependencies import SettingsDependency

router = APIRouter()


@router.get("/health", summary="健康检查")
async def health_check(settings: SettingsDependency) -> dict:
    """健康检查端点，用于测试服务器连接。"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": settings.app_name,
        "version": settings.version,
        "model": settings.upstream.MODEL_NAME,
    }
