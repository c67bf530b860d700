from typing import Annotated

from fastapi import Depends, Request

from ..core.config import Settings
from ..services.relay_service import AskRelayService


# =============================================================================
# CONFIG DEPENDENCIES
# =============================================================================

def get_settings(request: Request) -> Settings:
    """进程启动时构建的只读配置，保存在 app.state 上。"""
    return request.app.state.settings


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_relay_service(request: Request) -> AskRelayService:
    """所有请求共享的转发服务实例，在 create_app 中组装。"""
    return request.app.state.relay_service


# =============================================================================
# TYPE ALIASES FOR DEPENDENCY INJECTION
# =============================================================================

SettingsDependency = Annotated[Settings, Depends(get_settings)]
AskRelayServiceDependency = Annotated[AskRelayService, Depends(get_relay_service)]
