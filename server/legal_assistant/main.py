import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .api.v1.endpoints import ask, health, pages
from .core.config import Settings, load_settings
from .core.logging_config import setup_logging
from .core.middleware import setup_middleware
from .services.ai_models.language import BaseLanguageModel, OpenRouterChatAdapter, PromptWrapper
from .services.ai_models.language.prompts import PromptsManager
from .services.relay_service import AskRelayService

logger = logging.getLogger(__name__)


def _build_relay_service(settings: Settings, language_model: Optional[BaseLanguageModel]) -> AskRelayService:
  """根据配置组装转发服务（配置显式传入，不读取全局状态）。"""
  prompt_wrapper = PromptWrapper(
      prompts_manager=PromptsManager(settings.prompts_dir),
      prompts_scene=settings.relay.PROMPTS_SCENE,
      prompts_template=settings.relay.PROMPTS_TEMPLATE,
      default_image_prompt=settings.relay.DEFAULT_IMAGE_PROMPT,
  )
  language_model = language_model or OpenRouterChatAdapter(
      api_key=settings.openrouter_api_key,
      model_name=settings.upstream.MODEL_NAME,
      base_url=settings.upstream.BASE_URL,
      timeout=settings.upstream.RESPONSE_TIMEOUT,
      app_referer=settings.upstream.APP_REFERER,
      app_title=settings.upstream.APP_TITLE,
  )
  return AskRelayService(
      language_model=language_model,
      prompt_wrapper=prompt_wrapper,
      stream_error_events=settings.relay.STREAM_ERROR_EVENTS,
  )


@asynccontextmanager
async def lifespan(app: FastAPI):
  settings: Settings = app.state.settings

  print("\n" + "=" * 60)
  print("📋 服务器信息")
  print("=" * 60)
  print(f"   服务名称: {settings.app_name}")
  print(f"   版本: {settings.version}")
  print(f"   地址: http://localhost:{settings.port}")
  print(f"   上游模型: {settings.upstream.MODEL_NAME}")
  print(f"   问答端点: POST http://localhost:{settings.port}/ask")
  print(f"   HTTP 健康检查: http://localhost:{settings.port}/api/v1/health")
  print("=" * 60)
  print("✅ Legal AI Assistant 已就绪\n")
  logger.info(f"服务器启动完成: port={settings.port}, model={settings.upstream.MODEL_NAME}")

  yield

  # 关闭时的清理
  print("\n🛑 服务器正在关闭...")
  logger.info("服务器正在关闭，清理资源...")
  await app.state.relay_service.language_model.aclose()
  logger.info("服务器关闭完成")


def create_app(
    settings: Optional[Settings] = None,
    language_model: Optional[BaseLanguageModel] = None,
) -> FastAPI:
  """
  FastAPI 应用工厂。

  未配置 OPENROUTER_API_KEY 时 load_settings() 抛出 ConfigurationError，进程拒绝启动。
  """
  settings = settings or load_settings()
  setup_logging(settings.log_level)

  app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
  app.state.settings = settings
  app.state.relay_service = _build_relay_service(settings, language_model)

  # 配置中间件（CORS、JSON 错误处理）
  setup_middleware(app)

  # HTTP 路由注册
  app.include_router(pages.router)
  app.include_router(ask.router)
  app.include_router(health.router, prefix="/api/v1")

  return app


app = create_app()


def run() -> None:
  """命令行入口：python -m legal_assistant 或 legal-assistant。"""
  settings: Settings = app.state.settings
  uvicorn.run(
      "legal_assistant.main:app",
      host=settings.host,
      port=settings.port,
      reload=settings.reload,
      log_level=settings.log_level.lower(),
  )
