"""应用配置管理"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, ValidationError
from typing import Optional
from pathlib import Path
import os
import yaml
import logging

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# server/ 目录（包含 config/、prompts/、static/）
SERVER_ROOT = Path(__file__).resolve().parent.parent.parent

MISSING_API_KEY_MESSAGE = "FATAL ERROR: OPENROUTER_API_KEY environment variable is not set."


class UpstreamConfig(BaseModel):
    """上游推理服务（OpenRouter，OpenAI 兼容接口）配置"""
    model_config = {"frozen": True}

    BASE_URL: str = "https://openrouter.ai/api/v1"
    MODEL_NAME: str = "google/gemini-2.0-flash-exp:free"
    # 上游调用超时（秒），覆盖建立连接与两次分片之间的等待
    RESPONSE_TIMEOUT: float = 60.0
    # OpenRouter 可选的来源标识请求头
    APP_REFERER: Optional[str] = None
    APP_TITLE: Optional[str] = "Legal AI Assistant"


class RelayConfig(BaseModel):
    """流式转发配置"""
    model_config = {"frozen": True}

    # 提示词配置
    PROMPTS_SCENE: str = "legal_assistant"
    PROMPTS_TEMPLATE: str = "default"
    DEFAULT_IMAGE_PROMPT: str = "What is in this image?"

    # 流开始后出错时，是否在断开前发送 `event: error` 帧
    STREAM_ERROR_EVENTS: bool = False


def _load_yaml_config(config_file: Optional[Path] = None) -> dict:
    """从 YAML 文件加载配置"""
    config_file = config_file or SERVER_ROOT / "config" / "app.yaml"
    if not config_file.exists():
        logger.debug(f"配置文件不存在: {config_file}，使用默认配置")
        return {}
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"成功加载配置文件: {config_file}")
        return config
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"加载 YAML 配置失败: {e}，使用默认配置")
        return {}


def _apply_yaml_config(yaml_config: dict):
    """将 YAML 中的服务器基础配置（HOST / PORT / RELOAD / LOG_LEVEL）作为环境变量默认值

    环境变量优先级高于 YAML。上游与转发相关配置不走环境变量，由 Settings 显式解析。
    """
    server_config = yaml_config.get("server") or {}
    if "host" in server_config:
        os.environ.setdefault("HOST", str(server_config["host"]))
    if "port" in server_config:
        os.environ.setdefault("PORT", str(server_config["port"]))
    if "reload" in server_config:
        os.environ.setdefault("RELOAD", str(server_config["reload"]).lower())
    if "log_level" in server_config:
        os.environ.setdefault("LOG_LEVEL", str(server_config["log_level"]))


def _upstream_from_yaml(up_cfg: dict) -> UpstreamConfig:
    defaults = UpstreamConfig()
    return UpstreamConfig(
        BASE_URL=str(up_cfg.get("base_url", defaults.BASE_URL)),
        MODEL_NAME=str(up_cfg.get("model_name", defaults.MODEL_NAME)),
        RESPONSE_TIMEOUT=float(up_cfg.get("response_timeout", defaults.RESPONSE_TIMEOUT)),
        APP_REFERER=up_cfg.get("app_referer", defaults.APP_REFERER),
        APP_TITLE=up_cfg.get("app_title", defaults.APP_TITLE),
    )


def _relay_from_yaml(relay_cfg: dict) -> RelayConfig:
    defaults = RelayConfig()
    prompts_cfg = relay_cfg.get("prompts", {}) or {}
    return RelayConfig(
        PROMPTS_SCENE=str(prompts_cfg.get("scene", defaults.PROMPTS_SCENE)),
        PROMPTS_TEMPLATE=str(prompts_cfg.get("template", defaults.PROMPTS_TEMPLATE)),
        DEFAULT_IMAGE_PROMPT=str(
            relay_cfg.get("default_image_prompt", defaults.DEFAULT_IMAGE_PROMPT)
        ),
        STREAM_ERROR_EVENTS=bool(
            relay_cfg.get("stream_error_events", defaults.STREAM_ERROR_EVENTS)
        ),
    )


class Settings(BaseSettings):
    """应用主配置（进程生命周期内只读）"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app_name: str = "Legal AI Assistant"
    version: str = "0.1.0"

    # 上游凭据（必填）
    openrouter_api_key: str = Field(..., min_length=1)

    # 上游与转发配置
    upstream: UpstreamConfig = UpstreamConfig()
    relay: RelayConfig = RelayConfig()

    # 服务器配置
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    log_level: str = "INFO"

    # 静态页面与提示词目录
    static_dir: Path = SERVER_ROOT / "static"
    prompts_dir: Path = SERVER_ROOT / "prompts"


def load_settings(config_file: Optional[Path] = None, **overrides) -> Settings:
    """
    构建进程配置

    先加载 app.yaml（服务器基础配置作为环境变量默认值，上游/转发配置显式解析），
    再由 pydantic-settings 读取环境变量与 .env。

    Raises:
        ConfigurationError: 未配置 OPENROUTER_API_KEY 或配置非法
    """
    yaml_config = _load_yaml_config(config_file)
    if yaml_config:
        _apply_yaml_config(yaml_config)
        if yaml_config.get("upstream") and "upstream" not in overrides:
            overrides["upstream"] = _upstream_from_yaml(yaml_config["upstream"])
        if yaml_config.get("relay") and "relay" not in overrides:
            overrides["relay"] = _relay_from_yaml(yaml_config["relay"])

    try:
        return Settings(**overrides)
    except ValidationError as e:
        if any(err["loc"] == ("openrouter_api_key",) for err in e.errors()):
            raise ConfigurationError(MISSING_API_KEY_MESSAGE) from e
        raise ConfigurationError(f"配置非法: {e}") from e
