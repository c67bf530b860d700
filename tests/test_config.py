import pytest
from pydantic import ValidationError

from legal_assistant.core.config import MISSING_API_KEY_MESSAGE, Settings, load_settings
from legal_assistant.core.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # load_settings 会对 YAML 中的服务器配置调用 os.environ.setdefault；
    # 先 setenv 再 delenv，teardown 时这些变量会被恢复到测试前的状态
    for name in ("OPENROUTER_API_KEY", "PORT", "HOST", "RELOAD", "LOG_LEVEL"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    # 避免读到工作目录下的 .env
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_missing_api_key_refuses_to_start(clean_env, tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(config_file=tmp_path / "absent.yaml")
    assert str(exc_info.value) == MISSING_API_KEY_MESSAGE


def test_empty_api_key_refuses_to_start(clean_env, tmp_path):
    clean_env.setenv("OPENROUTER_API_KEY", "")

    with pytest.raises(ConfigurationError):
        load_settings(config_file=tmp_path / "absent.yaml")


def test_defaults(clean_env, tmp_path):
    clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")

    settings = load_settings(config_file=tmp_path / "absent.yaml")

    assert settings.openrouter_api_key == "sk-or-test"
    assert settings.port == 3000
    assert settings.upstream.MODEL_NAME == "google/gemini-2.0-flash-exp:free"
    assert settings.upstream.BASE_URL == "https://openrouter.ai/api/v1"
    assert settings.relay.DEFAULT_IMAGE_PROMPT == "What is in this image?"
    assert settings.relay.STREAM_ERROR_EVENTS is False


def test_port_from_environment(clean_env, tmp_path):
    clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")
    clean_env.setenv("PORT", "8080")

    assert load_settings(config_file=tmp_path / "absent.yaml").port == 8080


def test_yaml_sections_are_applied(clean_env, tmp_path):
    clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")
    config_file = tmp_path / "app.yaml"
    config_file.write_text(
        "server:\n"
        "  port: 4000\n"
        "upstream:\n"
        "  model_name: vendor/other-model\n"
        "  response_timeout: 15\n"
        "relay:\n"
        "  stream_error_events: true\n"
        "  prompts:\n"
        "    template: brief\n",
        encoding="utf-8",
    )

    settings = load_settings(config_file=config_file)

    assert settings.port == 4000
    assert settings.upstream.MODEL_NAME == "vendor/other-model"
    assert settings.upstream.RESPONSE_TIMEOUT == 15.0
    assert settings.relay.STREAM_ERROR_EVENTS is True
    assert settings.relay.PROMPTS_TEMPLATE == "brief"
    assert settings.relay.PROMPTS_SCENE == "legal_assistant"


def test_environment_wins_over_yaml(clean_env, tmp_path):
    clean_env.setenv("OPENROUTER_API_KEY", "sk-or-test")
    clean_env.setenv("PORT", "5050")
    config_file = tmp_path / "app.yaml"
    config_file.write_text("server:\n  port: 4000\n", encoding="utf-8")

    assert load_settings(config_file=config_file).port == 5050


def test_settings_are_immutable():
    settings = Settings(openrouter_api_key="k")

    with pytest.raises(ValidationError):
        settings.port = 1234
