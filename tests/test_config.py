import pytest

from advisorchat.config import ChatConfig, ConfigError, load_config
from advisorchat.prompts import DEFAULT_SYSTEM_PROMPT


def test_defaults_match_direct_provider_parameters():
    config = ChatConfig()

    assert config.proxy_url is None
    assert config.api_key is None
    assert config.system_prompt == DEFAULT_SYSTEM_PROMPT
    assert config.provider.model == "gpt-4o"
    assert config.provider.max_tokens == 800
    assert config.provider.temperature == 0.7
    assert config.memory.max_questions == 20
    assert config.memory.summary_window == 5


def test_from_file(tmp_path):
    path = tmp_path / "advisor.yaml"
    path.write_text(
        """
proxy_url: https://proxy.test/
greeting: Bonjour!
provider:
  model: gpt-4o-mini
  max_tokens: "400"
memory:
  max_questions: 10
timeout: 5
"""
    )

    config = ChatConfig.from_file(path)

    assert config.name == "advisor"
    assert config.proxy_url == "https://proxy.test/"
    assert config.greeting == "Bonjour!"
    assert config.provider.model == "gpt-4o-mini"
    assert config.provider.max_tokens == 400
    assert config.memory.max_questions == 10
    assert config.memory.summary_window == 5
    assert config.timeout == 5.0


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert ChatConfig.from_file(path).proxy_url is None


def test_non_mapping_root_is_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        ChatConfig.from_file(path)


def test_bad_numbers_are_rejected():
    with pytest.raises(ConfigError):
        ChatConfig.from_mapping({"provider": {"temperature": "warm"}})
    with pytest.raises(ConfigError):
        ChatConfig.from_mapping({"memory": {"max_questions": 0}})


@pytest.mark.parametrize("key", ["proxy_url", "api_key"])
def test_endpoint_settings_must_be_strings(key):
    with pytest.raises(ConfigError, match=key):
        ChatConfig.from_mapping({key: 8080})


def test_numeric_proxy_url_in_file_is_rejected(tmp_path):
    path = tmp_path / "advisor.yaml"
    path.write_text("proxy_url: 8080\n")

    with pytest.raises(ConfigError):
        ChatConfig.from_file(path)


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "advisor.yaml"
    path.write_text("proxy_url: https://file.test/\n")
    environ = {"CF_WORKER_URL": "https://worker.test/", "OPENAI_API_KEY": "sk-env"}

    config = load_config(path, environ=environ)

    assert config.proxy_url == "https://worker.test/"
    assert config.api_key == "sk-env"


def test_proxy_variables_in_priority_order():
    environ = {"CLOUDWORKER_URL": "https://legacy.test/", "ADVISORCHAT_PROXY_URL": "https://primary.test/"}

    assert load_config(environ=environ).proxy_url == "https://primary.test/"
    assert load_config(environ={"CLOUDWORKER_URL": "https://legacy.test/"}).proxy_url == "https://legacy.test/"


def test_describe_masks_credentials():
    config = ChatConfig(api_key="sk-abcdefghijklmnop")

    described = config.describe()

    assert described["api_key"] == "sk-...mnop"
    assert "abcdefghijkl" not in "".join(described.values())
    assert described["endpoint"].startswith("direct ")
