import pytest

from fnkit.llm.config import (
    ClaudeConfig,
    Config,
    ProviderType,
    get_default_config,
    get_json_config,
)


def _valid():
    return get_default_config(ProviderType.DEEPSEEK).with_api_key("placeholder")


def test_deepseek_defaults():
    config = get_default_config(ProviderType.DEEPSEEK)
    assert config.base_url == "https://api.deepseek.com"
    assert config.default_model == "deepseek-coder"
    assert config.default_max_tokens == 2000
    assert config.enable_json_mode is False


def test_unknown_provider_falls_back_to_deepseek():
    assert get_default_config(ProviderType.QWEN) == get_default_config(ProviderType.DEEPSEEK)
    assert get_default_config("openai").default_model == "gpt-4"


def test_default_config_is_a_copy():
    first = get_default_config(ProviderType.OPENAI)
    first.default_model = "changed"
    assert get_default_config(ProviderType.OPENAI).default_model == "gpt-4"


def test_json_config():
    config = get_json_config(ProviderType.CLAUDE)
    assert config.enable_json_mode is True
    assert config.default_temperature == 0.1
    assert config.default_model == get_default_config(ProviderType.CLAUDE).default_model


@pytest.mark.parametrize(
    "change, message",
    [
        ({"api_key": ""}, "API key is required"),
        ({"base_url": ""}, "base URL is required"),
        ({"timeout": 0}, "timeout must be positive"),
        ({"default_max_tokens": 0}, "default max tokens must be positive"),
        ({"default_temperature": 2.5}, "temperature must be between 0 and 2"),
        ({"default_top_p": -0.1}, "top_p must be between 0 and 1"),
    ],
)
def test_validate_errors(change, message):
    config = _valid()
    for key, value in change.items():
        setattr(config, key, value)
    with pytest.raises(ValueError, match=message):
        config.validate()


def test_valid_config_passes_and_clone_is_independent():
    config = _valid()
    config.validate()
    copy = config.clone()
    copy.api_key = "token"
    assert config.api_key == "placeholder"
    assert copy == Config(**{**vars(config), "api_key": "token"})


def test_value_setters_mutate_and_return_copies():
    config = get_default_config(ProviderType.DEEPSEEK)
    returned = config.with_model("deepseek-chat")
    assert config.default_model == "deepseek-chat"
    assert returned == config and returned is not config
    json_copy = config.with_json_mode()
    assert config.enable_json_mode and json_copy.default_temperature == 0.1


def test_pointer_setters_return_self():
    config = get_default_config(ProviderType.DEEPSEEK)
    assert config.with_max_tokens(64) is config
    assert config.with_timeout(5.0) is config
    assert config.with_rag(3, 0.5) is config
    assert (config.default_max_tokens, config.timeout) == (64, 5.0)
    assert (config.enable_rag, config.max_rag_documents, config.rag_similarity_min) == (True, 3, 0.5)


def test_subclass_keeps_extra_fields_on_clone():
    config = ClaudeConfig(provider=ProviderType.CLAUDE, anthropic_version="2023-06-01")
    copy = config.with_temperature(0.3)
    assert isinstance(copy, ClaudeConfig)
    assert copy.anthropic_version == "2023-06-01"