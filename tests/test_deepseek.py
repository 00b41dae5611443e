import json

import pytest
import requests
import responses

from fnkit.llm.config import Config, ProviderType
from fnkit.llm.deepseek import DeepSeekClient, DeepSeekFactory, register
from fnkit.llm.manager import Manager, default_manager
from fnkit.llm.types import (
    APIError,
    ChatCompletionRequest,
    LLMError,
    Message,
    RAGContext,
    RetrievedDocument,
)

URL = "https://api.deepseek.com/chat/completions"

OK_BODY = {
    "id": "c1",
    "object": "chat.completion",
    "created": 7,
    "model": "deepseek-chat",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "hello"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
}


def make_config(**overrides):
    values = dict(
        provider=ProviderType.DEEPSEEK,
        api_key="placeholder",
        default_model="deepseek-coder",
        default_temperature=0.1,
        default_max_tokens=2000,
        default_top_p=0.9,
        max_retries=2,
        retry_interval=0.0,
        enable_rag=True,
        max_rag_documents=1,
        rate_limit_rps=60,
    )
    values.update(overrides)
    return Config(**values)


def sent_body(rsps, index=-1):
    return json.loads(rsps.calls[index].request.body)


def test_api_key_required():
    with pytest.raises(ValueError, match="API key is required"):
        DeepSeekClient(Config())


def test_defaults_filled_in():
    client = DeepSeekClient(make_config())
    assert client.config.base_url == "https://api.deepseek.com"
    assert client.config.timeout == 30.0


def test_chat_completion_sends_defaults_and_parses():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config())
        resp = client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))
        assert resp.choices[0].message.content == "hello"
        assert resp.usage.total_tokens == 5
        body = sent_body(rsps)
        assert body["model"] == "deepseek-coder"
        assert body["max_tokens"] == 2000
        assert body["top_p"] == 0.9
        assert body["temperature"] == 0.1
        assert body["messages"] == [{"role": "user", "content": "hi"}]
        assert rsps.calls[0].request.headers["Authorization"] == "Bearer placeholder"
        assert rsps.calls[0].request.headers["Content-Type"] == "application/json"


def test_custom_session_is_used():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config(), session=requests.Session())
        resp = client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))
        assert resp.id == "c1"


def test_retries_server_error_then_succeeds():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, status=500)
        rsps.add(responses.POST, URL, status=429)
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config())
        resp = client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))
        assert resp.choices[0].message.content == "hello"
        assert len(rsps.calls) == 3


def test_max_retries_exceeded():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, status=503)
        client = DeepSeekClient(make_config(max_retries=1))
        with pytest.raises(LLMError, match="max retries exceeded"):
            client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))
        assert len(rsps.calls) == 2


def test_api_error_from_json_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json={"code": 401, "message": "bad key"}, status=400)
        client = DeepSeekClient(make_config())
        with pytest.raises(APIError) as info:
            client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))
    assert info.value.status_code == 400
    assert info.value.message == "bad key"
    assert str(info.value) == "API错误[401]: bad key"


def test_api_error_with_plain_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body="oops", status=400)
        client = DeepSeekClient(make_config())
        with pytest.raises(LLMError, match="API error: status=400, body=oops"):
            client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))


def test_unparsable_success_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, body="not json", status=200)
        client = DeepSeekClient(make_config())
        with pytest.raises(LLMError, match="unmarshal response failed"):
            client.chat_completion(ChatCompletionRequest(messages=[Message(role="user", content="hi")]))


def test_rag_context_prepends_system_message():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config())
        req = ChatCompletionRequest(
            messages=[Message(role="user", content="q")],
            rag_context=RAGContext(
                query="q", retrieved_docs=[RetrievedDocument(content="a"), RetrievedDocument(content="b")]
            ),
        )
        resp = client.chat_completion(req)
        messages = sent_body(rsps)["messages"]
    assert resp.choices[0].message.content == "hello"
    assert messages[0]["role"] == "system"
    assert messages[0]["content"] == "参考文档:\n文档1: a\n\n基于以上文档回答用户问题:"
    assert messages[1] == {"role": "user", "content": "q"}


def test_rag_context_ignored_when_disabled():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config(enable_rag=False))
        req = ChatCompletionRequest(
            messages=[Message(role="user", content="q")],
            rag_context=RAGContext(query="q", retrieved_docs=[RetrievedDocument(content="a")]),
        )
        resp = client.chat_completion(req)
        roles = [m["role"] for m in sent_body(rsps)["messages"]]
    assert resp.usage.total_tokens == 5
    assert roles == ["user"]


def test_prompt_template_replaces_last_user_message():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config())
        req = ChatCompletionRequest(
            messages=[
                Message(role="user", content="first"),
                Message(role="assistant", content="ok"),
                Message(role="user", content="last"),
            ],
            prompt_template="hello {{name}}",
            variables={"name": "world"},
        )
        resp = client.chat_completion(req)
        messages = sent_body(rsps)["messages"]
    assert resp.id == "c1"
    assert messages[0]["content"] == "first"
    assert messages[2]["content"] == "hello world"


def test_client_info():
    client = DeepSeekClient(make_config(base_url="http://localhost:9"))
    info = client.get_client_info()
    assert info.provider == "deepseek"
    assert info.api_endpoint == "http://localhost:9"
    assert info.supported_models == ["deepseek-coder", "deepseek-chat", "deepseek-reasoner"]
    assert info.rate_limit.tokens_per_minute == 100000
    assert info.rate_limit.tokens_per_day == 1000000


def test_health_check_sends_ping():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json=OK_BODY, status=200)
        client = DeepSeekClient(make_config())
        outcome = client.health_check()
        body = sent_body(rsps)
    assert outcome is None
    assert body["messages"] == [{"role": "user", "content": "ping"}]
    assert body["max_tokens"] == 10


def test_health_check_failure():
    client = DeepSeekClient(make_config(max_retries=0, base_url="http://localhost:1"))
    with pytest.raises(LLMError, match="health check failed"):
        client.health_check()


def test_factory():
    factory = DeepSeekFactory()
    client = factory.create_client(make_config())
    assert isinstance(client, DeepSeekClient)
    assert client.config.api_key == "placeholder"
    assert factory.supported_models() == ["deepseek-coder", "deepseek-chat", "deepseek-reasoner"]


def test_register_into_manager():
    manager = Manager()
    assert manager.list_providers() == []
    register(manager)
    assert manager.list_providers() == [ProviderType.DEEPSEEK]


def test_default_manager_has_deepseek():
    assert ProviderType.DEEPSEEK in default_manager().list_providers()