"""One-call chat helpers that return plain text or decoded JSON."""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from fnkit.llm.config import ProviderType
from fnkit.llm.manager import get_client
from fnkit.llm.requests import JSON_OBJECT, new_chat_request, new_system_message, new_user_message
from fnkit.llm.types import ChatCompletionRequest, LLMError, ResponseFormat

__all__ = [
    "chat_with_result",
    "chat_with_json_result",
    "chat_with_string_result",
    "chat_with_custom_prompt",
]

_EMPTY_JSON_REPLY = "响应内容为空，这是DeepSeek JSON模式的已知问题，请尝试调整prompt"


def _complete(provider: ProviderType | str, req: ChatCompletionRequest) -> str:
    try:
        client = get_client(provider)
    except LLMError as exc:
        raise LLMError(f"获取客户端失败: {exc}") from exc
    try:
        resp = client.chat_completion(req)
    except Exception as exc:
        raise LLMError(f"请求失败: {exc}") from exc
    if not resp.choices:
        raise LLMError("没有响应结果")
    return resp.choices[0].message.content


def _decode(content: str, *, verbose: bool = False) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        if verbose:
            raise LLMError(f"JSON反序列化失败，原始内容: {content}, 错误: {exc}") from exc
        raise LLMError(f"JSON反序列化失败: {exc}") from exc


def _convert(value: Any, result_type: Any) -> Any:
    if result_type is Any or result_type is object:
        return value
    if dataclasses.is_dataclass(result_type) and isinstance(result_type, type):
        if not isinstance(value, dict):
            raise LLMError(f"JSON反序列化失败: expected an object for {result_type.__name__}")
        known = {f.name for f in dataclasses.fields(result_type) if f.init}
        return result_type(**{key: item for key, item in value.items() if key in known})
    if isinstance(value, result_type):
        return value
    raise LLMError(f"JSON反序列化失败: cannot convert {type(value).__name__} to {result_type.__name__}")


def _json_request(system_prompt: str, user_message: str) -> ChatCompletionRequest:
    return ChatCompletionRequest(
        messages=[new_system_message(system_prompt), new_user_message(user_message)],
        response_format=ResponseFormat(type=JSON_OBJECT),
        temperature=0.1,
    )


def chat_with_result(provider: ProviderType | str, user_message: str, result_type: Any = str) -> Any:
    """Ask ``user_message``; return text for ``str``, otherwise decoded JSON as ``result_type``."""
    if result_type is str:
        return _complete(provider, new_chat_request("", new_user_message(user_message)))
    system_prompt = f"请以JSON格式返回响应。用户输入：{user_message}\n\n要求：返回有效的JSON格式数据。"
    content = _complete(provider, _json_request(system_prompt, user_message))
    return _convert(_decode(content), result_type)


def chat_with_json_result(provider: ProviderType | str, user_message: str) -> Any:
    """Ask ``user_message`` in JSON mode and return the decoded reply."""
    system_prompt = (
        f"请严格按照JSON格式返回响应。用户请求：{user_message}\n\n"
        "要求：\n1. 必须返回有效的JSON格式\n2. 确保JSON结构完整\n3. 不要包含其他文本"
    )
    content = _complete(provider, _json_request(system_prompt, user_message))
    if not content:
        raise LLMError(_EMPTY_JSON_REPLY)
    return _decode(content, verbose=True)


def chat_with_string_result(provider: ProviderType | str, user_message: str) -> str:
    """Ask ``user_message`` and return the reply text."""
    return _complete(provider, new_chat_request("", new_user_message(user_message)))


def chat_with_custom_prompt(
    provider: ProviderType | str, system_prompt: str, user_message: str, use_json: bool = False
) -> Any:
    """Ask with a custom system prompt; return decoded JSON if ``use_json``, else text."""
    req = ChatCompletionRequest(
        messages=[new_system_message(system_prompt), new_user_message(user_message)],
        temperature=0.1,
    )
    if use_json:
        req.response_format = ResponseFormat(type=JSON_OBJECT)
    content = _complete(provider, req)
    return _decode(content) if use_json else content