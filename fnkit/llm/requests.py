"""Builders for chat messages and common kinds of chat completion requests."""

from __future__ import annotations

from fnkit.llm.types import ChatCompletionRequest, Message, ResponseFormat

__all__ = [
    "new_message",
    "new_user_message",
    "new_system_message",
    "new_assistant_message",
    "new_chat_request",
    "new_json_request",
    "new_code_gen_request",
    "new_structured_request",
]

JSON_OBJECT = "json_object"
_JSON_TEMPERATURE = 0.1

_CODE_GEN_PROMPT = """你是一个专业的Go语言代码生成器。请根据用户需求生成完整的Go代码。

要求：
1. 返回的代码必须是有效的JSON格式
2. JSON结构如下：
{
  "code": "完整的Go代码内容",
  "filename": "建议的文件名",
  "description": "代码功能描述",
  "dependencies": ["依赖包列表"]
}

请确保生成的代码符合Go语言规范，包含必要的import语句和错误处理。"""

_STRUCTURED_PROMPT = "请根据用户要求返回结构化的JSON数据。严格按照指定的JSON格式返回。"


def new_message(role: str, content: str) -> Message:
    return Message(role=role, content=content)


def new_user_message(content: str) -> Message:
    return new_message("user", content)


def new_system_message(content: str) -> Message:
    return new_message("system", content)


def new_assistant_message(content: str) -> Message:
    return new_message("assistant", content)


def new_chat_request(model: str, *messages: Message) -> ChatCompletionRequest:
    """A plain request for ``model`` carrying ``messages``."""
    return ChatCompletionRequest(model=model, messages=list(messages))


def new_json_request(model: str, *messages: Message) -> ChatCompletionRequest:
    """A request that asks for a JSON object in reply."""
    return ChatCompletionRequest(
        model=model,
        messages=list(messages),
        response_format=ResponseFormat(type=JSON_OBJECT),
    )


def new_code_gen_request(model: str, user_request: str) -> ChatCompletionRequest:
    """A JSON-mode request asking for generated code described by ``user_request``."""
    return ChatCompletionRequest(
        model=model,
        messages=[new_system_message(_CODE_GEN_PROMPT), new_user_message(user_request)],
        response_format=ResponseFormat(type=JSON_OBJECT),
        temperature=_JSON_TEMPERATURE,
    )


def new_structured_request(model: str, user_query: str, json_schema: str = "") -> ChatCompletionRequest:
    """A JSON-mode request for structured data, optionally following ``json_schema``."""
    system_prompt = _STRUCTURED_PROMPT
    if json_schema:
        system_prompt += "\n\nJSON格式要求：\n" + json_schema
    return ChatCompletionRequest(
        model=model,
        messages=[new_system_message(system_prompt), new_user_message(user_query)],
        response_format=ResponseFormat(type=JSON_OBJECT, schema=json_schema),
        temperature=_JSON_TEMPERATURE,
    )