"""Request, response and metadata types for chat-completion clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

__all__ = [
    "LLMError",
    "APIError",
    "Message",
    "ResponseFormat",
    "FunctionCall",
    "ToolCall",
    "ToolFunction",
    "Tool",
    "RetrievedDocument",
    "RAGContext",
    "ChatCompletionRequest",
    "Usage",
    "Choice",
    "ChatCompletionResponse",
    "RateLimit",
    "ClientInfo",
    "StreamChoice",
    "StreamResponse",
    "TemplateVar",
    "TemplateExample",
    "PromptTemplate",
]


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string")
    return value


def _int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"field {key!r} must be an integer")
    return value


def _dict(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError("expected a JSON object")
    return data


class LLMError(Exception):
    """Base error for language-model client failures."""


class APIError(LLMError):
    """An error reported by a model provider's API."""

    def __init__(
        self,
        code: int = 0,
        message: str = "",
        error_type: str = "",
        param: str = "",
        details: str = "",
        status_code: int = 0,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.param = param
        self.details = details
        self.status_code = status_code
        super().__init__(str(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any], status_code: int = 0) -> APIError:
        data = _dict(data)
        return cls(
            code=_int(data, "code"),
            message=_str(data, "message"),
            error_type=_str(data, "type"),
            param=_str(data, "param"),
            details=_str(data, "details"),
            status_code=status_code,
        )

    def __str__(self) -> str:
        if self.details:
            return f"API错误[{self.code}]: {self.message} - {self.details}"
        return f"API错误[{self.code}]: {self.message}"


@dataclass
class FunctionCall:
    name: str = ""
    arguments: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> FunctionCall:
        data = _dict(data)
        return cls(name=_str(data, "name"), arguments=_str(data, "arguments"))


@dataclass
class ToolCall:
    id: str = ""
    type: str = "function"
    function: FunctionCall = field(default_factory=FunctionCall)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ToolCall:
        data = _dict(data)
        return cls(
            id=_str(data, "id"),
            type=_str(data, "type"),
            function=FunctionCall.from_dict(data.get("function")),
        )


@dataclass
class Message:
    """One chat message: role is system, user, assistant or tool."""

    role: str = ""
    content: str = ""
    name: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.name:
            out["name"] = self.name
        if self.tool_calls:
            out["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.tool_call_id:
            out["tool_call_id"] = self.tool_call_id
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Message:
        data = _dict(data)
        return cls(
            role=_str(data, "role"),
            content=_str(data, "content"),
            name=_str(data, "name"),
            tool_calls=[ToolCall.from_dict(item) for item in data.get("tool_calls") or []],
            tool_call_id=_str(data, "tool_call_id"),
        )


@dataclass
class ResponseFormat:
    """Response format control: type is ``text`` or ``json_object``."""

    type: str = "text"
    schema: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.schema:
            out["schema"] = self.schema
        return out


@dataclass
class ToolFunction:
    name: str = ""
    description: str = ""
    parameters: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "parameters": self.parameters}


@dataclass
class Tool:
    type: str = "function"
    function: ToolFunction = field(default_factory=ToolFunction)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "function": self.function.to_dict()}


@dataclass
class RetrievedDocument:
    id: str = ""
    content: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "metadata": dict(self.metadata), "score": self.score}


@dataclass
class RAGContext:
    query: str = ""
    retrieved_docs: list[RetrievedDocument] = field(default_factory=list)
    max_documents: int = 0
    similarity_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "retrieved_docs": [doc.to_dict() for doc in self.retrieved_docs],
            "max_documents": self.max_documents,
            "similarity_score": self.similarity_score,
        }


@dataclass
class ChatCompletionRequest:
    """A provider-neutral chat completion request."""

    model: str = ""
    messages: list[Message] = field(default_factory=list)
    temperature: float = 0.0
    max_tokens: int = 0
    top_p: float = 0.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    stream: bool = False
    stop: list[str] = field(default_factory=list)
    response_format: ResponseFormat | None = None
    tools: list[Tool] = field(default_factory=list)
    tool_choice: str = ""
    rag_context: RAGContext | None = None
    prompt_template: str = ""
    variables: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """The JSON body, leaving out fields that hold their zero value."""
        out: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
        }
        optional: dict[str, Any] = {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "stream": self.stream,
            "stop": list(self.stop),
            "response_format": self.response_format.to_dict() if self.response_format else None,
            "tools": [tool.to_dict() for tool in self.tools],
            "tool_choice": self.tool_choice,
            "rag_context": self.rag_context.to_dict() if self.rag_context is not None else None,
            "prompt_template": self.prompt_template,
            "variables": dict(self.variables) if self.variables else None,
        }
        out.update({key: value for key, value in optional.items() if value})
        return out


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Usage:
        data = _dict(data)
        return cls(
            prompt_tokens=_int(data, "prompt_tokens"),
            completion_tokens=_int(data, "completion_tokens"),
            total_tokens=_int(data, "total_tokens"),
        )


@dataclass
class Choice:
    index: int = 0
    message: Message = field(default_factory=Message)
    delta: Message | None = None
    finish_reason: str = ""
    logprobs: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Choice:
        data = _dict(data)
        delta = data.get("delta")
        return cls(
            index=_int(data, "index"),
            message=Message.from_dict(data.get("message")),
            delta=Message.from_dict(delta) if delta is not None else None,
            finish_reason=_str(data, "finish_reason"),
            logprobs=data.get("logprobs"),
        )


@dataclass
class ChatCompletionResponse:
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[Choice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    system_fingerprint: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatCompletionResponse:
        data = _dict(data)
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[Choice.from_dict(item) for item in data.get("choices") or []],
            usage=Usage.from_dict(data.get("usage")),
            system_fingerprint=_str(data, "system_fingerprint"),
        )


@dataclass
class RateLimit:
    requests_per_minute: int = 0
    tokens_per_minute: int = 0
    tokens_per_day: int = 0


@dataclass
class ClientInfo:
    provider: str = ""
    version: str = ""
    supported_models: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    api_endpoint: str = ""
    rate_limit: RateLimit = field(default_factory=RateLimit)


@dataclass
class StreamChoice:
    index: int = 0
    delta: Message = field(default_factory=Message)
    finish_reason: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> StreamChoice:
        data = _dict(data)
        return cls(
            index=_int(data, "index"),
            delta=Message.from_dict(data.get("delta")),
            finish_reason=_str(data, "finish_reason"),
        )


@dataclass
class StreamResponse:
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[StreamChoice] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamResponse:
        data = _dict(data)
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[StreamChoice.from_dict(item) for item in data.get("choices") or []],
        )


@dataclass
class TemplateVar:
    name: str = ""
    type: str = "string"
    required: bool = False
    description: str = ""
    default_value: str = ""


@dataclass
class TemplateExample:
    description: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    expected: str = ""


@dataclass
class PromptTemplate:
    name: str = ""
    description: str = ""
    template: str = ""
    variables: list[TemplateVar] = field(default_factory=list)
    examples: list[TemplateExample] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None