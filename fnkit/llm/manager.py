"""Client interfaces and a registry that builds and looks up clients by provider."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from enum import Enum

from fnkit.llm.config import Config, ProviderType
from fnkit.llm.requests import new_code_gen_request, new_json_request, new_structured_request, new_user_message
from fnkit.llm.types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ClientInfo,
    LLMError,
    Message,
    PromptTemplate,
    RAGContext,
    RetrievedDocument,
)

__all__ = [
    "LLMClient",
    "LLMClientFactory",
    "RAGProvider",
    "PromptManager",
    "Manager",
    "default_manager",
    "create_client",
    "get_client",
    "get_or_create_client",
    "quick_chat",
    "quick_chat_with_template",
    "quick_chat_with_rag",
    "quick_json_chat",
    "generate_code",
    "generate_structured_data",
]


def _name(provider: ProviderType | str) -> str:
    return provider.value if isinstance(provider, Enum) else str(provider)


class LLMClient(ABC):
    """A chat-completion client for one provider."""

    @abstractmethod
    def chat_completion(self, req: ChatCompletionRequest) -> ChatCompletionResponse:
        """Send ``req`` and return the provider's reply."""

    @abstractmethod
    def get_client_info(self) -> ClientInfo:
        """Describe the client and what it supports."""

    @abstractmethod
    def health_check(self) -> None:
        """Raise if the provider cannot be reached."""


class LLMClientFactory(ABC):
    """Builds clients for one provider."""

    @abstractmethod
    def create_client(self, config: Config) -> LLMClient:
        """Build a client from ``config``."""

    @abstractmethod
    def supported_models(self) -> list[str]:
        """Names of the models the provider offers."""


class RAGProvider(ABC):
    """Retrieves documents and builds retrieval-augmented prompts."""

    @abstractmethod
    def retrieve_documents(self, query: str, max_docs: int, min_score: float) -> list[RetrievedDocument]:
        """Documents relevant to ``query``."""

    @abstractmethod
    def build_rag_prompt(self, user_query: str, docs: list[RetrievedDocument], template: str) -> str:
        """A prompt combining ``user_query`` with ``docs``."""


class PromptManager(ABC):
    """Stores and renders prompt templates."""

    @abstractmethod
    def get_template(self, name: str) -> PromptTemplate:
        """The template called ``name``."""

    @abstractmethod
    def render_template(self, template: str, variables: dict[str, str]) -> str:
        """``template`` with ``variables`` filled in."""

    @abstractmethod
    def save_template(self, template: PromptTemplate) -> None:
        """Store ``template``."""


class Manager:
    """Registry of client factories and the clients built from them."""

    def __init__(self) -> None:
        self._clients: dict[ProviderType | str, LLMClient] = {}
        self._factories: dict[ProviderType | str, LLMClientFactory] = {}
        self._lock = threading.RLock()

    def register_factory(self, provider: ProviderType | str, factory: LLMClientFactory) -> None:
        with self._lock:
            self._factories[provider] = factory

    def create_client(self, config: Config) -> LLMClient:
        """Validate ``config``, build a client for its provider and keep it."""
        with self._lock:
            try:
                config.validate()
            except ValueError as exc:
                raise ValueError(f"invalid config: {exc}") from exc
            factory = self._factories.get(config.provider)
            if factory is None:
                raise LLMError(f"unsupported provider: {_name(config.provider)}")
            try:
                client = factory.create_client(config)
            except Exception as exc:
                raise LLMError(f"create client failed: {exc}") from exc
            self._clients[config.provider] = client
            return client

    def get_client(self, provider: ProviderType | str) -> LLMClient:
        with self._lock:
            client = self._clients.get(provider)
        if client is None:
            raise LLMError(f"client not found for provider: {_name(provider)}")
        return client

    def get_or_create_client(self, config: Config) -> LLMClient:
        try:
            return self.get_client(config.provider)
        except LLMError:
            return self.create_client(config)

    def _first_content(self, provider: ProviderType | str, req: ChatCompletionRequest) -> str:
        client = self.get_client(provider)
        resp = client.chat_completion(req)
        if not resp.choices:
            raise LLMError("no response choices")
        return resp.choices[0].message.content

    def quick_chat(self, provider: ProviderType | str, user_message: str) -> str:
        req = ChatCompletionRequest(messages=[Message(role="user", content=user_message)])
        return self._first_content(provider, req)

    def quick_chat_with_template(
        self, provider: ProviderType | str, template: str, variables: dict[str, str]
    ) -> str:
        req = ChatCompletionRequest(
            messages=[Message(role="user", content="请根据模板生成内容")],
            prompt_template=template,
            variables=variables,
        )
        return self._first_content(provider, req)

    def quick_chat_with_rag(
        self, provider: ProviderType | str, query: str, docs: list[RetrievedDocument]
    ) -> str:
        req = ChatCompletionRequest(
            messages=[Message(role="user", content=query)],
            rag_context=RAGContext(query=query, retrieved_docs=list(docs)),
        )
        return self._first_content(provider, req)

    def quick_json_chat(self, provider: ProviderType | str, user_message: str) -> str:
        return self._first_content(provider, new_json_request("", new_user_message(user_message)))

    def generate_code(self, provider: ProviderType | str, user_request: str) -> str:
        return self._first_content(provider, new_code_gen_request("", user_request))

    def generate_structured_data(self, provider: ProviderType | str, query: str, schema: str) -> str:
        return self._first_content(provider, new_structured_request("", query, schema))

    def health_check_all(self) -> dict[ProviderType | str, Exception | None]:
        """Check every client; map each provider to its error, or None if healthy."""
        with self._lock:
            clients = dict(self._clients)
        results: dict[ProviderType | str, Exception | None] = {}
        for provider, client in clients.items():
            try:
                client.health_check()
            except Exception as exc:
                results[provider] = exc
            else:
                results[provider] = None
        return results

    def list_providers(self) -> list[ProviderType | str]:
        with self._lock:
            return list(self._factories)

    def get_client_info(self, provider: ProviderType | str) -> ClientInfo:
        return self.get_client(provider).get_client_info()


_default_manager = Manager()


def default_manager() -> Manager:
    """The process-wide manager."""
    return _default_manager


def create_client(config: Config) -> LLMClient:
    return _default_manager.create_client(config)


def get_client(provider: ProviderType | str) -> LLMClient:
    return _default_manager.get_client(provider)


def get_or_create_client(config: Config) -> LLMClient:
    return _default_manager.get_or_create_client(config)


def quick_chat(provider: ProviderType | str, message: str) -> str:
    return _default_manager.quick_chat(provider, message)


def quick_chat_with_template(provider: ProviderType | str, template: str, variables: dict[str, str]) -> str:
    return _default_manager.quick_chat_with_template(provider, template, variables)


def quick_chat_with_rag(provider: ProviderType | str, query: str, docs: list[RetrievedDocument]) -> str:
    return _default_manager.quick_chat_with_rag(provider, query, docs)


def quick_json_chat(provider: ProviderType | str, user_message: str) -> str:
    return _default_manager.quick_json_chat(provider, user_message)


def generate_code(provider: ProviderType | str, user_request: str) -> str:
    return _default_manager.generate_code(provider, user_request)


def generate_structured_data(provider: ProviderType | str, query: str, schema: str) -> str:
    return _default_manager.generate_structured_data(provider, query, schema)