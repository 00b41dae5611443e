"""Chat-completion client for the DeepSeek API."""

from __future__ import annotations

import json
import logging
import time

import requests

from fnkit.llm.config import Config, ProviderType
from fnkit.llm.manager import LLMClient, LLMClientFactory, Manager, default_manager
from fnkit.llm.types import (
    APIError,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ClientInfo,
    LLMError,
    Message,
    RateLimit,
)

__all__ = ["DeepSeekClient", "DeepSeekFactory", "register"]

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com"
DEFAULT_TIMEOUT = 30.0
SUPPORTED_MODELS = ("deepseek-coder", "deepseek-chat", "deepseek-reasoner")


class DeepSeekClient(LLMClient):
    """Sends chat completion requests to DeepSeek, retrying transient failures."""

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        if not config.api_key:
            raise ValueError("DeepSeek API key is required")
        cfg = config.clone()
        if not cfg.base_url:
            cfg.base_url = DEFAULT_BASE_URL
        if cfg.timeout == 0:
            cfg.timeout = DEFAULT_TIMEOUT
        self.config = cfg
        self._session = session if session is not None else requests.Session()

    def chat_completion(self, req: ChatCompletionRequest) -> ChatCompletionResponse:
        """Fill in defaults, send ``req`` and return the parsed reply."""
        cfg = self.config
        if not req.model:
            req.model = cfg.default_model
        if req.temperature == 0:
            req.temperature = cfg.default_temperature
        if req.max_tokens == 0:
            req.max_tokens = cfg.default_max_tokens
        if req.top_p == 0:
            req.top_p = cfg.default_top_p

        if req.rag_context is not None and cfg.enable_rag:
            self._apply_rag_context(req)
        if req.prompt_template and req.variables is not None:
            self._apply_prompt_template(req)

        body = json.dumps(req.to_dict(), ensure_ascii=False).encode("utf-8")
        url = f"{cfg.base_url}/chat/completions"
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {cfg.api_key}"}
        logger.info(
            "[DeepSeek] 发送请求: %s, Model: %s, Messages: %d条, Temperature: %.2f",
            url, req.model, len(req.messages), req.temperature,
        )

        started = time.monotonic()
        try:
            resp = self._post_with_retry(url, body, headers)
        except LLMError as exc:
            logger.error("[DeepSeek] 请求失败: %s", exc)
            raise
        with resp:
            resp_body = resp.content
            status = resp.status_code
        logger.info(
            "[DeepSeek] 响应完成: 状态=%d, 耗时=%.3fs, 响应长度=%d",
            status, time.monotonic() - started, len(resp_body),
        )

        if status != 200:
            try:
                error = APIError.from_dict(json.loads(resp_body), status_code=status)
            except (ValueError, TypeError):
                text = resp_body.decode("utf-8", errors="replace")
                raise LLMError(f"API error: status={status}, body={text}") from None
            raise error

        try:
            response = ChatCompletionResponse.from_dict(json.loads(resp_body))
        except (ValueError, TypeError) as exc:
            raise LLMError(f"unmarshal response failed: {exc}") from exc

        if response.usage.total_tokens > 0:
            logger.info(
                "[DeepSeek] Token使用: 输入=%d, 输出=%d, 总计=%d",
                response.usage.prompt_tokens, response.usage.completion_tokens, response.usage.total_tokens,
            )
        return response

    def get_client_info(self) -> ClientInfo:
        return ClientInfo(
            provider="deepseek",
            version="v1.0.0",
            supported_models=list(SUPPORTED_MODELS),
            features=["chat_completion", "rag_support", "template_rendering", "retry_mechanism"],
            api_endpoint=self.config.base_url,
            rate_limit=RateLimit(
                requests_per_minute=self.config.rate_limit_rps * 60,
                tokens_per_minute=100000,
                tokens_per_day=1000000,
            ),
        )

    def health_check(self) -> None:
        """Send a tiny request; raise LLMError if it fails."""
        req = ChatCompletionRequest(
            model=self.config.default_model,
            messages=[Message(role="user", content="ping")],
            max_tokens=10,
        )
        try:
            self.chat_completion(req)
        except Exception as exc:
            raise LLMError(f"health check failed: {exc}") from exc

    def _post_with_retry(self, url: str, body: bytes, headers: dict[str, str]) -> requests.Response:
        last: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            if attempt:
                time.sleep(max(self.config.retry_interval, 0.0))
                logger.info("[DeepSeek] 重试第%d次", attempt)
            try:
                resp = self._session.post(url, data=body, headers=headers, timeout=self.config.timeout)
            except requests.RequestException as exc:
                last = exc
                continue
            if resp.status_code >= 500 or resp.status_code == 429:
                resp.close()
                last = LLMError(f"server error: {resp.status_code}")
                continue
            return resp
        raise LLMError(f"max retries exceeded: {last}") from last

    def _apply_rag_context(self, req: ChatCompletionRequest) -> None:
        ctx = req.rag_context
        if ctx is None or not ctx.retrieved_docs:
            return
        lines = ["参考文档:\n"]
        for number, doc in enumerate(ctx.retrieved_docs[: max(self.config.max_rag_documents, 0)], start=1):
            lines.append(f"文档{number}: {doc.content}\n")
        lines.append("\n基于以上文档回答用户问题:")
        if req.messages:
            req.messages = [Message(role="system", content="".join(lines)), *req.messages]

    @staticmethod
    def _apply_prompt_template(req: ChatCompletionRequest) -> None:
        if not req.prompt_template:
            return
        text = req.prompt_template
        for key, value in (req.variables or {}).items():
            text = text.replace(f"{{{{{key}}}}}", value)
        for message in reversed(req.messages):
            if message.role == "user":
                message.content = text
                break


class DeepSeekFactory(LLMClientFactory):
    """Builds DeepSeek clients."""

    def create_client(self, config: Config) -> DeepSeekClient:
        return DeepSeekClient(config)

    def supported_models(self) -> list[str]:
        return list(SUPPORTED_MODELS)


def register(manager: Manager | None = None) -> None:
    """Register the DeepSeek factory with ``manager`` (the default manager if omitted)."""
    (manager if manager is not None else default_manager()).register_factory(
        ProviderType.DEEPSEEK, DeepSeekFactory()
    )


register()