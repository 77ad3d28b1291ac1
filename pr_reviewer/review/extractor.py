"""
LLM round trip for a single hunk.

LLMClient talks to OpenAI (or Azure OpenAI) and raises on failure.
AnnotationExtractor wraps it and turns every failure, transport or parse,
into an ExtractionResult so one bad hunk never stops the review.
"""

import re
import time
from typing import Any, Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI
from pydantic import ValidationError

from pr_reviewer.config import Settings
from pr_reviewer.models import ExtractionResult, ReviewReply
from pr_reviewer.utils.logging import get_logger, log_api_call
from pr_reviewer.utils.metrics import MetricsCollector

logger = get_logger(__name__)

# Models that accept response_format={"type": "json_object"}
JSON_MODE_MODEL_PREFIXES = (
    "gpt-4-1106-preview",
    "gpt-4-0125-preview",
    "gpt-4-turbo",
    "gpt-4o",
    "gpt-4.1",
    "gpt-3.5-turbo-1106",
    "gpt-3.5-turbo-0125",
)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*)\n```$", re.DOTALL)


def supports_json_mode(model: str) -> bool:
    """Whether the model can be asked for a JSON object response."""
    return model.startswith(JSON_MODE_MODEL_PREFIXES)


class LLMClient:
    """Wrapper for OpenAI/Azure OpenAI chat completions."""

    def __init__(self, settings: Settings, client: Any = None):
        """
        Initialize LLM client based on configuration.

        Args:
            settings: Application settings
            client: Pre-built async client (tests inject a mock here)
        """
        self.settings = settings
        self.is_azure = settings.uses_azure_openai

        if self.is_azure:
            self.model = settings.azure_openai_deployment or settings.openai_api_model
        else:
            self.model = settings.openai_api_model

        if client is not None:
            self.client = client
        elif self.is_azure:
            self.client = AsyncAzureOpenAI(
                api_key=settings.azure_openai_api_key,
                api_version="2024-02-15-preview",
                azure_endpoint=settings.azure_openai_endpoint,
                timeout=settings.llm_timeout_seconds,
                max_retries=0,
            )
            logger.info("Initialized Azure OpenAI client")
        else:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.llm_timeout_seconds,
                max_retries=0,
            )
            logger.info("Initialized OpenAI client")

    def query_config(self) -> dict:
        """Generation parameters sent with every request."""
        config = {
            "model": self.model,
            "temperature": self.settings.llm_temperature,
            "max_tokens": self.settings.llm_max_tokens,
            "top_p": self.settings.llm_top_p,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }
        if supports_json_mode(self.model):
            config["response_format"] = {"type": "json_object"}
        return config

    async def complete(self, prompt: str) -> str:
        """
        Send the prompt as a system message and return the reply text.

        Raises:
            openai.OpenAIError: On transport, auth or timeout failures
        """
        response = await self.client.chat.completions.create(
            **self.query_config(),
            messages=[{"role": "system", "content": prompt}],
        )
        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip() or "{}"


def parse_line_number(value: Any) -> Optional[int]:
    """
    Coerce a ``lineNumber`` value from the model into a positive int.

    Accepts ints, integral floats and strings holding either. Returns None
    for anything else, including booleans, zero and negative numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value) if "." in value else int(value)
        except ValueError:
            return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def parse_reply(text: str) -> ExtractionResult:
    """
    Validate reply text against the ReviewReply schema.

    A single surrounding markdown code fence is tolerated.
    """
    text = text.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return ExtractionResult.success(ReviewReply.model_validate_json(text))
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "reply"
        return ExtractionResult.failure(f"Malformed LLM reply at {location}: {first['msg']}")


class AnnotationExtractor:
    """Runs one prompt through the LLM and validates the reply."""

    def __init__(self, llm_client: LLMClient, metrics: Optional[MetricsCollector] = None):
        self.llm_client = llm_client
        self.metrics = metrics

    async def extract(self, prompt: str) -> ExtractionResult:
        """
        Get review entries for a prompt.

        Never raises: transport errors and unusable replies come back as a
        failed ExtractionResult carrying the reason.

        Args:
            prompt: Prompt built by PromptBuilder

        Returns:
            ExtractionResult with the parsed reply, or the failure reason
        """
        start_time = time.time()
        try:
            text = await self.llm_client.complete(prompt)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            log_api_call(
                logger,
                service="openai",
                endpoint="chat.completions",
                method="POST",
                duration_ms=duration_ms,
                error=f"{type(e).__name__}: {e}",
            )
            self._record(duration_ms, success=False)
            return ExtractionResult.failure(f"LLM request failed: {type(e).__name__}: {e}")

        duration_ms = (time.time() - start_time) * 1000
        log_api_call(
            logger,
            service="openai",
            endpoint="chat.completions",
            method="POST",
            duration_ms=duration_ms,
        )

        result = parse_reply(text)
        if not result.ok:
            logger.warning(result.reason, extra={"reply_preview": text[:200]})
        self._record(duration_ms, success=result.ok)
        return result

    def _record(self, duration_ms: float, success: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_llm_call(duration_ms, success)
