"""OpenAI client wrapper used by the model-backed assessment engine."""

import json
import os
from typing import Any, Type, TypeVar

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..observability.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

SYSTEM_DIRECTIVE = "Return a JSON object that follows the provided schema guidance."


class OpenAIClient:
    """Wrapper for the Responses API with retry logic and structured outputs."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-5.1",
        timeout: int = 60,
        max_retries: int = 3,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Default model to use
            timeout: Request timeout in seconds
            max_retries: Transport-level retries inside the SDK
        """
        self.test_mode = bool(os.getenv("HIREPATH_MOCK_OPENAI"))
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key and not self.test_mode:
            raise ValueError("OpenAI API key must be provided or set in OPENAI_API_KEY env var")

        self.model = model
        self.client: AsyncOpenAI | None = None
        if not self.test_mode:
            self.client = AsyncOpenAI(api_key=self.api_key, timeout=timeout, max_retries=max_retries)

        logger.info("openai_client_initialized", model=model, test_mode=self.test_mode)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(OpenAIError),
        reraise=True,
    )
    async def create_response(
        self,
        input_text: str,
        response_model: Type[T],
        model: str | None = None,
        metadata: dict[str, Any] | None = None,
        max_output_tokens: int | None = None,
    ) -> tuple[T, dict[str, Any]]:
        """Ask the model for a JSON object matching ``response_model``.

        Raises:
            OpenAIError: If the API call fails after retries
            ValueError: If the model returned no text
        """
        model = model or self.model

        if self.test_mode:
            return response_model.model_validate({}), {"tokens_total": 0, "model": model, "mock": True}

        schema = response_model.model_json_schema()
        self._enforce_no_extra_properties(schema)

        logger.info("creating_response", model=model, input_length=len(input_text))

        try:
            completion = await self.client.responses.create(
                model=model,
                input=[
                    {"role": "system", "content": SYSTEM_DIRECTIVE},
                    {"role": "user", "content": input_text},
                ],
                instructions=(
                    "You are a structured assessment model. "
                    "Return ONLY a valid JSON object that conforms to the provided schema. "
                    "Do not add markdown, code fences, prose, or extra keys. "
                    f"Schema (JSON): {json.dumps(schema)}"
                ),
                max_output_tokens=max_output_tokens or 2048,
                metadata=metadata or {},
                text={"format": {"type": "json_object"}},
            )
        except OpenAIError as e:
            logger.error("openai_error", error=str(e), model=model, exc_info=True)
            raise

        output_text = self._extract_text_from_response(completion)
        if not output_text:
            raise ValueError("No text content returned from OpenAI response")

        usage = getattr(completion, "usage", None)
        usage_metadata = {
            "tokens_total": getattr(usage, "total_tokens", 0),
            "response_id": getattr(completion, "id", None),
            "model": getattr(completion, "model", model),
        }
        logger.info("response_created", **usage_metadata)

        return self._parse_response_json(response_model, output_text), usage_metadata

    def _parse_response_json(self, response_model: Type[T], output_text: str) -> T:
        """Parse model output, retrying once on the outermost braces."""
        try:
            return response_model.model_validate_json(output_text)
        except ValueError:
            start, end = output_text.find("{"), output_text.rfind("}") + 1
            if start == -1 or end <= start:
                raise
            return response_model.model_validate(json.loads(output_text[start:end]))

    @staticmethod
    def _extract_text_from_response(response: Any) -> str:
        if getattr(response, "output_text", None):
            return str(response.output_text)

        texts: list[str] = []
        for item in getattr(response, "output", []) or []:
            for content in getattr(item, "content", []) or []:
                text_val = getattr(content, "text", None)
                if text_val:
                    texts.append(str(text_val))
        return "".join(texts).strip()

    def _enforce_no_extra_properties(self, schema: Any) -> None:
        """Forbid additional properties on every object node of the schema."""
        if isinstance(schema, dict):
            if "$ref" in schema:
                for key in [k for k in schema if k != "$ref"]:
                    schema.pop(key)
                return
            if schema.get("type") == "object":
                schema.setdefault("additionalProperties", False)
            for value in schema.values():
                self._enforce_no_extra_properties(value)
        elif isinstance(schema, list):
            for item in schema:
                self._enforce_no_extra_properties(item)


_openai_client: OpenAIClient | None = None


def get_openai_client(config: dict[str, Any] | None = None) -> OpenAIClient:
    """Get global OpenAI client instance."""
    global _openai_client

    if _openai_client is None:
        openai_config = (config or {}).get("openai", {})
        _openai_client = OpenAIClient(
            api_key=os.getenv(openai_config.get("api_key_env", "OPENAI_API_KEY")),
            model=openai_config.get("model", "gpt-5.1"),
            timeout=openai_config.get("timeout", 60),
            max_retries=openai_config.get("max_retries", 3),
        )

    return _openai_client
