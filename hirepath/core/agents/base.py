"""Base agent class for the resume and assessment agents."""

import time
from abc import ABC, abstractmethod
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel

from ..models.base import AgentContext, AgentResult
from ..models.enums import AgentType
from ...observability.logger import get_logger

logger = get_logger(__name__)

TInput = TypeVar("TInput", bound=BaseModel)
TOutput = TypeVar("TOutput", bound=BaseModel)


class BaseAgent(ABC, Generic[TInput, TOutput]):
    """Abstract base class for all agents.

    Implements the template method pattern:
    - input validation
    - agent-specific ``process`` (stub heuristics or a model call)
    - output validation
    - timing and structured logging

    Subclasses are interchangeable as long as they keep ``output_schema``;
    ranking and the lifecycle only ever see the output model.
    """

    def __init__(self):
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def agent_type(self) -> AgentType:
        """Return the agent type enum."""

    @property
    @abstractmethod
    def output_schema(self) -> Type[TOutput]:
        """Return the Pydantic schema for output."""

    async def execute(self, input_data: TInput, context: AgentContext) -> AgentResult[TOutput]:
        """Validate, process and validate again, logging the whole run.

        Args:
            input_data: Input data (Pydantic model)
            context: Execution context

        Returns:
            AgentResult with success status and data

        Raises:
            Exception: Whatever ``process`` raised, after logging it
        """
        start_time = time.time()

        self.logger.info(
            "agent_execution_start",
            agent=self.agent_type.value,
            candidate_id=context.candidate_id,
            trace_id=context.trace_id,
        )

        try:
            if not await self.validate_input(input_data, context):
                return AgentResult(success=False, data=None, error="Input validation failed")

            result = await self.process(input_data, context)

            if result.success and result.data is not None:
                if not await self.validate_output(result.data, context):
                    return AgentResult(success=False, data=None, error="Output validation failed")

            duration_ms = int((time.time() - start_time) * 1000)
            result.duration_ms = duration_ms

            self.logger.info(
                "agent_execution_complete",
                agent=self.agent_type.value,
                candidate_id=context.candidate_id,
                success=result.success,
                duration_ms=duration_ms,
            )
            return result

        except Exception as e:
            self.logger.error(
                "agent_execution_failed",
                agent=self.agent_type.value,
                candidate_id=context.candidate_id,
                error=str(e),
                duration_ms=int((time.time() - start_time) * 1000),
                exc_info=True,
            )
            raise

    @abstractmethod
    async def process(self, input_data: TInput, context: AgentContext) -> AgentResult[TOutput]:
        """Agent-specific work. Must be implemented by subclass."""

    async def validate_input(self, input_data: TInput, context: AgentContext) -> bool:
        """Validate input before processing. Override for custom checks."""
        return True

    async def validate_output(self, output_data: TOutput, context: AgentContext) -> bool:
        """Validate output after processing. Override for custom checks."""
        return True

    async def _call_response_api(self, prompt: str, context: AgentContext) -> tuple[TOutput, dict[str, Any]]:
        """Call the OpenAI Responses API with ``output_schema`` as structured output.

        Args:
            prompt: Prompt text
            context: Execution context

        Returns:
            Tuple of (parsed output, metadata)
        """
        from ...integrations.openai_client import get_openai_client

        client = get_openai_client(context.config)
        model = context.config.get("openai", {}).get("model", "gpt-5.1")

        return await client.create_response(
            input_text=prompt,
            response_model=self.output_schema,
            model=model,
            metadata={
                "candidate_id": context.candidate_id,
                "agent": self.agent_type.value,
                "trace_id": context.trace_id,
            },
        )
