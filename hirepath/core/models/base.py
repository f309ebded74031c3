"""Base Pydantic schemas and helpers for HirePath models."""

import uuid
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .enums import UserRole

T = TypeVar("T")


# =============================================================================
# Pydantic Base Classes
# =============================================================================


class HirePathBaseModel(BaseModel):
    """Base Pydantic model for all schemas with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )


class TimestampSchema(HirePathBaseModel):
    """Schema with timestamp fields."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self) -> None:
        self.updated_at = utc_now()


class IdentifiedSchema(HirePathBaseModel):
    """Schema with UUID identifier."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique identifier")


# =============================================================================
# Execution context and results
# =============================================================================


class AuthContext(HirePathBaseModel):
    """Identity handed over by the external auth provider.

    The id is trusted as-is; workflow entry points only check the role.
    """

    user_id: str = Field(..., min_length=1, description="Authenticated account id")
    role: UserRole = Field(..., description="candidate or recruiter")

    @property
    def is_recruiter(self) -> bool:
        return self.role == UserRole.RECRUITER.value


class AgentContext(HirePathBaseModel):
    """Context passed to all agent executions."""

    candidate_id: str = Field(..., description="Candidate identifier")
    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Trace ID")
    config: dict[str, Any] = Field(default_factory=dict, description="Configuration")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class AgentResult(HirePathBaseModel, Generic[T]):
    """Standardized result wrapper for agent executions."""

    success: bool = Field(..., description="Whether execution succeeded")
    data: T | None = Field(None, description="Result data")
    error: str | None = Field(None, description="Error message if failed")
    confidence: float = Field(1.0, ge=0.0, le=1.0, description="Confidence score")
    duration_ms: int = Field(0, ge=0, description="Execution duration in milliseconds")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


# =============================================================================
# Utility Functions
# =============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a prefixed UUID.

    Args:
        prefix: Optional prefix for the ID (e.g., "cand_", "ivr_")

    Returns:
        Prefixed UUID string
    """
    uid = str(uuid.uuid4())
    return f"{prefix}{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
