"""Rule and match-result domain models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Rule(BaseModel):
    """Binds trigger patterns to one knowledge document.

    Patterns are stored lower-cased. Rules are immutable once built.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    patterns: tuple[str, ...] = Field(..., min_length=1)
    document_ref: str = Field(..., min_length=1, description="Prompt file name")
    description: str = ""

    @field_validator("patterns")
    @classmethod
    def normalize_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Lower-case patterns and reject empty ones."""
        normalized = tuple(pattern.lower() for pattern in v)
        if any(not pattern for pattern in normalized):
            raise ValueError("Patterns cannot be empty strings")
        return normalized

    @field_validator("document_ref")
    @classmethod
    def validate_document_ref(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Document reference cannot be blank")
        return v.strip()


class ResolvedContext(BaseModel):
    """Outcome of resolving a query; created per call."""

    model_config = ConfigDict(frozen=True)

    rule: Rule | None = None
    content: str | None = None
    match_found: bool = False


__all__ = ["Rule", "ResolvedContext"]
