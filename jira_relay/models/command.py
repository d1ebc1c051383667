"""Command definition models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ResponseStrategy(str, Enum):
    """How a command's answer is produced."""
    ISSUE_LIST = "issue_list"
    HELP = "help"


def normalize_token(token: str) -> str:
    """Canonical form of a command token."""
    return token.strip().lower()


class CommandDefinition(BaseModel):
    """A recognised command and the query behind it."""
    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1, description="Canonical lowercase token")
    title: str = Field(..., description="Header shown above results")
    description: str = Field(..., description="One-line description for the help listing")
    jql: Optional[str] = Field(None, description="JQL query template, opaque to the relay")
    strategy: ResponseStrategy = ResponseStrategy.ISSUE_LIST
    aliases: tuple[str, ...] = ()

    @field_validator("token")
    @classmethod
    def _normalize_token(cls, value: str) -> str:
        return normalize_token(value)

    @field_validator("aliases")
    @classmethod
    def _normalize_aliases(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(normalize_token(alias) for alias in value)

    @model_validator(mode="after")
    def _require_query(self) -> "CommandDefinition":
        if self.strategy == ResponseStrategy.ISSUE_LIST and not self.jql:
            raise ValueError(f"Command '{self.token}' lists issues but has no JQL")
        return self

    @property
    def tokens(self) -> tuple[str, ...]:
        """Canonical token followed by its aliases."""
        return (self.token,) + self.aliases
