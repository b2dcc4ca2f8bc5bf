"""Input models describing the person being planned for."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fiplan_core.exceptions import InvalidProfileError

# Form limits for a single projection request.
MAX_AGE_INPUT = 99
MAX_MONTHLY_EXPENDITURE = 1_000_000
MAX_MONTHLY_INVESTMENT = 500_000


class HealthStatus(str, Enum):
    """Self-reported health, mapped to a life-expectancy assumption."""

    NEEDS_IMPROVEMENT = "needs_improvement"
    GENERALLY_HEALTHY = "generally_healthy"
    VERY_HEALTHY = "very_healthy"


class FinancialProfile(BaseModel):
    """Everything the projector needs to know about one person.

    Immutable for the duration of a computation. Amounts are monthly except
    the two existing corpora, which are balances held today.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "current_age": 30,
                    "monthly_expense": 50000,
                    "monthly_investment": 30000,
                    "health_status": "generally_healthy",
                    "existing_fixed_income_corpus": 0,
                    "existing_market_corpus": 0,
                }
            ]
        },
    )

    current_age: int = Field(ge=0, le=MAX_AGE_INPUT, description="Age today in whole years")
    monthly_expense: float = Field(
        ge=0,
        le=MAX_MONTHLY_EXPENDITURE,
        description="Current monthly living expense",
    )
    monthly_investment: float = Field(
        ge=0,
        le=MAX_MONTHLY_INVESTMENT,
        description="Current recurring monthly investment (SIP)",
    )
    health_status: HealthStatus = Field(
        default=HealthStatus.GENERALLY_HEALTHY,
        description="Health bucket used to pick the maximum-age assumption",
    )
    existing_fixed_income_corpus: float = Field(
        default=0.0,
        ge=0,
        description="Balance already held in fixed-income instruments (FDs, bonds)",
    )
    existing_market_corpus: float = Field(
        default=0.0,
        ge=0,
        description="Balance already held in market-linked instruments (mutual funds)",
    )

    @property
    def has_existing_corpus(self) -> bool:
        """True when either starting balance is non-zero."""
        return self.existing_fixed_income_corpus > 0 or self.existing_market_corpus > 0

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "FinancialProfile":
        """Validate raw input, raising InvalidProfileError on the first bad field."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidProfileError(
                f"Invalid financial profile: {first.get('msg', 'validation failed')}",
                field=field or None,
                value=first.get("input") if field else None,
                constraint=first.get("type"),
                details={"error_count": e.error_count()},
            ) from e
