"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation plus self-documenting fields (Field) without coupling the
  core to any I/O library.
- Provider payloads arrive in camelCase; aliases normalize them once here.

Note:
- These models describe *what* a lookup produced, not *how* it was obtained.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

PLACEHOLDER = "-"
INVALID_IP_FORMAT = "Invalid IP Format"
NO_CANDIDATES_MESSAGE = "No valid IP addresses found in the input"


class LookupRecord(BaseModel):
    """Reputation record returned by the remote provider.

    Treated as an opaque payload: only the fields the render sink shows are
    kept, and anything missing falls back to the placeholder.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    ip_address: str = Field(
        ...,
        alias="ipAddress",
        description="Address the provider answered for.",
    )
    abuse_confidence_score: int | None = Field(
        default=None,
        alias="abuseConfidenceScore",
        description="Abuse confidence (0..100); None when the provider gave none.",
    )
    country_name: str = Field(
        default=PLACEHOLDER,
        alias="countryName",
        description="Country of the address.",
    )
    isp: str = Field(
        default=PLACEHOLDER,
        description="Internet service provider.",
    )
    domain: str = Field(
        default=PLACEHOLDER,
        description="Domain associated with the address.",
    )

    @field_validator("country_name", "isp", "domain", mode="before")
    @classmethod
    def _blank_text(cls, value: object) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return PLACEHOLDER
        if not isinstance(value, str):
            return str(value)
        return value

    @field_validator("abuse_confidence_score", mode="before")
    @classmethod
    def _coerce_score(cls, value: object) -> int | None:
        # anything that is not a 0..100 number is an unavailable score
        if isinstance(value, bool):
            return None
        try:
            score = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if not 0 <= score <= 100 or not score.is_integer():
            return None
        return int(score)

    @property
    def score_label(self) -> str:
        if self.abuse_confidence_score is None:
            return PLACEHOLDER
        return str(self.abuse_confidence_score)


class LookupSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    record: LookupRecord

    @property
    def ip_address(self) -> str:
        return self.record.ip_address

    @property
    def ok(self) -> bool:
        return True


class LookupFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    ip_address: str = Field(..., description="Token exactly as extracted.")
    reason: str = Field(..., min_length=1, description="Most specific failure message.")

    @property
    def ok(self) -> bool:
        return False


Outcome = Annotated[Union[LookupSuccess, LookupFailure], Field(discriminator="status")]


class RunSnapshot(BaseModel):
    """Read-only view of a run, published at every group boundary.

    Why immutable:
    - The render sink may hold on to a snapshot while the next group runs;
      freezing it (and using tuples) keeps the sink from mutating run state.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(..., ge=0, description="Candidates extracted for this run.")
    completed: int = Field(default=0, ge=0, description="Outcomes collected so far.")
    progress: float = Field(default=0.0, ge=0.0, le=100.0, description="Percent done.")
    outcomes: tuple[Outcome, ...] = Field(
        default_factory=tuple,
        description="One outcome per candidate, in extraction order.",
    )
    errors: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Human readable error messages, in the order they occurred.",
    )
    done: bool = Field(default=False, description="True once the run reached Done.")

    @property
    def failures(self) -> list[LookupFailure]:
        return [o for o in self.outcomes if isinstance(o, LookupFailure)]
