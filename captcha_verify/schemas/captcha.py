"""Pydantic records returned by the verifier."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from captcha_verify.core.errors import (
    CaptchaError,
    DecodeError,
    decode_error_codes,
    is_user_error,
)
from captcha_verify.utils.timestamps import parse_timestamp


class VerificationResult(BaseModel):
    """Outcome of a reCAPTCHA v2 / invisible reCAPTCHA verification."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        strict=True,
        extra="ignore",
    )

    success: bool = False
    challenge_timestamp: str = Field("", alias="challenge_ts")
    hostname: str = ""
    errors: list[CaptchaError] = Field(default_factory=list, alias="error-codes")

    @field_validator("errors", mode="before")
    @classmethod
    def _decode_errors(cls, value: Any) -> list[CaptchaError]:
        if isinstance(value, list) and all(
            isinstance(item, CaptchaError) for item in value
        ):
            return list(value)
        try:
            return decode_error_codes(value)
        except DecodeError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def failed(cls, error: CaptchaError) -> "VerificationResult":
        return cls.model_validate({"success": False, "error-codes": [error]})

    @property
    def user_errors(self) -> list[CaptchaError]:
        return [error for error in self.errors if is_user_error(error)]

    @property
    def application_errors(self) -> list[CaptchaError]:
        return [error for error in self.errors if not is_user_error(error)]

    def challenge_time(self) -> datetime:
        """Parse ``challenge_timestamp``; raises ``ParseError`` when malformed."""

        return parse_timestamp(self.challenge_timestamp)


class ScoredVerificationResult(VerificationResult):
    """reCAPTCHA v3 outcome, adding the risk score and the page action."""

    score: float = Field(0.0, ge=0.0, le=1.0)
    action: str = ""
