"""Verify reCAPTCHA response tokens and classify the errors the service reports."""

from __future__ import annotations

from captcha_verify.core.errors import (
    ERR_BAD_REQUEST,
    ERR_INVALID_INPUT_RESPONSE,
    ERR_INVALID_INPUT_SECRET,
    ERR_TIMEOUT_OR_DUPLICATE,
    ApplicationError,
    CaptchaError,
    DecodeError,
    NetworkError,
    ParseError,
    UnexpectedContentTypeError,
    UnexpectedStatusError,
    UnknownCaptchaError,
    UserError,
    VerificationCancelledError,
    decode_error_codes,
    is_user_error,
)
from captcha_verify.core.logging_config import configure_logging
from captcha_verify.schemas.captcha import ScoredVerificationResult, VerificationResult
from captcha_verify.services import (
    CaptchaVerifier,
    averify,
    averify_scored,
    captcha_verifier,
    verify,
    verify_scored,
)
from captcha_verify.utils.timestamps import parse_timestamp

__version__ = "1.0.0"

__all__ = [
    "ERR_BAD_REQUEST",
    "ERR_INVALID_INPUT_RESPONSE",
    "ERR_INVALID_INPUT_SECRET",
    "ERR_TIMEOUT_OR_DUPLICATE",
    "ApplicationError",
    "CaptchaError",
    "CaptchaVerifier",
    "DecodeError",
    "NetworkError",
    "ParseError",
    "ScoredVerificationResult",
    "UnexpectedContentTypeError",
    "UnexpectedStatusError",
    "UnknownCaptchaError",
    "UserError",
    "VerificationCancelledError",
    "VerificationResult",
    "averify",
    "averify_scored",
    "captcha_verifier",
    "configure_logging",
    "decode_error_codes",
    "is_user_error",
    "parse_timestamp",
    "verify",
    "verify_scored",
]
