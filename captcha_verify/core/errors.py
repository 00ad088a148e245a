"""Error values reported by the verification service and by the client itself.

Errors are returned inside ``VerificationResult.errors`` rather than raised.
The four well-known service errors are module-level singletons, so callers
can compare them with ``is``::

    for err in result.errors:
        if err is ERR_TIMEOUT_OR_DUPLICATE:
            ...
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class CaptchaError(Exception):
    """Base class for every error produced while verifying a token."""

    is_user_error = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class UserError(CaptchaError):
    """The end user's input was invalid; safe to show to the user."""

    is_user_error = True


class ApplicationError(CaptchaError):
    """Integration or configuration problem; do not show it verbatim."""


class UnknownCaptchaError(ApplicationError):
    """An error code the client does not recognise, kept verbatim."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class NetworkError(ApplicationError):
    """The HTTP exchange with the verification service failed."""


class UnexpectedStatusError(ApplicationError):
    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"unexpected response code {status_code}")
        self.status_code = status_code
        self.body = body


class UnexpectedContentTypeError(ApplicationError):
    def __init__(self, content_type: str) -> None:
        super().__init__(f"unexpected response Content-Type: {content_type}")
        self.content_type = content_type


class DecodeError(ApplicationError):
    """The response body did not have the expected JSON shape."""


class ParseError(CaptchaError, ValueError):
    """A challenge timestamp is not a valid RFC 3339 date-time."""


class VerificationCancelledError(CaptchaError):
    """The caller's deadline expired before the service answered."""


ERR_INVALID_INPUT_RESPONSE = UserError(
    "the response parameter is invalid or malformed"
)
ERR_TIMEOUT_OR_DUPLICATE = UserError(
    "the response is no longer valid: either is too old or has been used previously"
)
ERR_INVALID_INPUT_SECRET = ApplicationError(
    "the secret parameter is invalid or malformed"
)
ERR_BAD_REQUEST = ApplicationError("the request is invalid or malformed")

ERROR_CODES: dict[str, CaptchaError] = {
    "invalid-input-response": ERR_INVALID_INPUT_RESPONSE,
    "missing-input-response": ERR_INVALID_INPUT_RESPONSE,
    "timeout-or-duplicate": ERR_TIMEOUT_OR_DUPLICATE,
    "invalid-input-secret": ERR_INVALID_INPUT_SECRET,
    "missing-input-secret": ERR_INVALID_INPUT_SECRET,
    "bad-request": ERR_BAD_REQUEST,
}


def decode_error_code(code: str) -> CaptchaError:
    known = ERROR_CODES.get(code)
    if known is not None:
        return known
    return UnknownCaptchaError(code)


def decode_error_codes(codes: Any) -> list[CaptchaError]:
    """Translate the service's ``error-codes`` array, keeping order and duplicates.

    ``None`` is treated as an empty array. Anything other than a sequence of
    strings raises :class:`DecodeError`.
    """

    if codes is None:
        return []
    if isinstance(codes, (str, bytes)) or not isinstance(codes, Sequence):
        raise DecodeError(
            f"error-codes must be an array of strings, got {type(codes).__name__}"
        )

    decoded: list[CaptchaError] = []
    for index, code in enumerate(codes):
        if not isinstance(code, str):
            raise DecodeError(
                f"error-codes[{index}] must be a string, got {type(code).__name__}"
            )
        decoded.append(decode_error_code(code))
    return decoded


def is_user_error(error: BaseException) -> bool:
    """Return whether ``error`` was caused by the end user's input."""

    return bool(getattr(error, "is_user_error", False))
