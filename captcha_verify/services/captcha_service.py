"""Client for the reCAPTCHA ``siteverify`` endpoint."""

from __future__ import annotations

import asyncio
import json
import threading
import time
from typing import Type, TypeVar

import httpx
from pydantic import ValidationError

from captcha_verify.core.errors import (
    ERR_INVALID_INPUT_RESPONSE,
    ERR_INVALID_INPUT_SECRET,
    CaptchaError,
    DecodeError,
    NetworkError,
    UnexpectedContentTypeError,
    UnexpectedStatusError,
    VerificationCancelledError,
)
from captcha_verify.core.logging_config import get_logger, log_event
from captcha_verify.schemas.captcha import ScoredVerificationResult, VerificationResult
from captcha_verify.utils.config import Config

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"
_BODY_SNIPPET_LENGTH = 200

logger = get_logger(component="captcha")

ResultT = TypeVar("ResultT", bound=VerificationResult)


def build_form(secret: str, response: str, remote_ip: str = "") -> dict[str, str]:
    form = {"secret": secret, "response": response}
    if remote_ip:
        form["remoteip"] = remote_ip
    return form


class CaptchaVerifier:
    """Verify user response tokens, one HTTP request per call.

    ``client`` and ``async_client`` may be supplied to reuse a pool or to plug
    in a test transport. Without them a shared ``httpx.Client`` is created on
    first use and async calls open a short-lived ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        async_client: httpx.AsyncClient | None = None,
        verify_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.verify_url = verify_url or Config.CAPTCHA_VERIFY_URL
        self.timeout = timeout if timeout is not None else Config.CAPTCHA_HTTP_TIMEOUT
        self._client = client
        self._owns_client = client is None
        self._async_client = async_client
        self._client_lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "CaptchaVerifier":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def verify(
        self,
        secret: str,
        response: str,
        remote_ip: str = "",
        *,
        timeout: float | None = None,
    ) -> VerificationResult:
        """Verify a reCAPTCHA v2 / invisible token.

        ``timeout`` is the caller's deadline in seconds; when it expires
        :class:`VerificationCancelledError` is raised and no result is returned.
        Every other failure is reported through ``result.errors``.
        """

        return self._verify(VerificationResult, secret, response, remote_ip, timeout)

    def verify_scored(
        self,
        secret: str,
        response: str,
        remote_ip: str = "",
        *,
        timeout: float | None = None,
    ) -> ScoredVerificationResult:
        """Verify a reCAPTCHA v3 token, returning its score and action."""

        return self._verify(
            ScoredVerificationResult, secret, response, remote_ip, timeout
        )

    async def averify(
        self,
        secret: str,
        response: str,
        remote_ip: str = "",
        *,
        timeout: float | None = None,
    ) -> VerificationResult:
        return await self._averify(
            VerificationResult, secret, response, remote_ip, timeout
        )

    async def averify_scored(
        self,
        secret: str,
        response: str,
        remote_ip: str = "",
        *,
        timeout: float | None = None,
    ) -> ScoredVerificationResult:
        return await self._averify(
            ScoredVerificationResult, secret, response, remote_ip, timeout
        )

    def _verify(
        self,
        result_cls: Type[ResultT],
        secret: str,
        response: str,
        remote_ip: str,
        timeout: float | None,
    ) -> ResultT:
        rejected = _check_inputs(result_cls, secret, response)
        if rejected is not None:
            return self._finish(rejected)

        try:
            http_response, body = self._post(
                build_form(secret, response, remote_ip), timeout
            )
        except httpx.RequestError as exc:
            if timeout is not None and isinstance(exc, httpx.TimeoutException):
                raise _cancelled(timeout) from exc
            return self._finish(_request_failure(result_cls, exc))

        return self._finish(_decode_response(result_cls, http_response, body))

    def _post(
        self, form: dict[str, str], timeout: float | None
    ) -> tuple[httpx.Response, bytes]:
        """Send the form and read the body; ``timeout`` bounds the whole exchange.

        The body is streamed and the elapsed time checked after every chunk.
        """

        if timeout is None:
            deadline = None
            request_timeout = httpx.USE_CLIENT_DEFAULT
        else:
            deadline = time.monotonic() + timeout
            request_timeout = timeout

        with self.client.stream(
            "POST",
            self.verify_url,
            data=form,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            timeout=request_timeout,
        ) as http_response:
            body = bytearray()
            _check_deadline(deadline, timeout)
            for chunk in http_response.iter_bytes():
                body.extend(chunk)
                _check_deadline(deadline, timeout)
        return http_response, bytes(body)

    async def _averify(
        self,
        result_cls: Type[ResultT],
        secret: str,
        response: str,
        remote_ip: str,
        timeout: float | None,
    ) -> ResultT:
        rejected = _check_inputs(result_cls, secret, response)
        if rejected is not None:
            return self._finish(rejected)

        form = build_form(secret, response, remote_ip)
        try:
            if timeout is None:
                http_response = await self._apost(form)
            else:
                try:
                    async with asyncio.timeout(timeout):
                        http_response = await self._apost(form)
                except TimeoutError as exc:
                    raise _cancelled(timeout) from exc
        except httpx.RequestError as exc:
            return self._finish(_request_failure(result_cls, exc))

        return self._finish(
            _decode_response(result_cls, http_response, http_response.content)
        )

    async def _apost(self, form: dict[str, str]) -> httpx.Response:
        headers = {"Content-Type": FORM_CONTENT_TYPE}
        if self._async_client is not None:
            return await self._async_client.post(
                self.verify_url, data=form, headers=headers
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.verify_url, data=form, headers=headers)

    def _finish(self, result: ResultT) -> ResultT:
        logger.info(
            "captcha_verification",
            success=result.success,
            error_count=len(result.errors),
            user_errors=len(result.user_errors),
            scored=isinstance(result, ScoredVerificationResult),
        )
        return result


def _check_inputs(
    result_cls: Type[ResultT], secret: str, response: str
) -> ResultT | None:
    if not secret:
        return result_cls.failed(ERR_INVALID_INPUT_SECRET)
    if not response:
        return result_cls.failed(ERR_INVALID_INPUT_RESPONSE)
    return None


def _cancelled(timeout: float) -> VerificationCancelledError:
    return VerificationCancelledError(f"verification cancelled after {timeout}s")


def _check_deadline(deadline: float | None, timeout: float | None) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        raise _cancelled(timeout)


def _request_failure(result_cls: Type[ResultT], exc: httpx.RequestError) -> ResultT:
    error: CaptchaError
    if isinstance(exc, httpx.DecodingError):
        # Content-Encoding did not match the body.
        error = DecodeError(f"error decoding the response body: {exc}")
    else:
        error = NetworkError(str(exc) or type(exc).__name__)
    log_event(
        logger,
        "captcha_request_failed",
        error_type=type(exc).__name__,
        detail=error.message,
    )
    return result_cls.failed(error)


def _body_text(http_response: httpx.Response, body: bytes) -> str:
    try:
        return body.decode(http_response.charset_encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def _decode_response(
    result_cls: Type[ResultT], http_response: httpx.Response, body: bytes
) -> ResultT:
    error: CaptchaError
    status = http_response.status_code
    content_type = http_response.headers.get("Content-Type", "")

    if not 200 <= status <= 299:
        error = UnexpectedStatusError(
            status, _body_text(http_response, body)[:_BODY_SNIPPET_LENGTH]
        )
    elif JSON_CONTENT_TYPE not in content_type.lower():
        error = UnexpectedContentTypeError(content_type)
    else:
        try:
            return result_cls.model_validate(json.loads(body))
        except ValidationError as exc:
            error = DecodeError(f"error decoding the response body: {exc}")
        except ValueError as exc:
            error = DecodeError(f"error decoding the response body: {exc}")

    log_event(
        logger,
        "captcha_response_rejected",
        error_type=type(error).__name__,
        detail=error.message,
        status=status,
    )
    return result_cls.failed(error)


captcha_verifier = CaptchaVerifier()


def verify(
    secret: str, response: str, remote_ip: str = "", *, timeout: float | None = None
) -> VerificationResult:
    return captcha_verifier.verify(secret, response, remote_ip, timeout=timeout)


def verify_scored(
    secret: str, response: str, remote_ip: str = "", *, timeout: float | None = None
) -> ScoredVerificationResult:
    return captcha_verifier.verify_scored(
        secret, response, remote_ip, timeout=timeout
    )


async def averify(
    secret: str, response: str, remote_ip: str = "", *, timeout: float | None = None
) -> VerificationResult:
    return await captcha_verifier.averify(
        secret, response, remote_ip, timeout=timeout
    )


async def averify_scored(
    secret: str, response: str, remote_ip: str = "", *, timeout: float | None = None
) -> ScoredVerificationResult:
    return await captcha_verifier.averify_scored(
        secret, response, remote_ip, timeout=timeout
    )
