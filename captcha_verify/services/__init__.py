"""Accesos rápidos al servicio de verificación."""

from __future__ import annotations

from .captcha_service import (
    CaptchaVerifier,
    averify,
    averify_scored,
    build_form,
    captcha_verifier,
    verify,
    verify_scored,
)

__all__ = [
    "CaptchaVerifier",
    "averify",
    "averify_scored",
    "build_form",
    "captcha_verifier",
    "verify",
    "verify_scored",
]
