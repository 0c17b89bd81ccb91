"""Scrub credentials and personal data before text leaves the process."""

from __future__ import annotations

import re

BEARER_PLACEHOLDER = "****"
JWT_PLACEHOLDER = "***.***.***"
EMAIL_PLACEHOLDER = "****@****"
IPV4_PLACEHOLDER = "***.***.***.***"

BEARER_RE = re.compile(r"\b(bearer|api[-_ ]?key)[\s:=]+[A-Za-z0-9_\-.~+/]{8,}=*", re.IGNORECASE)
JWT_RE = re.compile(r"\b[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\b")
EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
IPV4_RE = re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b")

# Token patterns run first so an email or IP inside a header value is not half-scrubbed.
_RULES: list[tuple[re.Pattern[str], str]] = [
    (BEARER_RE, rf"\1 {BEARER_PLACEHOLDER}"),
    (JWT_RE, JWT_PLACEHOLDER),
    (EMAIL_RE, EMAIL_PLACEHOLDER),
    (IPV4_RE, IPV4_PLACEHOLDER),
]


def scrub(text: str) -> str:
    """Replace tokens, JWT-like strings, emails and IPv4 addresses with fixed placeholders."""
    if not text:
        return text
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text
