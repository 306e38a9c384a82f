import re

_QUERY_SECRET = re.compile(r"(?i)\b(api[_-]?key|key|token|secret|cx)=([^&\s]+)")
_HEADER_SECRET = re.compile(r"(?i)(xi-api-key|x-goog-api-key|x-api-key)[\"']?\s*[:=]\s*[\"']?[A-Za-z0-9._\-]+")
_BEARER = re.compile(r"(?i)Bearer\s+[A-Za-z0-9._\-]+")


def redact_secrets(text: str) -> str:
    """Redact credential-looking fragments from log lines and error strings."""
    if not isinstance(text, str):
        return text

    redacted = _QUERY_SECRET.sub(r"\1=***REDACTED***", text)
    redacted = _HEADER_SECRET.sub(r"\1: ***REDACTED***", redacted)
    redacted = _BEARER.sub("Bearer ***REDACTED***", redacted)
    return redacted


def is_configured_key(value: str) -> bool:
    """Return True if an env var-like key is configured (not empty or a placeholder)."""
    if not value:
        return False
    s = value.strip()
    if not s:
        return False
    return not s.upper().startswith("YOUR_") and "your_" not in s
