"""Utility functions for logging tool calls."""

import re
from typing import Any, Dict, Mapping

SENSITIVE_KEYS = {
    'api_key', 'key', 'secret', 'password', 'token',
    'authorization', 'auth', 'credential'
}

_SENSITIVE_PATTERNS = [
    (r'key=[\w\-]+', 'key=****'),  # API keys in query strings
    (r'Bearer\s+[\w\-\.]+', 'Bearer ****'),  # Bearer tokens
    (r'password=[^\s&]+', 'password=****'),  # Passwords
    (r'token=[\w\-\.]+', 'token=****'),  # Tokens
    (r'secret=[\w\-]+', 'secret=****'),  # Secrets
    (r'://([^:/\s]+):[^@/\s]+@', r'://\1:****@'),  # Credentials in URLs
]


def _redact_value(key: str, value: Any) -> Any:
    if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
        if isinstance(value, str):
            if len(value) > 8:
                return f"{value[:4]}...{value[-4:]}"
            return "****"
        return "[REDACTED]"
    return value


def redact_sensitive_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Redact sensitive information from log data.

    Args:
        data: Mapping containing log data

    Returns:
        Dictionary with sensitive data redacted
    """
    if not isinstance(data, Mapping):
        return data

    return {
        k: _redact_value(k, v) if isinstance(v, (str, int, float, bool))
        else redact_sensitive_data(v) if isinstance(v, Mapping)
        else v
        for k, v in data.items()
    }


def summarize_arguments(arguments: Mapping[str, Any], max_length: int = 200) -> Dict[str, Any]:
    """Prepare tool arguments for logging.

    Sensitive keys are redacted and long strings (file contents, request
    bodies) are truncated.

    Args:
        arguments: Tool call arguments
        max_length: Maximum length of any logged string value

    Returns:
        A new dictionary safe to attach to a log record
    """
    summary = {}
    for key, value in redact_sensitive_data(arguments or {}).items():
        if isinstance(value, str):
            value = sanitize_log_message(value)
            if len(value) > max_length:
                value = f"{value[:max_length]}... ({len(value)} chars)"
        summary[key] = value
    return summary


def sanitize_log_message(message: str) -> str:
    """Remove sensitive patterns from log messages.

    Args:
        message: Log message to sanitize

    Returns:
        Sanitized message
    """
    result = message
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result)

    return result
