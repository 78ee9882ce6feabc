"""
Marker-based field extraction from Gemini responses.

This is a scan, not a JSON parser. It finds the first textual occurrence
of a key followed by a string value and copies that value out. Brace and
bracket nesting is not tracked, so it is only suitable for documents
where the key cannot appear earlier as unrelated content, which holds
for generateContent replies:

    {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    {"error": {"code": 400, "message": "...", "status": "..."}}
"""

import re
from typing import Optional

from .errors import InvalidArgumentError, MalformedResponseError

UNKNOWN_API_ERROR = "Unknown API error"

_UNESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}

_ERROR_MARKER = re.compile(r'"error"\s*:\s*\{')


def _marker(key: str):
    return re.compile(r'"%s"\s*:\s*"' % re.escape(key))


def _as_text(document) -> str:
    if document is None:
        raise InvalidArgumentError("Response document is required")
    if not isinstance(document, str):
        document = bytes(document).decode("utf-8", errors="replace")
    if not document:
        raise InvalidArgumentError("Response document is empty")
    return document


def _scan_string(document: str, start: int, key: str) -> str:
    """Copy the string value starting at start, up to the closing quote."""
    end = start
    in_escape = False
    while end < len(document):
        ch = document[end]
        if in_escape:
            in_escape = False
        elif ch == "\\":
            in_escape = True
        elif ch == '"':
            break
        end += 1
    else:
        raise MalformedResponseError(
            f"Unterminated string value for {key!r}", document
        )

    chars = []
    in_escape = False
    for ch in document[start:end]:
        if in_escape:
            chars.append(_UNESCAPES.get(ch, ch))
            in_escape = False
        elif ch == "\\":
            in_escape = True
        else:
            chars.append(ch)
    return "".join(chars)


def extract_field(document, key: str, start: int = 0) -> Optional[str]:
    """
    Return the first string value stored under key, unescaped.

    Args:
        document: Response as str or UTF-8 bytes
        key: Field name, e.g. "text"
        start: Offset to begin searching from

    Returns:
        The value, or None if the key never appears with a string value

    Raises:
        InvalidArgumentError: document missing or empty
        MalformedResponseError: value found but never terminated
    """
    document = _as_text(document)
    if not key:
        raise InvalidArgumentError("Field key is required")

    match = _marker(key).search(document, start)
    if match is None:
        return None
    return _scan_string(document, match.end(), key)


def extract_text(document) -> Optional[str]:
    """Generated text of the first candidate part."""
    return extract_field(document, "text")


def extract_error_message(document) -> Optional[str]:
    """
    Message of an API error object.

    Returns None if the document holds no "error" object, and
    UNKNOWN_API_ERROR if it has one without a message.
    """
    document = _as_text(document)
    match = _ERROR_MARKER.search(document)
    if match is None:
        return None
    message = extract_field(document, "message", match.end())
    if message is None:
        return UNKNOWN_API_ERROR
    return message
