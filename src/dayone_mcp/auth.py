"""Static bearer-token verification."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

_SCHEME_RE = re.compile(r"^(Bearer|API_KEY)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class AuthResult:
    authorized: bool
    error: str | None = None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


class AuthHandler:
    """Check ``Authorization`` headers against a fixed key set.

    Accepts ``Bearer <key>`` and ``API_KEY <key>`` (scheme is
    case-insensitive). The key set is frozen at construction.
    """

    def __init__(self, api_keys: Iterable[str]) -> None:
        self._api_keys = frozenset(api_keys)

    def verify_request(self, headers: Mapping[str, str]) -> AuthResult:
        auth_header = _header(headers, "Authorization")
        if not auth_header:
            return AuthResult(False, "Missing Authorization header")

        token = _SCHEME_RE.sub("", auth_header).strip()
        if not token:
            return AuthResult(False, "Invalid Authorization header format")

        if token not in self._api_keys:
            return AuthResult(False, "Invalid API key")

        return AuthResult(True)
