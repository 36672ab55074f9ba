"""
HTTP and wire-format helpers shared by the OpenID and profile modules.

This module handles:
- Borrowing the caller's httpx client, or opening a short-lived one
- Parsing OpenID key-value form bodies
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx


@asynccontextmanager
async def client_scope(client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield ``client`` unchanged, or a new client that is closed on exit.

    A borrowed client is never closed here; its owner decides its lifetime
    and timeout.
    """
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient() as owned:
        yield owned


def parse_key_value_form(body: str) -> Dict[str, str]:
    """
    Parse an OpenID key-value form body (``key:value`` per line).

    Keys are lower-cased and both sides are stripped. Lines without a colon
    are ignored. When a key repeats, the first occurrence wins.

    Example:
        >>> parse_key_value_form("ns:http://specs.openid.net/auth/2.0\\nis_valid:true\\n")
        {'ns': 'http://specs.openid.net/auth/2.0', 'is_valid': 'true'}
    """
    fields: Dict[str, str] = {}
    for line in body.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields.setdefault(key.strip().lower(), value.strip())
    return fields
