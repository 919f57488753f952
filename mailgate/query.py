"""
query.py

Request query-string decoding for the gateway endpoints.
"""

from typing import Dict, Union
from urllib.parse import unquote

QueryValue = Union[str, bool]


def parse_query(query_string: str) -> Dict[str, QueryValue]:
    """
    Decode a raw query string into a flat mapping.

    Each ``key=value`` item is percent-decoded as a whole and split on the
    first ``=``. A key with no value (``?flag`` or ``?flag=``) maps to ``True``.
    Later duplicates win. ``+`` is kept literally, not read as a space.
    """
    params: Dict[str, QueryValue] = {}
    if query_string.startswith("?"):
        query_string = query_string[1:]

    for item in query_string.split("&"):
        key, _, value = unquote(item).partition("=")
        if key:
            params[key] = value or True
    return params

