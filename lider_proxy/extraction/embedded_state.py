# lider_proxy/extraction/embedded_state.py

"""Locate and navigate the ``window.__INITIAL_STATE__`` JSON blob."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger("lider_proxy.extraction")

_STATE_ASSIGNMENT_RE = re.compile(r"window\.__INITIAL_STATE__\s*=\s*")


def extract_initial_state(html: str) -> dict[str, Any] | None:
    """Decode the initial-state object embedded in a page.

    Decoding starts right after the assignment and stops at the end of
    the first complete JSON value, so nested objects and trailing
    script code are handled without a closing-brace heuristic.
    """
    match = _STATE_ASSIGNMENT_RE.search(html)
    if not match:
        return None
    try:
        data, _ = json.JSONDecoder().raw_decode(html, match.end())
    except json.JSONDecodeError as exc:
        logger.debug("Initial state present but not decodable: %s", exc)
        return None
    if not isinstance(data, dict):
        return None
    return data


def state_path(state: dict[str, Any], path: str) -> Any:
    """Follow a dotted *path* (``'search.results'``) through *state*."""
    node: Any = state
    for key in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node
