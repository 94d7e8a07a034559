"""
Pulls the human readable answer out of whatever JSON the agent endpoint returns.

The agent (a Langflow flow behind a webhook) has no stable response shape, so we
try an ordered list of extraction strategies and keep the first one that yields
a non-empty string.
"""
from typing import Any, Callable, Iterable, Optional, Tuple, Union

PathStep = Union[str, int]

_MISSING = object()


def resolve_path(payload: Any, path: Iterable[PathStep]) -> Any:
    """Walks `path` through nested dicts/lists. Returns _MISSING when a step does not apply."""
    current = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not 0 <= step < len(current):
                return _MISSING
            current = current[step]
        else:
            if not isinstance(current, dict) or step not in current:
                return _MISSING
            current = current[step]
    return current


def path_strategy(*path: PathStep) -> Callable[[Any], Optional[str]]:
    def strategy(payload):
        value = resolve_path(payload, path)
        return value if isinstance(value, str) else None

    strategy.__name__ = ".".join(str(p) for p in path)
    return strategy


def messages_strategy(payload: Any) -> Optional[str]:
    # Chat-history style: {"messages": [{"text": ...}, ...]}
    messages = payload.get("messages") if isinstance(payload, dict) else None
    if not isinstance(messages, list):
        return None
    for message in messages:
        if isinstance(message, dict) and isinstance(message.get("text"), str) and message["text"].strip():
            return message["text"]
    return None


# --- STRATEGIES (highest priority first) ---
EXTRACTION_STRATEGIES: Tuple[Callable[[Any], Optional[str]], ...] = (
    path_strategy("outputs", 0, "outputs", 0, "results", "message", "text"),
    path_strategy("outputs", 0, "outputs", 0, "results", "text"),
    path_strategy("result", "text"),
    path_strategy("message", "text"),
    path_strategy("text"),
    path_strategy("output"),
    path_strategy("answer"),
    path_strategy("response"),
    messages_strategy,
)


def extract_text(payload: Any, strategies=EXTRACTION_STRATEGIES) -> str:
    """
    Returns the first non-empty candidate (trimmed), or "" if nothing matches.
    Absence of text is a valid outcome, never an error.
    """
    if not isinstance(payload, dict):
        return ""
    for strategy in strategies:
        candidate = strategy(payload)
        if candidate and candidate.strip():
            return candidate.strip()
    return ""
