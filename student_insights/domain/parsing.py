# student_insights/domain/parsing.py
import json
from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class ParsedList:
    """Result of decoding a text-encoded list column."""
    values: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_list_field(raw: Any) -> ParsedList:
    """
    Decode a JSON-in-a-column list ("[\"music\", \"drama\"]").

    Never raises: malformed input yields an empty list plus an ``error`` describing
    what was wrong, so the caller can log it and keep going.
    """
    if raw is None:
        return ParsedList()
    if isinstance(raw, (list, tuple)):
        return ParsedList(values=[str(v) for v in raw if v is not None])
    if not isinstance(raw, str):
        return ParsedList(error=f"unsupported list encoding: {type(raw).__name__}")

    text = raw.strip()
    if not text:
        return ParsedList()

    try:
        decoded = json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        return ParsedList(error=f"invalid JSON list: {e}")

    if not isinstance(decoded, list):
        return ParsedList(error=f"expected a JSON list, got {type(decoded).__name__}")

    return ParsedList(values=[str(v) for v in decoded if v is not None])
