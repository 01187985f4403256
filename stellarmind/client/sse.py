"""Server-sent events framing for the exploration stream."""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"


def encode_event(event: BaseModel) -> str:
    """Frame one stream event as ``data: <json>\\n\\n`` using the wire aliases."""
    return f"data: {event.model_dump_json(by_alias=True)}\n\n"


class SSEDecoder:
    """Incremental decoder for a ``text/event-stream`` body.

    Chunks may split lines and even multi-byte UTF-8 sequences anywhere; the
    decoder holds the trailing partial line until the rest arrives. Only
    ``data:`` lines are parsed. Payloads that are not valid JSON are logged
    and dropped.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> list[dict[str, Any]]:
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever is left once the stream has ended."""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        return self._parse_lines([remainder])

    def _parse_lines(self, lines: list[str]) -> list[dict[str, Any]]:
        events = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX):].strip()
            if not payload:
                continue
            try:
                event = json.loads(payload)
            except json.JSONDecodeError:
                logger.warning("Failed to parse SSE data: %r", payload)
                continue
            if isinstance(event, dict):
                events.append(event)
            else:
                logger.warning("Ignoring non-object SSE data: %r", payload)
        return events
