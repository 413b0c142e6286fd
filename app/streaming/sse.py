"""Buffered decoding of line-delimited ``data:`` events.

Upstream providers and our own chat endpoint both speak the same minimal
subset of Server-Sent Events: every event is a single ``data: <json>`` line
followed by a blank line. Network reads do not respect line boundaries, so a
JSON payload may arrive split over any number of chunks (and a multibyte
character may be split between two reads). The decoder keeps the trailing
partial line in a buffer until the newline that completes it arrives.
"""
import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, List

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class SSEDecoder:
    def __init__(self):
        self._buffer = ""
        self.skipped = 0

    def feed(self, text: str) -> List[Any]:
        """Add decoded text and return the payloads of every completed line."""
        self._buffer += text
        lines = self._buffer.split("\n")
        # last element is "" when the text ended on a newline, else a partial line
        self._buffer = lines.pop()
        payloads = []
        for line in lines:
            payload = self._parse_line(line)
            if payload is not None:
                payloads.append(payload)
        return payloads

    def flush(self) -> List[Any]:
        """Parse whatever is left once the stream has ended."""
        line, self._buffer = self._buffer, ""
        payload = self._parse_line(line)
        return [payload] if payload is not None else []

    def reset(self):
        self._buffer = ""
        self.skipped = 0

    def _parse_line(self, line: str):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        data = line[len(DATA_PREFIX):].strip()
        if not data or data == DONE_SENTINEL:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            self.skipped += 1
            logger.debug("Skipping malformed event line: %.200s", data)
            return None


async def iter_payloads(chunks: AsyncIterable[bytes], decoder: SSEDecoder | None = None) -> AsyncIterator[Any]:
    """Yield parsed payloads from a stream of raw byte chunks."""
    decoder = decoder or SSEDecoder()
    text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    async for chunk in chunks:
        for payload in decoder.feed(text_decoder.decode(chunk)):
            yield payload
    for payload in decoder.feed(text_decoder.decode(b"", final=True)):
        yield payload
    for payload in decoder.flush():
        yield payload


def format_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"
