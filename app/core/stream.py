"""NDJSON decoding of the Notion inference stream.

Upstream sends one JSON record per line, but the transport delivers bytes in
arbitrary chunks. ``NdjsonDecoder`` keeps the unterminated tail of each chunk
and only parses complete lines. ``iter_fragments`` is the single producer of
content fragments; both response modes consume it.
"""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional

import httpx

from app.core.errors import UpstreamStreamError

logger = logging.getLogger(__name__)

FRAGMENT_TYPE = "markdown-chat"
TERMINAL_FIELD = "recordMap"
# Longest NDJSON record kept in memory; recordMap payloads can be large
MAX_LINE_BYTES = 16 * 1024 * 1024


class NdjsonDecoder:
    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES):
        self._buffer = bytearray()
        self._discarding = False
        self.max_line_bytes = max_line_bytes
        self.finished = False
        self.skipped_lines = 0

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        """Consume a chunk and return the complete records it finished.

        Stops at the first record carrying ``recordMap``; that record is
        returned, nothing after it is. A line longer than ``max_line_bytes``
        is dropped, even while it is still incomplete.
        """
        if self.finished or not chunk:
            return []

        # The carry-over never holds a newline, so only the new bytes are scanned
        search_from = len(self._buffer)
        self._buffer += chunk

        records = []
        line_start = 0
        while True:
            end = self._buffer.find(b"\n", search_from)
            if end == -1:
                break
            raw = bytes(self._buffer[line_start:end])
            line_start = search_from = end + 1

            if self._discarding:
                # Tail of an oversize line that was already counted
                self._discarding = False
                continue
            if len(raw) > self.max_line_bytes:
                self._skip_oversize(len(raw))
                continue

            record = self._parse_line(raw)
            if record is None:
                continue
            records.append(record)
            if TERMINAL_FIELD in record:
                self.finished = True
                self._buffer.clear()
                return records

        del self._buffer[:line_start]
        if len(self._buffer) > self.max_line_bytes:
            if not self._discarding:
                self._skip_oversize(len(self._buffer))
            self._buffer.clear()
            self._discarding = True
        return records

    def _skip_oversize(self, size: int) -> None:
        self.skipped_lines += 1
        logger.debug(f"Skipping NDJSON line over {self.max_line_bytes} bytes ({size}+ bytes)")

    def _parse_line(self, raw: bytes) -> Optional[Dict[str, Any]]:
        line = raw.strip()
        if not line:
            return None
        try:
            record = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self.skipped_lines += 1
            logger.debug(f"Skipping malformed NDJSON line ({e}): {line[:200]!r}")
            return None
        if not isinstance(record, dict):
            self.skipped_lines += 1
            logger.debug(f"Skipping non-object NDJSON line: {line[:200]!r}")
            return None
        return record


def extract_fragment(record: Dict[str, Any]) -> Optional[str]:
    """Return the text of a markdown-chat record, or None for anything else."""
    if record.get("type") != FRAGMENT_TYPE:
        return None
    value = record.get("value")
    if isinstance(value, str) and value:
        return value
    return None


async def iter_fragments(byte_chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """
    Yield content fragments from a raw upstream byte stream.

    Returns as soon as the terminal recordMap record is seen without reading
    the rest of the body; the caller owns closing the upstream response.
    Transport and content-decoding failures surface as
    UpstreamStreamError. A partial line left over at end of input is dropped.
    """
    decoder = NdjsonDecoder()
    try:
        async for chunk in byte_chunks:
            for record in decoder.feed(chunk):
                fragment = extract_fragment(record)
                if fragment:
                    yield fragment
            if decoder.finished:
                break
    except (httpx.HTTPError, httpx.StreamError) as e:
        # HTTPError also covers DecodingError from a corrupt gzip/deflate body
        raise UpstreamStreamError(f"Error while reading Notion API stream: {e}") from e

    if decoder.skipped_lines:
        logger.debug(f"Skipped {decoder.skipped_lines} malformed line(s) from upstream")
