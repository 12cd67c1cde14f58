"""Incremental decoder for newline-delimited JSON generation streams.

Each line of the body is one record: ``{"error": "..."}`` ends the stream with
a server failure, anything else may carry a ``response`` text fragment that is
written to the output as soon as it arrives.
"""
from __future__ import annotations
import enum
import json
import logging
import sys
from typing import Any, Iterable, Iterator, TextIO

from aimy_client.common.errors import BufferExceededError, DecodeError, ServerError
from aimy_client.common.schema import GenResponse

LOGGER = logging.getLogger("aimy.client.decoder")

MAX_BUFFER_SIZE = 65535


class DecoderState(enum.Enum):
    READING = "reading"
    ERROR_DETECTED = "error_detected"
    DONE = "done"


class StreamDecoder:
    """
    Decode an NDJSON body chunk by chunk.

    A line plus its terminator must fit in ``max_buffer_size`` bytes; a longer
    line raises ``BufferExceededError`` instead of being truncated.
    """

    def __init__(self, out: TextIO | None = None, max_buffer_size: int = MAX_BUFFER_SIZE) -> None:
        if max_buffer_size <= 0:
            raise ValueError("max_buffer_size must be positive")
        self.out = out if out is not None else sys.stdout
        self.max_buffer_size = max_buffer_size
        self.state = DecoderState.READING

    def iter_lines(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        """Split raw body chunks into lines, dropping ``\\n`` and a trailing ``\\r``."""
        buf = bytearray()
        for chunk in chunks:
            buf.extend(chunk)
            while True:
                idx = buf.find(b"\n")
                if idx < 0:
                    break
                if idx >= self.max_buffer_size:
                    raise BufferExceededError(self.max_buffer_size)
                line = bytes(buf[:idx])
                del buf[: idx + 1]
                yield _drop_cr(line)
            if len(buf) >= self.max_buffer_size:
                raise BufferExceededError(self.max_buffer_size)
        if buf:
            yield _drop_cr(bytes(buf))

    @staticmethod
    def parse_record(line: bytes) -> dict[str, Any]:
        """
        Decode one line into a stream record.

        Raises:
            DecodeError: If the line is not a JSON object.
        """
        try:
            record = json.loads(line, parse_constant=_reject_constant)
        except ValueError as e:
            raise DecodeError(f"unmarshal: {e}") from e
        if not isinstance(record, dict):
            raise DecodeError(f"unmarshal: expected a JSON object, got {type(record).__name__}")
        error = record.get("error")
        if error is not None and not isinstance(error, str):
            raise DecodeError(f"unmarshal: error field must be a string, got {type(error).__name__}")
        return record

    def decode(self, chunks: Iterable[bytes]) -> GenResponse:
        """
        Consume the body, printing each fragment, and summarize the stream.

        Raises:
            DecodeError: A line is not a valid record or does not fit the buffer.
            ServerError: A record carries a non-empty ``error`` field.
        """
        self.state = DecoderState.READING
        fragments: list[str] = []
        last: dict[str, Any] = {}
        for line in self.iter_lines(chunks):
            record = self.parse_record(line)
            if record.get("error"):
                self.state = DecoderState.ERROR_DETECTED
                LOGGER.debug("Server error record: %s", record["error"])
                raise ServerError(record["error"])

            fragment = record.get("response")
            if fragment is None:
                fragment = ""
            elif not isinstance(fragment, str):
                raise DecodeError(f"unmarshal: response field must be a string, got {type(fragment).__name__}")
            if fragment:
                self.out.write(fragment)
                self.out.flush()
                fragments.append(fragment)
            last = record

        self.state = DecoderState.DONE
        self.out.write("\n")
        self.out.flush()
        return GenResponse(
            text="".join(fragments),
            done=last.get("done") is True,
            context=_token_list(last.get("context")),
            input_tokens=_count(last.get("prompt_eval_count")),
            output_tokens=_count(last.get("eval_count")),
        )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


# A summary value of the wrong shape reads as absent.
def _count(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _token_list(value: Any) -> list[int]:
    if isinstance(value, list) and all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        return list(value)
    return []


def _drop_cr(line: bytes) -> bytes:
    if line.endswith(b"\r"):
        return line[:-1]
    return line
