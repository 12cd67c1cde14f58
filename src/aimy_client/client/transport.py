"""HTTP transport for the generate endpoint.

One ``Client`` owns the endpoint and an ``httpx.Client`` connection pool; it is
built once at startup and passed to whoever sends requests. Requests are
strictly sequential, so the pool is reused without locking.
"""
from __future__ import annotations
import logging
import platform
import time
from typing import Iterable, TextIO

import httpx

from aimy_client import __version__
from aimy_client.client.decoder import MAX_BUFFER_SIZE, StreamDecoder
from aimy_client.common.errors import BufferExceededError, DecodeError, StatusError, TransportError
from aimy_client.common.schema import GenerateRequest, GenResponse

LOGGER = logging.getLogger("aimy.client.transport")


def user_agent() -> str:
    return (
        f"aimy-client/{__version__} "
        f"({platform.machine()} {platform.system().lower()}) "
        f"Python/{platform.python_version()}"
    )


class Client:
    """
    Streaming client bound to one ``host`` + ``path`` endpoint.

    Args:
        host: ``host:port`` of the inference server.
        path: Request path, e.g. ``/api/generate``.
        http: Connection pool to use; a new one without timeouts by default.
        max_buffer_size: Longest response line accepted by the decoder.
        timeout: Timeout for a new pool; ``None`` waits forever.
    """

    def __init__(
        self,
        host: str = "127.0.0.1:6666",
        path: str = "/api/generate",
        http: httpx.Client | None = None,
        max_buffer_size: int = MAX_BUFFER_SIZE,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self.path = path if path.startswith("/") else f"/{path}"
        self.max_buffer_size = max_buffer_size
        self._http = http if http is not None else httpx.Client(timeout=timeout)

    @property
    def url(self) -> str:
        return f"http://{self.host}{self.path}"

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def stream(self, method: str, data: bytes, out: TextIO | None = None) -> GenResponse:
        """
        Send ``data`` and render the NDJSON reply to ``out`` as it arrives.

        Raises:
            TransportError: The request could not be sent or the body broke off.
            StatusError: The server answered with status >= 400.
            DecodeError: A response line is not a valid record or is too long.
            ServerError: The server reported an error in the stream.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/x-ndjson",
            "User-Agent": user_agent(),
        }
        decoder = StreamDecoder(out=out, max_buffer_size=self.max_buffer_size)
        LOGGER.debug("%s %s (%d bytes)", method, self.url, len(data))

        start = time.time()
        try:
            with self._http.stream(method, self.url, content=data, headers=headers) as response:
                if response.status_code >= 400:
                    raise StatusError(
                        response.status_code,
                        response.reason_phrase,
                        _error_message(decoder, response.iter_bytes()),
                    )
                resp = decoder.decode(response.iter_bytes())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            LOGGER.debug("Request to %s failed: %s", self.url, e)
            raise TransportError(str(e) or type(e).__name__) from e
        resp.latency_ms = int((time.time() - start) * 1000)
        return resp

    def generate(self, request: GenerateRequest, out: TextIO | None = None) -> GenResponse:
        """POST ``request`` to the endpoint and stream the reply."""
        return self.stream("POST", request.to_json(), out=out)


def _error_message(decoder: StreamDecoder, chunks: Iterable[bytes]) -> str:
    """Server ``error`` text from the first line of an error body, if any.

    Only the first line is read, through the decoder's bounded scanner.
    """
    try:
        first = next(decoder.iter_lines(chunks), b"").strip()
    except BufferExceededError:
        return ""
    if not first:
        return ""
    try:
        record = StreamDecoder.parse_record(first)
    except DecodeError:
        return first.decode("utf-8", errors="replace")[:200]
    return record.get("error") or ""
