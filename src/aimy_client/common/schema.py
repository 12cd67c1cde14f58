"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
import base64
import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from aimy_client.common.options import Options, default_options


class GenerateRequest(BaseModel):
    """Body of a POST to ``/api/generate``."""

    model: str = Field(min_length=1)
    prompt: str = ""
    system: str = ""
    template: str = ""
    context: list[int] | None = None
    stream: bool | None = None
    raw: bool = False
    format: str = ""
    images: list[bytes] | None = None
    options: Options = Field(default_factory=default_options)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready body; ``options`` becomes an open mapping here."""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "system": self.system,
            "template": self.template,
        }
        if self.context is not None:
            payload["context"] = list(self.context)
        if self.stream is not None:
            payload["stream"] = self.stream
        payload["raw"] = self.raw
        payload["format"] = self.format
        if self.images is not None:
            payload["images"] = [base64.b64encode(img).decode("ascii") for img in self.images]
        payload["options"] = self.options.to_wire()
        return payload

    def to_json(self) -> bytes:
        return json.dumps(self.to_payload(), ensure_ascii=False).encode("utf-8")


def build_request(
    model: str,
    prompt: str,
    *,
    options: Options | None = None,
    system: str = "",
    template: str = "",
    context: list[int] | None = None,
    stream: bool | None = None,
    raw: bool = False,
    format: str = "",  # noqa: A002
    images: list[bytes] | None = None,
) -> GenerateRequest:
    """
    Build a request envelope for one conversation turn.

    Args:
        model: Model identifier; must be non-empty.
        prompt: Raw prompt text.
        options: Options to send; a fresh default set when omitted.

    Raises:
        pydantic.ValidationError: If ``model`` is empty.
    """
    return GenerateRequest(
        model=model,
        prompt=prompt,
        system=system,
        template=template,
        context=context,
        stream=stream,
        raw=raw,
        format=format,
        images=images,
        options=options if options is not None else default_options(),
    )


@dataclass
class GenResponse:
    """Text generation response metadata collected from one stream."""
    text: str
    done: bool = False
    context: list[int] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
