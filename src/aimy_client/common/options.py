"""Model runner and sampling options.

Options are authored as typed pydantic models and only become an open
``{name: value}`` mapping at the wire boundary (``Options.to_wire``).
Values are never range-checked here; the server owns validation and accepts
sentinels such as ``-1``.

Parameter reference: https://github.com/jmorganca/ollama/blob/main/docs/modelfile.md#valid-parameters-and-values
"""
from __future__ import annotations
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Fields whose zero value is a real setting rather than "unset".
ZERO_IS_MEANINGFUL: frozenset[str] = frozenset(
    {
        "mirostat",       # 0 = disabled
        "temperature",    # 0 = greedy decoding
        "repeat_last_n",  # 0 = disabled
        "seed",
        "num_gpu",        # 0 = CPU only
        "main_gpu",       # 0 = first device
    }
)


class Runner(BaseModel):
    """Options fixed when the model is loaded; changing them reloads the model."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    use_numa: bool = Field(default=False, alias="numa")
    num_ctx: int = 4096
    num_batch: int = 512
    num_gqa: int = 1
    num_gpu: int = -1  # -1: set dynamically by the runtime
    main_gpu: int = 0
    low_vram: bool = False
    f16_kv: bool = True
    logits_all: bool = False
    vocab_only: bool = False
    use_mmap: bool = True
    use_mlock: bool = False
    embedding_only: bool = True
    rope_frequency_base: float = 10000.0
    rope_frequency_scale: float = 1.0
    num_thread: int = 15  # 0: let the runtime decide


class Options(Runner):
    """Runner options plus per-request sampling parameters."""

    num_keep: int = 0
    seed: int = -1
    num_predict: int = -1  # -1: infinite, -2: fill context
    top_k: int = 40
    top_p: float = 0.9
    tfs_z: float = 1.0  # 1.0 disables tail free sampling
    typical_p: float = 1.0
    repeat_last_n: int = 64  # -1: num_ctx
    temperature: float = 1.0
    repeat_penalty: float = 1.1
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    mirostat: int = 0  # 1: Mirostat, 2: Mirostat 2.0
    mirostat_tau: float = 5.0
    mirostat_eta: float = 0.1
    penalize_newline: bool = True
    stop: list[str] = Field(default_factory=list)

    def derive(self, **overrides: Any) -> "Options":
        """
        Return a copy with the named fields replaced.

        Fields already set explicitly stay explicit; overridden fields become
        explicit. Unknown names are kept as pass-through extension keys.

        Args:
            overrides: Field names (wire names or attribute names) and values.
        """
        fields = type(self).model_fields
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(self.model_extra or {})
        for key, value in overrides.items():
            info = fields.get(key)
            data[(info.alias or key) if info else key] = value
        return type(self).model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        """
        Convert to the open mapping sent as the request's ``options`` object.

        A zero-valued field is dropped unless it was set explicitly or its zero
        is meaningful (see ``ZERO_IS_MEANINGFUL``). Extension keys always pass.
        """
        explicit = self.model_fields_set
        wire: dict[str, Any] = {}
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            key = info.alias or name
            if _is_zero(value) and name not in explicit and name not in ZERO_IS_MEANINGFUL:
                continue
            wire[key] = list(value) if isinstance(value, list) else value
        if self.model_extra:
            wire.update(self.model_extra)
        return wire


def _is_zero(value: Any) -> bool:
    if isinstance(value, bool):
        return value is False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return value is None


def default_options() -> Options:
    """Return a fresh, fully populated options instance with the documented defaults."""
    return Options()
