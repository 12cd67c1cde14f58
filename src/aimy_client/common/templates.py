"""Prompt templating helpers."""
from __future__ import annotations
from pathlib import Path

def load_template(path: str | Path) -> str:
    """
    Load a system prompt or template file.

    Args:
        path: Path to the text file.
    """
    return Path(path).read_text(encoding="utf-8")
