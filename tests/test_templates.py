from __future__ import annotations

import io
import logging

from aimy_client.common.logging_setup import setup_logging
from aimy_client.common.templates import load_template


def test_load_template_reads_utf8(tmp_path) -> None:
    path = tmp_path / "system.txt"
    path.write_text("Tu es AIMY, l'assistante.", encoding="utf-8")
    assert load_template(path) == "Tu es AIMY, l'assistante."


def test_load_repo_config_template() -> None:
    text = load_template("configs/client.yaml")
    assert "max_buffer_size: 65535" in text


def test_setup_logging_level_by_name() -> None:
    root = logging.getLogger()
    saved = (root.handlers[:], root.level)
    stream = io.StringIO()
    try:
        setup_logging("info", stream=stream)
        logging.getLogger("aimy.test").info("hello")
        assert root.level == logging.INFO
        assert "INFO aimy.test: hello" in stream.getvalue()
        setup_logging("nonsense", stream=stream)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
