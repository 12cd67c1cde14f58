"""Interactive chat loop: one line in, one streamed reply out, until ``exit``."""
from __future__ import annotations
import argparse
import logging
import sys
from typing import TextIO

from aimy_client.client.transport import Client
from aimy_client.common.config import ClientConfig, load_config
from aimy_client.common.errors import ClientError, ConfigError, ServerError
from aimy_client.common.logging_setup import setup_logging
from aimy_client.common.schema import build_request

LOGGER = logging.getLogger("aimy.cli.chat")

USER_LABEL = "YOU: "
ASSISTANT_LABEL = "AIMY: "
EXIT_LINES = ("exit\n", "exit\r\n")


def run_session(client: Client, cfg: ClientConfig, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    """
    Run turns until the user types ``exit`` or something fails.

    Returns:
        Process exit code: 0 on ``exit``, 1 on any failure.
    """
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    system = cfg.system_prompt()
    template = cfg.template_text()

    while True:
        stdout.write(USER_LABEL)
        stdout.flush()
        try:
            line = stdin.readline()
        except (OSError, UnicodeDecodeError) as e:
            LOGGER.error("Error reading input: %s", e)
            return 1
        if not line.endswith("\n"):
            LOGGER.error("Error reading input: unexpected end of input")
            return 1
        if line in EXIT_LINES:
            return 0

        request = build_request(
            cfg.model,
            line.rstrip("\r\n"),
            options=cfg.build_options(),
            system=system,
            template=template,
            stream=True,
            format=cfg.format,
        )

        stdout.write(ASSISTANT_LABEL)
        stdout.flush()
        try:
            resp = client.generate(request, out=stdout)
        except ServerError as e:
            LOGGER.error("Server error: %s", e)
            if cfg.fail_fast:
                return 1
            stdout.write("\n")
            continue
        except ClientError as e:
            LOGGER.error("%s: %s", type(e).__name__, e)
            return 1
        LOGGER.info("Latency: %sms | in=%s out=%s", resp.latency_ms, resp.input_tokens, resp.output_tokens)


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Chat with a local inference server")
    ap.add_argument("--cfg", default=None, help="Config path (YAML)")
    ap.add_argument("--model", default=None, help="Model name, overrides config")
    ap.add_argument("--log-level", default=None, help="Logging level, e.g. INFO")
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.cfg, model=args.model, log_level=args.log_level)
    except ConfigError as e:
        setup_logging()
        LOGGER.error("%s", e)
        sys.exit(1)
    setup_logging(cfg.log_level)

    with Client(
        host=cfg.host,
        path=cfg.path,
        max_buffer_size=cfg.max_buffer_size,
        timeout=cfg.timeout,
    ) as client:
        try:
            code = run_session(client, cfg)
        except ConfigError as e:
            LOGGER.error("%s", e)
            code = 1
    sys.exit(code)

if __name__ == "__main__":
    main()
