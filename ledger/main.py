"""Run the ledger HTTP API.

    python -m ledger.main [port]

Host and port default to LEDGER_HOST / LEDGER_PORT (0.0.0.0:8080).
"""

import logging
import os
import sys

import uvicorn

from .app import create_app

log = logging.getLogger("main")


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    raw_port = args[0] if args else os.getenv("LEDGER_PORT", "8080")
    try:
        port = int(raw_port)
    except ValueError:
        raise SystemExit(f"invalid port: {raw_port!r}")
    host = os.getenv("LEDGER_HOST", "0.0.0.0")

    log.info("starting ledger on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
