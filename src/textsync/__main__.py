"""Run the TextSync API with uvicorn: ``python -m textsync [config.yaml]``."""

from __future__ import annotations

import sys

import uvicorn

from textsync.api.app import create_app
from textsync.core.config import load_config


def main() -> None:
    config = load_config(sys.argv[1] if len(sys.argv) > 1 else None)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
