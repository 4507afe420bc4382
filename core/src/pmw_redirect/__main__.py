from __future__ import annotations

import os

import uvicorn

from pmw_redirect.app import create_app
from pmw_redirect.config import load_redirect_config
from pmw_redirect.logsink import configure_logging


def main() -> None:
    config = load_redirect_config()

    configure_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        max_size_mb=config.logging.max_size_mb,
        backup_count=config.logging.backup_count,
    )

    host = os.environ.get("PMW_REDIRECT_BIND") or config.network.bind_host

    env_port = os.environ.get("PMW_REDIRECT_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    main()
