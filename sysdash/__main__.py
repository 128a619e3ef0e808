import logging
import os
import sys

import uvicorn

from sysdash.config import Settings, get_settings
from sysdash.logger import setup_logging, write_crash_log

logger = logging.getLogger("sysdash")

_DEFAULT_CRASH_LOG = "error.log"


def _serve(settings: Settings) -> None:
    setup_logging(settings.log_level)

    config = uvicorn.Config(
        "sysdash.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    # uvicorn exits via sys.exit() when binding fails and simply returns
    # when lifespan startup fails; both leave the server not started
    server.run()
    if not server.started:
        raise RuntimeError(
            f"SysDash failed to start on {settings.host}:{settings.port}"
        )


def main() -> int:
    # Settings may be the thing that fails, so the crash log path is read raw
    crash_log = os.getenv("SYSDASH_CRASH_LOG") or _DEFAULT_CRASH_LOG
    try:
        settings = get_settings()
        crash_log = settings.crash_log
        _serve(settings)
    except SystemExit as exc:
        if exc.code in (None, 0):
            return 0
        failure = exc
    except Exception as exc:
        failure = exc
    else:
        return 0

    path = write_crash_log(crash_log, failure)
    logger.error("SysDash crashed, traceback written to %s", path)
    return 1


if __name__ == "__main__":
    sys.exit(main())
