"""
Logging setup for the API process.

``setup_logging`` attaches a console handler (and a file handler when
``LOG_FILE`` is set) to the root logger, once per process.  Modules
log through ``logging.getLogger(__name__)``, so reservation, sales and
scheduler records carry their module path in the ``name`` field.
"""

import logging
from pathlib import Path
from typing import List, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger unless it already has handlers.

    ``level`` is a level name such as ``"DEBUG"`` (case insensitive);
    unknown names fall back to INFO.  ``logfile`` is resolved against
    the current working directory.
    """
    root = logging.getLogger()
    if root.handlers:
        # Configured already, e.g. by the test runner or an earlier create_app call.
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # One line per request drowns out the reservation logs.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
