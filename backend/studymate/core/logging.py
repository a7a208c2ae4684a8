from __future__ import annotations

import logging

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level)

    # Idempotent across repeated calls.
    if any(getattr(handler, "_studymate", False) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._studymate = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
