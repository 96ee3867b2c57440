import logging
import os
from pathlib import Path


def configure_logging(log_file: Path | None = None) -> None:
    level_name = os.getenv("HABITGRID_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    kwargs = {}
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        kwargs["filename"] = str(log_file)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        **kwargs,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
