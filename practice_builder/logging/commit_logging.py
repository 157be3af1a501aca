"""Structured trail of practice saves.

Each commit attempt emits one JSON line: ``practice_committed`` on success or
``commit_failed`` with the step that broke.
"""

import json
import logging
import sys
from typing import Any, Dict

logger = logging.getLogger("builder")
logger.setLevel(logging.INFO)

# Commit lines go to stdout only, never through the root handlers.
if not logger.handlers:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter("[BUILDER] %(asctime)s %(levelname)s: %(message)s"))
    logger.addHandler(handler)

logger.propagate = False


def log_commit_event(data: Dict[str, Any]) -> None:
    """Write ``data`` as one JSON line; dates and ids are stringified."""

    logger.info(json.dumps(data, ensure_ascii=False, default=str))
