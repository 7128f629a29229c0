"""JSON document I/O for the data directory."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_document(path: Path) -> Optional[Dict[str, Any]]:
    """Read a JSON object from ``path``.

    Returns None when the file is missing or cannot be parsed; the latter is
    logged since the caller will carry on with an empty document.
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Unreadable document %s, treating as empty: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Document %s is not a JSON object, treating as empty", path)
        return None
    return data


def load_model(path: Path, model: Type[ModelT]) -> Optional[ModelT]:
    """Read ``path`` and validate it as ``model``; None when missing or invalid."""
    data = read_document(path)
    if data is None:
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid %s document %s, treating as empty: %s", model.__name__, path, e)
        return None


def write_document(path: Path, data: Dict[str, Any]) -> None:
    """Write ``data`` as JSON, replacing ``path`` atomically.

    The payload goes to a sibling ``.tmp`` file which is fsynced and renamed
    over the destination, so readers never see a partial document.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
