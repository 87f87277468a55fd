"""Load the schema file from disk."""

from __future__ import annotations

from pathlib import Path

from .errors import SchemaReadError
from .logging_config import get_logger

logger = get_logger(__name__)


def load_schema(path: str | Path) -> str:
    """Read the schema text, raising SchemaReadError on any I/O failure."""
    schema_file = Path(path)
    logger.debug("Reading schema from %s", schema_file)
    try:
        with open(schema_file, encoding="utf-8-sig") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SchemaReadError(
            f"failed to read proto file {schema_file}: {exc}"
        ) from exc
