"""Loading record collections and queries for the CLI."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import msgspec
import yaml

from docquery.core.exceptions import InvalidQueryError, RecordSourceError

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_LINES_SUFFIXES = {".jsonl", ".ndjson"}


def load_records(path: Path) -> list[Any]:
    """Load a list of records from a JSON, JSON Lines, or YAML file.

    Raises:
        RecordSourceError: If the file cannot be read or is not a list
    """
    suffix = path.suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        elif suffix in JSON_LINES_SUFFIXES:
            data = msgspec.json.Decoder().decode_lines(path.read_bytes())
        else:
            data = msgspec.json.decode(path.read_bytes())
    except (OSError, UnicodeDecodeError, yaml.YAMLError, msgspec.DecodeError) as e:
        raise RecordSourceError(str(path), str(e)) from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise RecordSourceError(
            str(path), f"expected a list of records, got {type(data).__name__}"
        )
    return data


def parse_query(text: str) -> Mapping[str, Any]:
    """Parse a JSON query given inline or as ``@path``.

    Raises:
        InvalidQueryError: If the text is not valid JSON or not an object
    """
    try:
        if text.startswith("@"):
            raw = Path(text[1:]).read_bytes()
        else:
            raw = text.encode("utf-8")
        query = msgspec.json.decode(raw)
    except OSError as e:
        raise InvalidQueryError(f"cannot read query file: {e}") from e
    except msgspec.DecodeError as e:
        raise InvalidQueryError(f"query is not valid JSON: {e}") from e

    if not isinstance(query, dict):
        raise InvalidQueryError(
            f"query must be a JSON object, got {type(query).__name__}"
        )
    return query
