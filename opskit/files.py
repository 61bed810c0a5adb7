"""Small filesystem and JSON file helpers."""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def list_subdirs(parent: str | os.PathLike) -> list[str]:
    """Return the names of the directories directly under ``parent``, sorted."""
    with os.scandir(parent) as entries:
        return sorted(
            entry.name for entry in entries if entry.is_dir(follow_symlinks=False)
        )


def is_dir(path: str | os.PathLike) -> bool:
    """Whether ``path`` exists and is a directory."""
    return Path(path).is_dir()


def _json_default(value):
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_json_file(value, path: str | os.PathLike) -> None:
    """Write ``value`` as tab-indented JSON to ``path``, replacing the file."""
    text = json.dumps(
        value, indent="\t", ensure_ascii=False, allow_nan=False, default=_json_default
    )
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    Path(path).write_bytes(text.encode("utf-8"))


def read_json_file(path: str | os.PathLike):
    """Read and decode the JSON document stored in ``path``."""
    return json.loads(Path(path).read_bytes())