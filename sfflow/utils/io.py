# sfflow/utils/io.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml

# -------- Path helpers --------
PathLike = Union[str, Path]


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path."""
    return p if isinstance(p, Path) else Path(p)


# -------- Text --------
def read_text(path: PathLike, encoding: str = "utf-8") -> str:
    """
    Read a whole text file.
    FileNotFoundError / PermissionError are left for the caller to translate.
    """
    return to_path(path).read_text(encoding=encoding)


def write_text(path: PathLike, text: str, encoding: str = "utf-8") -> Path:
    """
    Write text atomically (temp file in the same directory, then replace).

    The parent directory must already exist: a missing directory surfaces as
    FileNotFoundError rather than being created.
    """
    p = to_path(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    try:
        # newline="" keeps "\n" as written, also on Windows
        with tmp.open("w", encoding=encoding, newline="") as f:
            f.write(text)
        tmp.replace(p)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return p


# -------- Structured data --------
def read_json(path: PathLike) -> Any:
    """Load JSON file with UTF-8."""
    with to_path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically, pretty-formatted."""
    return write_text(path, json.dumps(data, ensure_ascii=False, indent=indent) + "\n")


def read_yaml(path: PathLike) -> Any:
    """Load a YAML file with safe_load."""
    with to_path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_any(path: PathLike) -> Any:
    """
    Load data by extension:
      - .json -> JSON
      - .yaml/.yml -> YAML
    """
    p = to_path(path)
    suf = p.suffix.lower()
    if suf == ".json":
        return read_json(p)
    if suf in (".yaml", ".yml"):
        return read_yaml(p)
    raise ValueError(f"Unsupported extension: {suf} for {p}")
