"""
Catalog and grade-file loading.

This module manages two kinds of JSON files:

    data/catalog.json      static program catalog (semesters, UEs, modules)
    <any>.json             one semester snapshot with grades (CLI --grades / --out)

Design rationale:
- the catalog ships with the package and is read-only at runtime
- grade files are plain semester snapshots so a generated result can be fed back in

A broken catalog is a packaging error, so it raises CatalogError instead of
silently returning an empty program.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from moyenne.model import Semester, semester_from_dict, semester_to_dict


class CatalogError(ValueError):
    """Raised when a catalog or grade file cannot be turned into semesters."""


def _default_catalog_path() -> Path:
    """
    Return the path of catalog.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "catalog.json"


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"File not found: {path}") from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e


def _parse_semester(data: Any, source: Path) -> Semester:
    if not isinstance(data, dict):
        raise CatalogError(f"{source}: semester entry must be an object")
    try:
        semester = semester_from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"{source}: invalid semester {data.get('id')!r}: {e}") from e

    for ue in semester.ues:
        if ue.coefficient < 0 or any(m.coefficient < 0 for m in ue.modules):
            raise CatalogError(f"{source}: negative coefficient in {ue.id!r}")
    return semester


def load_catalog(path: str | Path | None = None) -> list[Semester]:
    """
    Load all semesters of the program catalog.

    Semester ids must be unique.
    """
    catalog_path = Path(path) if path is not None else _default_catalog_path()
    data = _read_json(catalog_path)

    raw = data.get("semesters") if isinstance(data, dict) else None
    if not isinstance(raw, list) or not raw:
        raise CatalogError(f"{catalog_path}: expected a non-empty 'semesters' list")

    semesters = [_parse_semester(s, catalog_path) for s in raw]

    seen: set[str] = set()
    for s in semesters:
        if s.id in seen:
            raise CatalogError(f"{catalog_path}: duplicate semester id {s.id!r}")
        seen.add(s.id)
        module_ids = s.module_ids()
        if len(module_ids) != len(set(module_ids)):
            raise CatalogError(f"{catalog_path}: duplicate module id in {s.id!r}")

    return semesters


def load_semester_file(path: str | Path) -> Semester:
    """
    Load one semester snapshot (with grades) from a JSON file.
    """
    p = Path(path)
    return _parse_semester(_read_json(p), p)


def save_semester_file(semester: Semester, path: str | Path) -> None:
    """
    Write one semester snapshot to a JSON file. Creates parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(semester_to_dict(semester), indent=2, ensure_ascii=False), encoding="utf-8")
