from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from trio_utbm.engine.types import CATEGORY_NAMES, Category, CourseCatalog, CourseDefinition


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_category(raw: str) -> Category:
    if raw not in CATEGORY_NAMES:
        raise ContentError(f"Unknown category: {raw}")
    return raw  # type: ignore[return-value]


def parse_catalog(raw: object, *, context: str = "courses") -> CourseCatalog:
    if not isinstance(raw, dict):
        raise ContentError(f"{context} must be an object")
    raw_courses = raw.get("courses")
    if not isinstance(raw_courses, list):
        raise ContentError(f"{context}.courses must be a list")
    default_copies = raw.get("copies_per_course", 3)
    if not isinstance(default_copies, int):
        raise ContentError("copies_per_course must be int")

    courses: dict[str, CourseDefinition] = {}
    for i, item in enumerate(raw_courses):
        if not isinstance(item, dict):
            raise ContentError(f"{context}.courses[{i}] must be an object")
        code = _require_str(item, "code")
        if code in courses:
            raise ContentError(f"Duplicate course code: {code}")
        copies = item.get("copies", default_copies)
        if not isinstance(copies, int):
            raise ContentError(f"Expected int for copies of {code}")
        title = item.get("title", "")
        courses[code] = CourseDefinition(
            code=code,
            category=_parse_category(_require_str(item, "category")),
            rank=_require_int(item, "rank"),
            copies=copies,
            title=title if isinstance(title, str) else "",
        )

    special_code = _require_str(raw, "special_code")
    if special_code not in courses:
        raise ContentError(f"Special course {special_code} is not in the catalog")

    # Ranks order hands, so one rank must mean one course.
    seen: dict[int, str] = {}
    for c in courses.values():
        if c.rank in seen:
            raise ContentError(f"Courses {seen[c.rank]} and {c.code} share rank {c.rank}")
        seen[c.rank] = c.code

    return CourseCatalog(courses=courses, special_code=special_code)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_catalog(self) -> CourseCatalog:
        path = self._data_dir / "courses.json"
        schema = _load_json(self._schema_dir / "courses.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        return parse_catalog(raw, context=str(path))

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_catalog()
