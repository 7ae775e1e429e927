"""Utilities to load the plan catalog and the seed roster from CSV."""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, Sequence, TextIO

from .models import STUDENT_STATUSES, Plan, Student


class DataLoaderError(RuntimeError):
    """Raised when a CSV file cannot be parsed correctly."""


CsvSource = str | Path | TextIO


def _validate_headers(headers: Sequence[str], expected: Sequence[str], *, file_label: str) -> None:
    missing = [name for name in expected if name not in headers]
    if missing:
        raise DataLoaderError(f"File '{file_label}' is missing required columns: {', '.join(missing)}")


def _prepare_reader(csv_source: CsvSource) -> tuple[csv.DictReader, Callable[[], None], str]:
    if isinstance(csv_source, (str, Path)):
        path = Path(csv_source)
        fh = path.open(newline="", encoding="utf-8-sig")
        file_label = str(path)

        def closer() -> None:
            fh.close()

    else:
        fh = csv_source
        if hasattr(fh, "seek"):
            fh.seek(0)
        file_label = getattr(fh, "name", "<uploaded file>")

        def closer() -> None:  # pragma: no cover - simple passthrough
            return None

    reader = csv.DictReader(fh)
    return reader, closer, file_label


def _parse_int(raw: str, *, what: str, label: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise DataLoaderError(f"{what} in '{label}' must be numeric, got '{raw}'") from exc


def load_plans(csv_source: CsvSource) -> list[Plan]:
    reader, closer, label = _prepare_reader(csv_source)
    try:
        _validate_headers(reader.fieldnames or [], ["id", "name", "capacity", "price"], file_label=label)
        plans: list[Plan] = []
        seen: set[str] = set()
        for row in reader:
            identifier = (row.get("id") or "").strip()
            if not identifier:
                continue
            if identifier in seen:
                raise DataLoaderError(f"Plan id '{identifier}' appears more than once in '{label}'")
            seen.add(identifier)
            capacity = _parse_int(row.get("capacity") or "", what=f"Capacity of plan '{identifier}'", label=label)
            if capacity <= 0:
                raise DataLoaderError(f"Capacity of plan '{identifier}' must be positive")
            plans.append(
                Plan(
                    identifier=identifier,
                    name=(row.get("name") or identifier).strip(),
                    capacity=capacity,
                    price=(row.get("price") or "").strip(),
                    description=(row.get("description") or "").strip(),
                )
            )
    finally:
        closer()
    return plans


def load_students(csv_source: CsvSource, *, plans: Iterable[Plan]) -> list[Student]:
    reader, closer, label = _prepare_reader(csv_source)
    plan_ids = {plan.identifier for plan in plans}
    try:
        _validate_headers(
            reader.fieldnames or [],
            ["id", "first_name", "last_name", "email", "plan", "enrolled_at"],
            file_label=label,
        )
        students: list[Student] = []
        seen: set[str] = set()
        for row in reader:
            identifier = (row.get("id") or "").strip()
            if not identifier:
                continue
            if identifier in seen:
                raise DataLoaderError(f"Student id '{identifier}' appears more than once in '{label}'")
            seen.add(identifier)

            plan_id = (row.get("plan") or "").strip()
            if plan_id not in plan_ids:
                raise DataLoaderError(f"Student '{identifier}' references an unknown plan: '{plan_id}'")

            status = (row.get("status") or "active").strip().lower()
            if status not in STUDENT_STATUSES:
                raise DataLoaderError(f"Student '{identifier}' has an invalid status: '{status}'")

            raw_progress = (row.get("progress") or "").strip()
            progress = _parse_int(raw_progress, what=f"Progress of student '{identifier}'", label=label) if raw_progress else 0
            if not 0 <= progress <= 100:
                raise DataLoaderError(f"Progress of student '{identifier}' must be between 0 and 100")

            raw_date = (row.get("enrolled_at") or "").strip()
            try:
                enrolled_at = date.fromisoformat(raw_date)
            except ValueError as exc:
                raise DataLoaderError(
                    f"Student '{identifier}' has an invalid enrollment date: '{raw_date}'"
                ) from exc

            students.append(
                Student(
                    identifier=identifier,
                    first_name=(row.get("first_name") or "").strip(),
                    last_name=(row.get("last_name") or "").strip(),
                    email=(row.get("email") or "").strip(),
                    plan_id=plan_id,
                    enrolled_at=enrolled_at,
                    status=status,  # type: ignore[arg-type]
                    progress=progress,
                )
            )
    finally:
        closer()
    return students
