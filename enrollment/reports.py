"""Aggregate counts and tabular exports derived from the roster."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

from PIL import Image, ImageDraw, ImageFont

from . import config
from .models import Student
from .plans import PlanRegistry
from .roster import RosterStore

CapacityLevel = Literal["good", "warning", "critical"]

ROSTER_COLUMNS = ["Student", "Email", "Plan", "Status", "Progress", "Enrolled"]


@dataclass(frozen=True)
class RosterStats:
    total: int
    active: int
    average_progress: int


@dataclass(frozen=True)
class PlanUsage:
    plan_id: str
    name: str
    price: str
    capacity: int
    occupancy: int

    @property
    def ratio(self) -> float:
        return self.occupancy / self.capacity

    @property
    def capacity_level(self) -> CapacityLevel:
        if self.ratio >= config.CAPACITY_CRITICAL_RATIO:
            return "critical"
        if self.ratio >= config.CAPACITY_WARNING_RATIO:
            return "warning"
        return "good"


def roster_stats(students: Sequence[Student]) -> RosterStats:
    total = len(students)
    active = sum(1 for student in students if student.status == "active")
    average = round(sum(student.progress for student in students) / total) if total else 0
    return RosterStats(total=total, active=active, average_progress=average)


def plan_usage(store: RosterStore) -> list[PlanUsage]:
    return [
        PlanUsage(
            plan_id=plan.identifier,
            name=plan.name,
            price=plan.price,
            capacity=plan.capacity,
            occupancy=store.occupancy(plan.identifier),
        )
        for plan in store.plans.list_plans()
    ]


def roster_rows(students: Iterable[Student], plans: PlanRegistry) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for student in students:
        plan = plans.find_plan(student.plan_id)
        rows.append(
            {
                "Student": student.full_name,
                "Email": student.email,
                "Plan": plan.name if plan else student.plan_id,
                "Status": student.status,
                "Progress": f"{student.progress}%",
                "Enrolled": student.enrolled_at.isoformat(),
            }
        )
    return rows


def rows_to_csv(rows: list[dict[str, str]], columns: list[str]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


def rows_to_image_bytes(rows: list[dict[str, str]], columns: list[str]) -> bytes:
    """Render the rows as a plain PNG table, one line of text per cell."""
    font = ImageFont.load_default()
    padding_x = 12
    padding_y = 8
    gutter = 2

    draw = ImageDraw.Draw(Image.new("RGB", (1, 1), "white"))

    def text_size(text: str) -> tuple[int, int]:
        left, top, right, bottom = draw.textbbox((0, 0), text or " ", font=font)
        return right - left, bottom - top

    column_widths = [
        max([text_size(column)[0]] + [text_size(row.get(column, ""))[0] for row in rows]) + 2 * padding_x
        for column in columns
    ]
    row_height = max(text_size(text)[1] for text in [*columns, " "]) + 2 * padding_y
    width = sum(column_widths) + gutter * (len(columns) + 1)
    height = row_height * (len(rows) + 1) + gutter * (len(rows) + 2)

    image = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(image)

    def draw_row(y: int, values: list[str], *, header: bool) -> None:
        x = gutter
        for column_width, value in zip(column_widths, values):
            draw.rectangle(
                [x, y, x + column_width, y + row_height],
                fill="#f6f7fb" if header else "white",
                outline="#cdd0d5",
            )
            draw.text((x + padding_x, y + padding_y), value, font=font, fill="black")
            x += column_width + gutter

    y = gutter
    draw_row(y, list(columns), header=True)
    for row in rows:
        y += row_height + gutter
        draw_row(y, [row.get(column, "") for column in columns], header=False)

    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()
