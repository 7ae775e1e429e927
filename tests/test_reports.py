import io

from PIL import Image

from conftest import make_student
from enrollment.models import Plan
from enrollment.plans import PlanRegistry
from enrollment.reports import (
    ROSTER_COLUMNS,
    plan_usage,
    roster_rows,
    roster_stats,
    rows_to_csv,
    rows_to_image_bytes,
)
from enrollment.roster import RosterStore


def test_roster_stats(seed_students):
    stats = roster_stats(seed_students)

    assert stats.total == 3
    assert stats.active == 2
    assert stats.average_progress == 48


def test_roster_stats_empty_roster():
    assert roster_stats([]).average_progress == 0


def test_plan_usage_levels():
    plans = PlanRegistry(
        [
            Plan(identifier="small", name="Small", capacity=10, price="Free"),
            Plan(identifier="mid", name="Mid", capacity=4, price="Free"),
            Plan(identifier="tiny", name="Tiny", capacity=1, price="Free"),
        ]
    )
    students = [make_student(str(n), "A", f"B{n}", "mid") for n in range(3)]
    students.append(make_student("9", "C", "D", "tiny"))
    usage = {item.plan_id: item for item in plan_usage(RosterStore(plans, students))}

    assert usage["small"].capacity_level == "good"
    assert usage["mid"].occupancy == 3
    assert usage["mid"].capacity_level == "warning"
    assert usage["tiny"].capacity_level == "critical"


def test_roster_rows_and_csv(plans, seed_students):
    rows = roster_rows(seed_students[:1], plans)

    assert rows == [
        {
            "Student": "Thabo Nkosi",
            "Email": "thabo.nkosi@demo.edu",
            "Plan": "Basic Plan",
            "Status": "active",
            "Progress": "75%",
            "Enrolled": "2024-01-15",
        }
    ]
    lines = rows_to_csv(rows, ROSTER_COLUMNS).decode("utf-8").splitlines()
    assert lines[0] == "Student,Email,Plan,Status,Progress,Enrolled"
    assert lines[1].startswith("Thabo Nkosi,")


def test_rows_to_image_bytes_is_png(plans, seed_students):
    data = rows_to_image_bytes(roster_rows(seed_students, plans), ROSTER_COLUMNS)

    image = Image.open(io.BytesIO(data))
    assert image.format == "PNG"
    assert image.width > 0 and image.height > 0
