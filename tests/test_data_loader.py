import io
from datetime import date
from pathlib import Path

import pytest

from enrollment.data_loader import DataLoaderError, load_plans, load_students

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

PLANS_CSV = "id,name,capacity,price\nbasic,Basic Plan,2,Free\npremium,Premium Plan,5,$29/month\n"


def csv_buffer(text: str, name: str = "test.csv") -> io.StringIO:
    buffer = io.StringIO(text)
    buffer.name = name
    return buffer


def test_bundled_data_loads():
    plans = load_plans(DATA_DIR / "plans.csv")
    students = load_students(DATA_DIR / "students.csv", plans=plans)

    assert [plan.identifier for plan in plans] == ["basic", "premium", "enterprise"]
    assert len(students) == 6
    assert students[0].enrolled_at == date(2024, 1, 15)
    assert students[5].status == "suspended"


def test_load_plans_from_stream():
    plans = load_plans(csv_buffer(PLANS_CSV))

    assert plans[1].capacity == 5
    assert plans[1].description == ""


def test_load_plans_missing_columns():
    with pytest.raises(DataLoaderError, match="capacity"):
        load_plans(csv_buffer("id,name,price\nbasic,Basic,Free\n"))


@pytest.mark.parametrize("capacity", ["lots", "0", "-3"])
def test_load_plans_bad_capacity(capacity):
    with pytest.raises(DataLoaderError):
        load_plans(csv_buffer(f"id,name,capacity,price\nbasic,Basic,{capacity},Free\n"))


def test_load_plans_duplicate_id():
    with pytest.raises(DataLoaderError):
        load_plans(csv_buffer(PLANS_CSV + "basic,Again,3,Free\n"))


STUDENT_HEADER = "id,first_name,last_name,email,plan,enrolled_at,status,progress\n"


def test_load_students_defaults():
    plans = load_plans(csv_buffer(PLANS_CSV))
    students = load_students(
        csv_buffer(STUDENT_HEADER + "7,Sipho,Dlamini,sipho@demo.edu,basic,2024-02-01,,\n"),
        plans=plans,
    )

    assert students[0].status == "active"
    assert students[0].progress == 0


@pytest.mark.parametrize(
    "row",
    [
        "7,Sipho,Dlamini,sipho@demo.edu,gold,2024-02-01,active,10",
        "7,Sipho,Dlamini,sipho@demo.edu,basic,2024-02-01,graduated,10",
        "7,Sipho,Dlamini,sipho@demo.edu,basic,2024-02-01,active,101",
        "7,Sipho,Dlamini,sipho@demo.edu,basic,2024-02-01,active,half",
        "7,Sipho,Dlamini,sipho@demo.edu,basic,01/02/2024,active,10",
    ],
)
def test_load_students_rejects_bad_rows(row):
    plans = load_plans(csv_buffer(PLANS_CSV))
    with pytest.raises(DataLoaderError):
        load_students(csv_buffer(STUDENT_HEADER + row + "\n"), plans=plans)


def test_load_students_duplicate_id():
    plans = load_plans(csv_buffer(PLANS_CSV))
    row = "7,Sipho,Dlamini,sipho@demo.edu,basic,2024-02-01,active,10\n"
    with pytest.raises(DataLoaderError):
        load_students(csv_buffer(STUDENT_HEADER + row + row), plans=plans)
