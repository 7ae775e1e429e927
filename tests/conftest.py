from __future__ import annotations

from datetime import date

import pytest

from enrollment.models import Plan, Student
from enrollment.plans import PlanRegistry
from enrollment.roster import RosterStore
from enrollment.session import RosterSession

TODAY = date(2024, 3, 1)


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


def make_student(identifier: str, first: str, last: str, plan_id: str, **extra) -> Student:
    return Student(
        identifier=identifier,
        first_name=first,
        last_name=last,
        email=f"{first.lower()}.{last.lower()}@demo.edu",
        plan_id=plan_id,
        enrolled_at=date(2024, 1, 15),
        **extra,
    )


@pytest.fixture
def plans() -> PlanRegistry:
    return PlanRegistry(
        [
            Plan(identifier="basic", name="Basic Plan", capacity=2, price="Free"),
            Plan(identifier="premium", name="Premium Plan", capacity=3, price="$29/month"),
        ]
    )


@pytest.fixture
def seed_students() -> list[Student]:
    return [
        make_student("1", "Thabo", "Nkosi", "basic", progress=75),
        make_student("2", "Lerato", "Mokoena", "premium", progress=45),
        make_student("3", "Nandi", "Khumalo", "premium", status="inactive", progress=25),
    ]


@pytest.fixture
def store(plans, seed_students) -> RosterStore:
    return RosterStore(plans, seed_students, today=lambda: TODAY)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def session(store, notifier) -> RosterSession:
    return RosterSession(store, notifier=notifier)
