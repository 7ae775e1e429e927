from dataclasses import dataclass
from datetime import date
from typing import Literal


StudentStatus = Literal[
    "active",
    "inactive",
    "suspended",
]

STUDENT_STATUSES: tuple[StudentStatus, ...] = ("active", "inactive", "suspended")


@dataclass(frozen=True)
class Plan:
    identifier: str
    name: str
    capacity: int
    price: str
    description: str = ""


@dataclass(frozen=True)
class Student:
    identifier: str
    first_name: str
    last_name: str
    email: str
    plan_id: str
    enrolled_at: date
    status: StudentStatus = "active"
    progress: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class NewStudentInput:
    first_name: str
    last_name: str
    email: str
    plan_id: str


@dataclass(frozen=True)
class StudentPatch:
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    plan_id: str | None = None

    def changes(self) -> dict[str, str]:
        return {
            field: value
            for field, value in (
                ("first_name", self.first_name),
                ("last_name", self.last_name),
                ("email", self.email),
                ("plan_id", self.plan_id),
            )
            if value is not None
        }
