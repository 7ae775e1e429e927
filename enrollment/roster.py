"""Authoritative in-memory store of student records."""

from __future__ import annotations

import dataclasses
import itertools
import logging
from datetime import date
from typing import Callable, Dict, Iterable

from .errors import CapacityExceededError, NotFoundError
from .models import NewStudentInput, Student, StudentPatch
from .plans import PlanRegistry

logger = logging.getLogger(__name__)


class RosterStore:
    """Single owner of the roster.

    Occupancy is recounted from the roster on every check rather than cached.
    That is fine for rosters of a few hundred students; past a few thousand
    the linear scan in ``occupancy`` becomes the bottleneck.

    Capacity is a check-then-act gate. Callers run in a single thread, so
    nothing can change the roster between the check and the write.
    """

    def __init__(
        self,
        plans: PlanRegistry,
        students: Iterable[Student] = (),
        *,
        today: Callable[[], date] = date.today,
    ):
        self._plans = plans
        self._today = today
        self._students: Dict[str, Student] = {}
        self._issued_ids: set[str] = set()
        self._counter = itertools.count(1)
        for student in students:
            if student.identifier in self._issued_ids:
                raise ValueError(f"Duplicate student id '{student.identifier}'.")
            self._plans.get_plan(student.plan_id)
            self._students[student.identifier] = student
            self._issued_ids.add(student.identifier)
        for plan in self._plans.list_plans():
            occupied = self.occupancy(plan.identifier)
            if occupied > plan.capacity:
                logger.warning(
                    "Seed roster puts %d students on plan %s (capacity %d)",
                    occupied,
                    plan.identifier,
                    plan.capacity,
                )

    @property
    def plans(self) -> PlanRegistry:
        return self._plans

    def _next_identifier(self) -> str:
        # Seeded ids may be numeric too; never hand one of them out again.
        while True:
            candidate = str(next(self._counter))
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def occupancy(self, plan_id: str, *, excluding_student_id: str | None = None) -> int:
        return sum(
            1
            for student in self._students.values()
            if student.plan_id == plan_id and student.identifier != excluding_student_id
        )

    def validate_capacity(self, plan_id: str, excluding_student_id: str | None = None) -> None:
        plan = self._plans.get_plan(plan_id)
        occupied = self.occupancy(plan_id, excluding_student_id=excluding_student_id)
        if occupied + 1 > plan.capacity:
            raise CapacityExceededError(plan.identifier, plan.capacity)

    def add(self, data: NewStudentInput) -> Student:
        self.validate_capacity(data.plan_id)
        student = Student(
            identifier=self._next_identifier(),
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            plan_id=data.plan_id,
            enrolled_at=self._today(),
        )
        self._students[student.identifier] = student
        logger.info("Enrolled student %s on plan %s", student.identifier, student.plan_id)
        return student

    def update(self, student_id: str, patch: StudentPatch) -> Student:
        current = self.get(student_id)
        changes = patch.changes()
        new_plan = changes.get("plan_id")
        if new_plan is not None and new_plan != current.plan_id:
            self.validate_capacity(new_plan, excluding_student_id=student_id)
        updated = dataclasses.replace(current, **changes)
        self._students[student_id] = updated
        logger.info("Updated student %s (%s)", student_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def remove(self, student_id: str) -> None:
        if self._students.pop(student_id, None) is not None:
            logger.info("Removed student %s", student_id)

    def remove_many(self, student_ids: Iterable[str]) -> int:
        removed = 0
        for student_id in set(student_ids):
            if self._students.pop(student_id, None) is not None:
                removed += 1
        logger.info("Removed %d students in bulk", removed)
        return removed

    def get(self, student_id: str) -> Student:
        student = self._students.get(student_id)
        if student is None:
            raise NotFoundError(student_id)
        return student

    def list_all(self) -> tuple[Student, ...]:
        return tuple(self._students.values())

    def ids(self) -> frozenset[str]:
        return frozenset(self._students)

    def __contains__(self, student_id: object) -> bool:
        return student_id in self._students

    def __len__(self) -> int:
        return len(self._students)
