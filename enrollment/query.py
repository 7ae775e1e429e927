"""Search and filter over a roster snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterable

from .models import Student

ALL = "all"

StudentPredicate = Callable[[Student], bool]


@dataclass(frozen=True)
class RosterQuery:
    search: str = ""
    status: str = ALL
    plan: str = ALL


def matches_search(text: str) -> StudentPredicate:
    needle = text.lower()

    def predicate(student: Student) -> bool:
        return (
            needle in student.first_name.lower()
            or needle in student.last_name.lower()
            or needle in student.email.lower()
        )

    return predicate


def matches_status(status: str) -> StudentPredicate:
    return lambda student: status == ALL or student.status == status


def matches_plan(plan_id: str) -> StudentPredicate:
    return lambda student: plan_id == ALL or student.plan_id == plan_id


def query_predicates(query: RosterQuery) -> list[StudentPredicate]:
    return [matches_search(query.search), matches_status(query.status), matches_plan(query.plan)]


def apply_predicates(students: Iterable[Student], predicates: Iterable[StudentPredicate]) -> tuple[Student, ...]:
    result = tuple(students)
    for predicate in predicates:
        result = tuple(student for student in result if predicate(student))
    return result


@lru_cache(maxsize=64)
def filter_students(students: tuple[Student, ...], query: RosterQuery) -> tuple[Student, ...]:
    """Return the visible set for ``query``, keeping roster order.

    Results are memoised, so identical inputs give back the very same tuple
    and a UI can skip re-rendering by identity.
    """
    return apply_predicates(students, query_predicates(query))
