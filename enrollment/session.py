"""Boundary between a presentation layer and the roster core."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Protocol

from .errors import NotFoundError, RosterError, ValidationError
from .models import STUDENT_STATUSES, NewStudentInput, Plan, Student, StudentPatch
from .query import ALL, RosterQuery, filter_students
from .roster import RosterStore
from .selection import SelectionTracker
from .workflow import EnrollmentWorkflow, StudentForm, validate_form

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: outcomes only go to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)


@dataclass(frozen=True)
class RosterView:
    query: RosterQuery
    visible: tuple[Student, ...]
    selected: frozenset[str]
    all_visible_selected: bool


Listener = Callable[[RosterView], None]


class RosterSession:
    """Owns the store, the filters, the selection and the edit dialog.

    Every inbound call either completes or raises a :class:`RosterError`
    leaving all state untouched. Subscribers get a fresh :class:`RosterView`
    after each change.
    """

    def __init__(self, store: RosterStore, *, notifier: Notifier | None = None):
        self._store = store
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._query = RosterQuery()
        self._selection = SelectionTracker()
        self._workflow = EnrollmentWorkflow(store)
        self._listeners: List[Listener] = []

    @property
    def store(self) -> RosterStore:
        return self._store

    @property
    def workflow(self) -> EnrollmentWorkflow:
        return self._workflow

    @property
    def query(self) -> RosterQuery:
        return self._query

    # Outbound ---------------------------------------------------------

    @property
    def visible_students(self) -> tuple[Student, ...]:
        return filter_students(self._store.list_all(), self._query)

    @property
    def selected_ids(self) -> frozenset[str]:
        return self._selection.selected

    @property
    def all_visible_selected(self) -> bool:
        return self._selection.all_selected(student.identifier for student in self.visible_students)

    def view(self) -> RosterView:
        return RosterView(
            query=self._query,
            visible=self.visible_students,
            selected=self.selected_ids,
            all_visible_selected=self.all_visible_selected,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)

    def _fail(self, exc: RosterError) -> None:
        self._notifier.error(str(exc))

    # Inbound ----------------------------------------------------------

    def list_plans(self) -> tuple[Plan, ...]:
        return self._store.plans.list_plans()

    def add_student(self, data: NewStudentInput) -> Student:
        form = StudentForm(data.first_name, data.last_name, data.email, data.plan_id)
        try:
            form = validate_form(form, self._store)
            student = self._store.add(NewStudentInput(form.first_name, form.last_name, form.email, form.plan_id))
        except RosterError as exc:
            self._fail(exc)
            raise
        self._notifier.success(f"Student {student.full_name} enrolled successfully!")
        self._publish()
        return student

    def update_student(self, student_id: str, patch: StudentPatch) -> Student:
        try:
            current = self._store.get(student_id)
            merged = replace(StudentForm.from_student(current), **patch.changes())
            form = validate_form(
                merged,
                self._store,
                excluding_student_id=student_id,
                current_plan_id=current.plan_id,
            )
            student = self._store.update(
                student_id,
                StudentPatch(form.first_name, form.last_name, form.email, form.plan_id),
            )
        except RosterError as exc:
            self._fail(exc)
            raise
        self._notifier.success("Student updated successfully!")
        self._publish()
        return student

    def delete_student(self, student_id: str) -> None:
        present = student_id in self._store
        self._store.remove(student_id)
        self._selection.purge([student_id])
        if present:
            self._notifier.success("Student deleted successfully")
            self._publish()

    def delete_students(self, student_ids: Iterable[str]) -> int:
        ids = set(student_ids)
        removed = self._store.remove_many(ids)
        self._selection.purge(ids)
        if removed:
            self._notifier.success(f"{removed} students deleted successfully")
            self._publish()
        return removed

    def delete_selected(self) -> int:
        if not self._selection.selected:
            exc = ValidationError("no students selected")
            self._fail(exc)
            raise exc
        return self.delete_students(self._selection.selected)

    def set_search_text(self, text: str) -> None:
        self._set_query(RosterQuery(text, self._query.status, self._query.plan))

    def set_status_filter(self, status: str) -> None:
        if status != ALL and status not in STUDENT_STATUSES:
            raise ValidationError(f"unknown status '{status}'")
        self._set_query(RosterQuery(self._query.search, status, self._query.plan))

    def set_plan_filter(self, plan_id: str) -> None:
        if plan_id != ALL and plan_id not in self._store.plans:
            raise ValidationError(f"unknown plan '{plan_id}'")
        self._set_query(RosterQuery(self._query.search, self._query.status, plan_id))

    def _set_query(self, query: RosterQuery) -> None:
        if query == self._query:
            return
        logger.debug("Roster filter changed to %s", query)
        self._query = query
        self._publish()

    def select_all(self, checked: bool) -> None:
        if checked:
            self._selection.select_all(student.identifier for student in self.visible_students)
        else:
            self._selection.deselect_all()
        self._publish()

    def toggle_select(self, student_id: str, included: bool) -> None:
        if included and student_id not in self._store:
            raise NotFoundError(student_id)
        self._selection.toggle(student_id, included)
        self._publish()

    # Dialog -----------------------------------------------------------

    def open_create_form(self) -> StudentForm:
        return self._workflow.start_create()

    def open_edit_form(self, student_id: str) -> StudentForm:
        return self._workflow.start_edit(student_id)

    def cancel_form(self) -> None:
        self._workflow.cancel()

    def submit_form(self) -> Student:
        creating = self._workflow.state == "creating"
        try:
            student = self._workflow.submit()
        except RosterError as exc:
            self._fail(exc)
            raise
        if creating:
            self._notifier.success(f"Student {student.full_name} enrolled successfully!")
        else:
            self._notifier.success("Student updated successfully!")
        self._publish()
        return student
