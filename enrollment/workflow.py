"""Create/edit form state machine sitting in front of the roster store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Literal

from .errors import RosterError, ValidationError, WorkflowStateError
from .models import NewStudentInput, Student, StudentPatch
from .roster import RosterStore

logger = logging.getLogger(__name__)

WorkflowState = Literal[
    "idle",
    "creating",
    "editing",
]


@dataclass(frozen=True)
class StudentForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    plan_id: str = ""

    @classmethod
    def from_student(cls, student: Student) -> "StudentForm":
        return cls(
            first_name=student.first_name,
            last_name=student.last_name,
            email=student.email,
            plan_id=student.plan_id,
        )

    def cleaned(self) -> "StudentForm":
        return StudentForm(*(getattr(self, field.name).strip() for field in fields(self)))


FORM_FIELDS = frozenset(field.name for field in fields(StudentForm))


def validate_form(
    form: StudentForm,
    store: RosterStore,
    *,
    excluding_student_id: str | None = None,
    current_plan_id: str | None = None,
) -> StudentForm:
    """Check a form in order, stopping at the first failure.

    Required fields come first, then the plan selection, then the capacity
    of the chosen plan. Capacity only gates a new assignment, so an edit that
    keeps ``current_plan_id`` skips it. Returns the trimmed form.
    """
    form = form.cleaned()
    if not form.first_name or not form.last_name or not form.email:
        raise ValidationError("missing required field")
    if not form.plan_id:
        raise ValidationError("missing plan")
    if form.plan_id != current_plan_id:
        store.validate_capacity(form.plan_id, excluding_student_id=excluding_student_id)
    return form


class EnrollmentWorkflow:
    """Drives the add/edit student dialog.

    ``idle -> creating`` on :meth:`start_create`, ``idle -> editing`` on
    :meth:`start_edit`, and back to ``idle`` on :meth:`cancel` or on a
    successful :meth:`submit`. A failed submit keeps the state and the form
    so the user can correct it.
    """

    def __init__(self, store: RosterStore):
        self._store = store
        self._state: WorkflowState = "idle"
        self._form: StudentForm | None = None
        self._editing_id: str | None = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def form(self) -> StudentForm | None:
        return self._form

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    def _require_idle(self) -> None:
        if self._state != "idle":
            raise WorkflowStateError(f"A student form is already open ({self._state}).")

    def _require_open(self) -> StudentForm:
        if self._form is None:
            raise WorkflowStateError("No student form is open.")
        return self._form

    def start_create(self) -> StudentForm:
        self._require_idle()
        self._state = "creating"
        self._form = StudentForm()
        return self._form

    def start_edit(self, student_id: str) -> StudentForm:
        self._require_idle()
        student = self._store.get(student_id)
        self._state = "editing"
        self._editing_id = student.identifier
        self._form = StudentForm.from_student(student)
        return self._form

    def update_form(self, **values: str) -> StudentForm:
        form = self._require_open()
        unknown = sorted(set(values) - FORM_FIELDS)
        if unknown:
            raise ValidationError(f"unknown form field(s): {', '.join(unknown)}")
        self._form = replace(form, **values)
        return self._form

    def cancel(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._state = "idle"
        self._form = None
        self._editing_id = None

    def validate(self) -> StudentForm:
        form = self._require_open()
        current_plan_id = None
        if self._editing_id is not None:
            current_plan_id = self._store.get(self._editing_id).plan_id
        return validate_form(
            form,
            self._store,
            excluding_student_id=self._editing_id,
            current_plan_id=current_plan_id,
        )

    def submit(self) -> Student:
        try:
            form = self.validate()
        except RosterError:
            logger.warning("Rejected %s submission", self._state)
            raise
        if self._state == "creating":
            student = self._store.add(
                NewStudentInput(
                    first_name=form.first_name,
                    last_name=form.last_name,
                    email=form.email,
                    plan_id=form.plan_id,
                )
            )
        else:
            if self._editing_id is None:
                raise WorkflowStateError("No student is being edited.")
            student = self._store.update(
                self._editing_id,
                StudentPatch(
                    first_name=form.first_name,
                    last_name=form.last_name,
                    email=form.email,
                    plan_id=form.plan_id,
                ),
            )
        self._reset()
        return student
