from itertools import permutations

from conftest import make_student
from enrollment.query import (
    RosterQuery,
    apply_predicates,
    filter_students,
    matches_plan,
    matches_search,
    matches_status,
)

ROSTER = (
    make_student("1", "Thabo", "Nkosi", "basic"),
    make_student("2", "Lerato", "Mokoena", "premium"),
    make_student("3", "Nandi", "Khumalo", "basic", status="inactive"),
    make_student("4", "Sipho", "Dlamini", "premium", status="suspended"),
)


def ids(students):
    return [student.identifier for student in students]


def test_search_is_case_insensitive_substring():
    assert ids(filter_students(ROSTER, RosterQuery(search="nko"))) == ["1"]


def test_search_matches_email():
    assert ids(filter_students(ROSTER, RosterQuery(search="DLAMINI@"))) == ["4"]


def test_empty_search_matches_everything():
    assert ids(filter_students(ROSTER, RosterQuery())) == ["1", "2", "3", "4"]


def test_status_and_plan_filters_are_exact():
    assert ids(filter_students(ROSTER, RosterQuery(status="inactive"))) == ["3"]
    assert ids(filter_students(ROSTER, RosterQuery(plan="premium"))) == ["2", "4"]
    assert ids(filter_students(ROSTER, RosterQuery(status="active", plan="basic"))) == ["1"]


def test_predicates_are_anded():
    assert filter_students(ROSTER, RosterQuery(search="thabo", plan="premium")) == ()


def test_predicate_order_does_not_matter():
    predicates = [matches_search("o"), matches_status("active"), matches_plan("basic")]
    results = {apply_predicates(ROSTER, order) for order in permutations(predicates)}
    assert results == {apply_predicates(ROSTER, predicates)}


def test_identical_inputs_return_the_same_object():
    query = RosterQuery(search="a")
    assert filter_students(ROSTER, query) is filter_students(ROSTER, RosterQuery(search="a"))
