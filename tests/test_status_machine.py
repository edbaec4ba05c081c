import pytest

from creditdesk.domain import CreditRequest, CreditRequestStatus
from creditdesk.domain.status import (
    CANCELABLE_STATUSES,
    STATUS_LABELS,
    TRANSITION_NAMES,
    TRANSITIONS,
    CreditRequestStatusMachine,
    parse_status,
    status_choices,
)
from creditdesk.errors import InvalidTransitionError, StatusValidationError

S = CreditRequestStatus


@pytest.fixture
def machine():
    return CreditRequestStatusMachine()


def test_new_request_starts_as_new():
    assert CreditRequest().status == S.NEW


def test_auto_advance_moves_new_to_in_progress_once(machine):
    credit_request = CreditRequest()

    assert machine.auto_advance(credit_request) is True
    assert credit_request.status == S.IN_PROGRESS
    assert machine.auto_advance(credit_request) is False
    assert credit_request.status == S.IN_PROGRESS


@pytest.mark.parametrize("status", [s for s in S if s != S.NEW])
def test_auto_advance_leaves_other_statuses_alone(status):
    credit_request = CreditRequest(status=status)

    credit_request.auto_advance_status()

    assert credit_request.status == status


def test_every_listed_transition_is_allowed(machine):
    for source, targets in TRANSITIONS.items():
        for target in targets:
            credit_request = CreditRequest(status=source)
            assert machine.transition(credit_request, target) == target
            assert credit_request.status == target


def test_unlisted_transitions_are_refused(machine):
    for source in S:
        for target in set(S) - TRANSITIONS[source]:
            credit_request = CreditRequest(status=source)
            with pytest.raises(InvalidTransitionError):
                machine.transition(credit_request, target)
            assert credit_request.status == source


@pytest.mark.parametrize("terminal", [S.REJECTED, S.DONE, S.CANCELED])
def test_terminal_statuses_have_no_exit(machine, terminal):
    assert machine.allowed_targets(terminal) == frozenset()


def test_cancel_only_from_cancelable_statuses(machine):
    for status in S:
        credit_request = CreditRequest(status=status)
        if status in CANCELABLE_STATUSES:
            assert machine.cancel(credit_request) == S.CANCELED
        else:
            with pytest.raises(InvalidTransitionError):
                machine.cancel(credit_request)


def test_unknown_status_string_is_rejected():
    with pytest.raises(StatusValidationError):
        parse_status("archived")
    with pytest.raises(StatusValidationError):
        CreditRequest(status="archived")


def test_status_assignment_is_parsed():
    credit_request = CreditRequest()

    credit_request.status = "approved"
    assert credit_request.status is S.APPROVED

    with pytest.raises(StatusValidationError):
        credit_request.status = "archived"
    assert credit_request.status is S.APPROVED


def test_status_strings_are_accepted(machine):
    credit_request = CreditRequest(status="in_progress")

    credit_request.transition_to("nmi")

    assert credit_request.status == S.NMI
    assert machine.can_transition("nmi", "approved")
    assert not machine.can_transition("approved", "in_progress")


def test_labels_and_transition_names_cover_every_status():
    assert set(STATUS_LABELS) == set(S) == set(TRANSITION_NAMES)
    assert STATUS_LABELS[S.NMI] == "Need More Info"
    assert TRANSITION_NAMES[S.IN_PROGRESS] == "to_in_progress"
    assert status_choices()["Approved"] == "approved"
