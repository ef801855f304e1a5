"""
Pytest configuration and fixtures for BlockGov tests.

Factories live in ``helpers.factories`` and test doubles in
``helpers.doubles``; this module wires them into fixtures.
"""
import pytest

from blockgov.engine import DecisionLedger, WorkspaceSession
from blockgov.models import TabType, WorkspaceTab

from helpers.doubles import FlakyCaseStore, RecordingNotifier
from helpers.factories import StepClock, make_actor, make_case


@pytest.fixture
def cases():
    """A small queue covering every impact."""
    return [
        make_case("BLK-001", impact="critical", delay_days=20, amount="15 000 000 FCFA",
                  bureau="BF", type="paiement"),
        make_case("BLK-002", impact="high", delay_days=5, amount="2 500 000 FCFA",
                  bureau="BCT", type="validation"),
        make_case("BLK-003", impact="medium", delay_days=35, amount="",
                  bureau="BF", type="validation", sla_days=30),
        make_case("BLK-004", impact="low", delay_days=0, amount="0",
                  bureau="", type="technique"),
    ]


@pytest.fixture
def case_store(cases):
    return FlakyCaseStore(cases)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def ledger(clock):
    return DecisionLedger(clock=clock)


@pytest.fixture
def actor():
    return make_actor()


@pytest.fixture
def session(case_store, notifier):
    return WorkspaceSession(case_store, notifier)


@pytest.fixture
def inbox(session):
    return session.open(WorkspaceTab.create(TabType.INBOX, "Inbox"))
