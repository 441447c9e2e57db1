"""Unit tests for the admission decision procedure.

The engine runs against the in-memory store with a frozen clock, so every
branch and its recorded side effects can be checked without a database.
"""

import asyncio
from datetime import date, timedelta

import pytest
from services.admission_service.models import AdmissionStatus
from services.admission_service.services.engine import (
    STATUS_MESSAGES,
    AdmissionEngine,
)
from tests.factories import (
    MemberFactory,
    PaymentRecordFactory,
    SignInRecordFactory,
    WaiverRecordFactory,
    WarningRecordFactory,
)
from tests.stubs import InMemoryMembershipStore

# Calendar day of the ``clock`` fixture in the facility timezone
TODAY = date(2026, 3, 10)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    return InMemoryMembershipStore()


@pytest.fixture
def engine(store, clock):
    return AdmissionEngine(
        store, clock=clock, grace_hours=24, timezone="America/New_York"
    )


def _member(store, **overrides):
    member = MemberFactory.create(**overrides)
    store.add(member)
    return member


def _valid_waiver(store, member, **overrides):
    overrides.setdefault("valid_until", TODAY + timedelta(days=30))
    store.add(WaiverRecordFactory.create(member.identifier, **overrides))


def _valid_payment(store, member, **overrides):
    overrides.setdefault("valid_until", TODAY + timedelta(days=30))
    store.add(PaymentRecordFactory.create(member.identifier, **overrides))


# ---------------------------------------------------------------------------
# Non-warning outcomes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_identifier_is_not_found(engine, store):
    """Unknown identifiers are refused and still logged as a sign-in."""
    result = await engine.evaluate("0000009999")

    assert result.ok
    assert result.outcome.status == AdmissionStatus.NOT_FOUND
    assert result.outcome.message == "Member not found. Please sign a waiver."
    assert result.outcome.name is None
    assert len(store.sign_ins) == 1
    assert store.sign_ins[0].member_identifier == "0000009999"
    assert store.sign_ins[0].admitted is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_not_found_ignores_stray_records(engine, store):
    """Waiver/payment/warning rows without a member don't change the outcome."""
    identifier = "0000008888"
    store.add(
        WaiverRecordFactory.create(identifier, valid_until=TODAY + timedelta(days=5)),
        PaymentRecordFactory.create(identifier, valid_until=TODAY + timedelta(days=5)),
        WarningRecordFactory.create(identifier),
    )

    result = await engine.evaluate(identifier)

    assert result.outcome.status == AdmissionStatus.NOT_FOUND
    assert [s.admitted for s in store.sign_ins] == [False]
    assert len(store.warnings) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_waiver_and_payment_is_active(engine, store):
    member = _member(store, name="Ada Lovelace")
    _valid_waiver(store, member)
    _valid_payment(store, member)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.ACTIVE
    assert result.outcome.message == "Member has a valid waiver and payment."
    assert result.outcome.name == "Ada Lovelace"
    assert result.outcome.admitted is True
    assert [s.admitted for s in store.sign_ins] == [True]
    assert store.warnings == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_payment_only_is_no_waiver(engine, store):
    member = _member(store)
    _valid_payment(store, member)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.NO_WAIVER
    assert result.outcome.message == "Member has paid but needs to sign a waiver."
    assert [s.admitted for s in store.sign_ins] == [False]
    assert store.warnings == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_neither_is_inactive(engine, store):
    member = _member(store)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.INACTIVE
    assert result.outcome.message == "Member needs to sign a waiver and pay."
    assert [s.admitted for s in store.sign_ins] == [False]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expired_records_do_not_count(engine, store):
    """Records that ran out yesterday are ignored."""
    member = _member(store)
    _valid_waiver(store, member, valid_until=TODAY - timedelta(days=1))
    _valid_payment(store, member, valid_until=TODAY - timedelta(days=1))

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.INACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_records_valid_until_today_still_count(engine, store):
    member = _member(store)
    _valid_waiver(store, member, valid_until=TODAY)
    _valid_payment(store, member, valid_until=TODAY)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_today_uses_facility_timezone(store, clock):
    """At 01:00 UTC it is still yesterday in New York."""
    member = _member(store)
    _valid_waiver(store, member, valid_until=TODAY)
    _valid_payment(store, member, valid_until=TODAY)
    clock.advance(hours=8)  # 2026-03-11 01:00 UTC, 21:00 EDT on the 10th

    new_york = AdmissionEngine(store, clock=clock, timezone="America/New_York")
    utc = AdmissionEngine(store, clock=clock, timezone="UTC")

    assert (await new_york.evaluate(member.identifier)).outcome.status == (
        AdmissionStatus.ACTIVE
    )
    assert (await utc.evaluate(member.identifier)).outcome.status == (
        AdmissionStatus.INACTIVE
    )


# ---------------------------------------------------------------------------
# Warning states
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_unpaid_visit_issues_warning(engine, store, clock):
    member = _member(store, name="Grace Hopper")
    _valid_waiver(store, member)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_ISSUED
    assert result.outcome.message == (
        "Warning issued. Member allowed entry this time. Please pay soon."
    )
    assert result.outcome.name == "Grace Hopper"
    assert len(store.warnings) == 1
    assert store.warnings[0].member_identifier == member.identifier
    assert store.warnings[0].issued_at == clock.now
    assert [s.admitted for s in store.sign_ins] == [True]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_repeat_visit_within_grace_window(engine, store, clock):
    member = _member(store)
    _valid_waiver(store, member)
    await engine.evaluate(member.identifier)

    clock.advance(hours=1)
    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_ACTIVE
    assert result.outcome.message == "Member admitted. Please pay soon."
    assert len(store.warnings) == 1
    assert [s.admitted for s in store.sign_ins] == [True, True]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_visit_at_exactly_grace_boundary_is_admitted(engine, store, clock):
    member = _member(store)
    _valid_waiver(store, member)
    await engine.evaluate(member.identifier)

    clock.advance(hours=24)
    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_visit_after_grace_window_is_refused(engine, store, clock):
    member = _member(store)
    _valid_waiver(store, member)
    await engine.evaluate(member.identifier)

    clock.advance(hours=25)
    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_EXPIRED
    assert result.outcome.message == (
        "Previous warning expired. Entry not allowed. Please pay to regain access."
    )
    assert len(store.warnings) == 1
    assert [s.admitted for s in store.sign_ins] == [True, False]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_old_warning_is_never_reissued(engine, store, clock):
    """A member warned months ago stays locked out until they pay."""
    member = _member(store)
    _valid_waiver(store, member)
    store.add(
        WarningRecordFactory.create(
            member.identifier, issued_at=clock.now - timedelta(days=90)
        )
    )

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_EXPIRED
    assert len(store.warnings) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_payment_renewal_ignores_stale_warning(engine, store, clock):
    member = _member(store)
    _valid_waiver(store, member)
    store.add(
        WarningRecordFactory.create(
            member.identifier, issued_at=clock.now - timedelta(days=3)
        )
    )
    _valid_payment(store, member)

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.ACTIVE
    assert len(store.warnings) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_grace_window_is_configurable(store, clock):
    member = _member(store)
    _valid_waiver(store, member)
    engine = AdmissionEngine(store, clock=clock, grace_hours=2)
    await engine.evaluate(member.identifier)

    clock.advance(hours=3)
    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_EXPIRED


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admitted_flag_matches_status(engine, store, clock):
    """Every recorded sign-in agrees with the outcome returned for it."""
    cases = []
    active = _member(store)
    _valid_waiver(store, active)
    _valid_payment(store, active)
    cases.append(active.identifier)
    no_waiver = _member(store)
    _valid_payment(store, no_waiver)
    cases.append(no_waiver.identifier)
    warned = _member(store)
    _valid_waiver(store, warned)
    cases.append(warned.identifier)
    cases.append("0000007777")

    outcomes = [(await engine.evaluate(i)).outcome for i in cases]

    assert len(store.sign_ins) == len(cases)
    for outcome, sign_in in zip(outcomes, store.sign_ins):
        assert sign_in.admitted is outcome.admitted


@pytest.mark.asyncio
@pytest.mark.unit
async def test_evaluate_leaves_member_records_untouched(engine, store):
    member = _member(store, name="Unchanged")
    _valid_waiver(store, member)
    _valid_payment(store, member)
    waivers = list(store.waivers)
    payments = list(store.payments)

    for _ in range(3):
        await engine.evaluate(member.identifier)

    assert store.members[member.identifier].name == "Unchanged"
    assert store.waivers == waivers
    assert store.payments == payments
    assert len(store.sign_ins) == 3


@pytest.mark.unit
def test_every_status_has_a_message():
    assert set(STATUS_MESSAGES) == set(AdmissionStatus)


# ---------------------------------------------------------------------------
# Failures & concurrency
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failure_after_warning_insert_leaves_no_rows(engine, store):
    member = _member(store)
    _valid_waiver(store, member)
    store.fail_on_sign_in = True

    result = await engine.evaluate(member.identifier)

    assert not result.ok
    assert result.outcome is None
    assert result.failure.identifier == member.identifier
    assert "connection lost" in result.failure.reason
    assert store.warnings == []
    assert store.sign_ins == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_retry_after_failure_starts_from_scratch(engine, store):
    member = _member(store)
    _valid_waiver(store, member)
    store.fail_on_sign_in = True
    await engine.evaluate(member.identifier)

    store.fail_on_sign_in = False
    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.WARNING_ISSUED
    assert len(store.warnings) == 1
    assert len(store.sign_ins) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_first_visits_issue_one_warning(engine, store):
    member = _member(store)
    _valid_waiver(store, member)

    results = await asyncio.gather(
        *(engine.evaluate(member.identifier) for _ in range(10))
    )

    statuses = [r.outcome.status for r in results]
    assert statuses.count(AdmissionStatus.WARNING_ISSUED) == 1
    assert statuses.count(AdmissionStatus.WARNING_ACTIVE) == 9
    assert len(store.warnings) == 1
    assert len(store.sign_ins) == 10
    assert all(s.admitted for s in store.sign_ins)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_warning_guard_without_row_lock(clock):
    """Without serialization the losing transaction fails instead of double-warning."""
    store = InMemoryMembershipStore(serialize=False)
    member = _member(store)
    _valid_waiver(store, member)
    engine = AdmissionEngine(store, clock=clock)

    results = await asyncio.gather(
        *(engine.evaluate(member.identifier) for _ in range(3))
    )

    succeeded = [r.outcome for r in results if r.ok]
    assert len(store.warnings) == 1
    assert [o.status for o in succeeded].count(AdmissionStatus.WARNING_ISSUED) == 1
    assert all(
        o.status in (AdmissionStatus.WARNING_ISSUED, AdmissionStatus.WARNING_ACTIVE)
        for o in succeeded
    )
    assert len(store.sign_ins) == len(succeeded)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_checks_for_different_members(engine, store):
    members = [_member(store) for _ in range(5)]
    for member in members:
        _valid_waiver(store, member)

    results = await asyncio.gather(*(engine.evaluate(m.identifier) for m in members))

    assert {r.outcome.status for r in results} == {AdmissionStatus.WARNING_ISSUED}
    assert len(store.warnings) == 5
    assert {w.member_identifier for w in store.warnings} == {
        m.identifier for m in members
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_prior_sign_ins_do_not_affect_decision(engine, store):
    member = _member(store)
    store.add(SignInRecordFactory.create(member.identifier, admitted=True))

    result = await engine.evaluate(member.identifier)

    assert result.outcome.status == AdmissionStatus.INACTIVE
    assert len(store.sign_ins) == 2
