"""
Assessment store tests against an in-memory SQLite database.
"""
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.core.errors import Conflict, NotFound, StorageFailure
from app.models.assessment import Assessment, AssessmentStatusAudit, Customer
from app.schemas.assessment import (
    AssessmentFilter,
    AssessmentStatus,
    AssessmentSubmitRequest,
    CustomerProfile,
)
from app.services.assessment_store import AssessmentStore
from app.services.customer_store import CustomerStore
from app.services.followup import FollowUpCoordinator
from tests.factories import make_customer


def _submit_request(customer_id: int, score: int = 720, **overrides) -> AssessmentSubmitRequest:
    data = {
        "customer_id": customer_id,
        "score": score,
        "answers": {"q1": 3, "q2": "monthly", "dynamic_question_1": 0.7},
        "breakdown": {"discipline": 0.8, "risk": 0.4},
        "language": "hi",
    }
    data.update(overrides)
    return AssessmentSubmitRequest(**data)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_computes_status_and_touches_customer(self, session, customer):
        before = customer.last_accessed
        store = AssessmentStore(session)

        assessment = await store.submit(_submit_request(customer.id, score=720))

        assert assessment.id is not None
        assert assessment.status == AssessmentStatus.APPROVED.value
        assert assessment.language == "hi"

        refreshed = await session.get(Customer, customer.id)
        assert refreshed.last_accessed > before

        latest = await store.get_latest(customer.id)
        assert latest.id == assessment.id

    @pytest.mark.asyncio
    async def test_last_accessed_strictly_increases_even_if_clock_lags(self, session, customer):
        customer.last_accessed = customer.last_accessed + timedelta(days=36_500)
        await session.commit()
        before = customer.last_accessed

        await AssessmentStore(session).submit(_submit_request(customer.id))

        assert (await session.get(Customer, customer.id)).last_accessed > before

    @pytest.mark.asyncio
    async def test_unknown_customer_not_found_and_nothing_written(self, session, customer):
        with pytest.raises(NotFound):
            await AssessmentStore(session).submit(_submit_request(customer_id=9_999))

        count = await session.scalar(select(func.count()).select_from(Assessment))
        assert count == 0

    @pytest.mark.asyncio
    async def test_manual_review_band(self, session, customer):
        assessment = await AssessmentStore(session).submit(_submit_request(customer.id, score=650))
        assert assessment.status == AssessmentStatus.MANUAL_REVIEW.value

    def test_missing_language_defaults_to_english(self):
        assert _submit_request(1, language=None).language == "en"
        assert _submit_request(1, language="  ").language == "en"

    def test_empty_answers_rejected(self):
        with pytest.raises(ValueError):
            _submit_request(1, answers={})

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back_submission(self, session, customer, monkeypatch):
        customer_id = customer.id
        before = customer.last_accessed

        async def failing_flush(*args, **kwargs):
            raise OperationalError("INSERT INTO assessments", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "flush", failing_flush)
        with pytest.raises(StorageFailure):
            await AssessmentStore(session).submit(_submit_request(customer_id))
        monkeypatch.undo()

        count = await session.scalar(select(func.count()).select_from(Assessment))
        assert count == 0
        last_accessed = await session.scalar(select(Customer.last_accessed).where(Customer.id == customer_id))
        assert last_accessed == before


class TestGetLatest:
    @pytest.mark.asyncio
    async def test_none_when_customer_has_no_assessment(self, session, customer):
        assert await AssessmentStore(session).get_latest(customer.id) is None

    @pytest.mark.asyncio
    async def test_newest_wins(self, session, customer):
        store = AssessmentStore(session)
        first = await store.submit(_submit_request(customer.id, score=300))
        second = await store.submit(_submit_request(customer.id, score=800))

        latest = await store.get_latest(customer.id)
        assert latest.id == second.id
        assert latest.id != first.id

    @pytest.mark.asyncio
    async def test_created_at_tie_broken_by_id(self, session, customer):
        store = AssessmentStore(session)
        first = await store.submit(_submit_request(customer.id, score=300))
        second = await store.submit(_submit_request(customer.id, score=800))
        second.created_at = first.created_at
        await session.commit()

        assert (await store.get_latest(customer.id)).id == second.id

    @pytest.mark.asyncio
    async def test_includes_thread(self, session, customer):
        store = AssessmentStore(session)
        assessment = await store.submit(_submit_request(customer.id))
        coordinator = FollowUpCoordinator(session)
        await coordinator.post_message(assessment.id, "Customer", "Hello")
        await coordinator.request_documents(assessment.id, ["Payslip"])

        latest = await store.get_latest(customer.id)
        assert [m.sender for m in latest.messages] == ["Customer", "Bank Manager"]
        assert latest.documents == []

    @pytest.mark.asyncio
    async def test_other_customers_ignored(self, session, customer):
        other = make_customer(2)
        session.add(other)
        await session.commit()

        store = AssessmentStore(session)
        mine = await store.submit(_submit_request(customer.id))
        await store.submit(_submit_request(other.id))

        assert (await store.get_latest(customer.id)).id == mine.id


class TestListAll:
    @pytest.mark.asyncio
    async def test_newest_first_with_customer_name(self, session, customer):
        store = AssessmentStore(session)
        a = await store.submit(_submit_request(customer.id, score=100))
        b = await store.submit(_submit_request(customer.id, score=900))

        items = await store.list_all()
        assert [i.id for i in items] == [b.id, a.id]
        assert items[0].customer.display_name == "Asha Rao1"

    @pytest.mark.asyncio
    async def test_status_filter(self, session, customer):
        store = AssessmentStore(session)
        await store.submit(_submit_request(customer.id, score=100))
        approved = await store.submit(_submit_request(customer.id, score=900))

        items = await store.list_all(AssessmentFilter(status=AssessmentStatus.APPROVED))
        assert [i.id for i in items] == [approved.id]


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_override_ignores_score_and_is_audited(self, session, customer):
        store = AssessmentStore(session)
        assessment = await store.submit(_submit_request(customer.id, score=200))

        updated = await store.update_status(assessment.id, AssessmentStatus.APPROVED, changed_by="reviewer-7")

        assert updated.status == AssessmentStatus.APPROVED.value
        assert updated.score == 200
        history = await store.status_history(assessment.id)
        assert len(history) == 1
        assert history[0].old_status == "Rejected"
        assert history[0].new_status == "Approved"
        assert history[0].changed_by == "reviewer-7"

    @pytest.mark.asyncio
    async def test_unknown_assessment(self, session):
        with pytest.raises(NotFound):
            await AssessmentStore(session).update_status(404, AssessmentStatus.REJECTED)
        count = await session.scalar(select(func.count()).select_from(AssessmentStatusAudit))
        assert count == 0


class TestDelete:
    @pytest.mark.asyncio
    async def test_blocked_while_thread_exists(self, session, customer):
        store = AssessmentStore(session)
        assessment = await store.submit(_submit_request(customer.id))
        assessment_id = assessment.id
        await FollowUpCoordinator(session).post_message(assessment_id, "Customer", "hi")

        with pytest.raises(Conflict):
            await store.delete(assessment_id)
        assert await session.get(Assessment, assessment_id) is not None

    @pytest.mark.asyncio
    async def test_empty_assessment_can_be_deleted(self, session, customer):
        store = AssessmentStore(session)
        assessment = await store.submit(_submit_request(customer.id))

        await store.delete(assessment.id)
        assert await store.get_latest(customer.id) is None

    @pytest.mark.asyncio
    async def test_unknown(self, session):
        with pytest.raises(NotFound):
            await AssessmentStore(session).delete(12345)


class TestCustomerStore:
    @pytest.mark.asyncio
    async def test_duplicate_identity_conflicts(self, session, customer):
        profile = CustomerProfile(
            fname="Ravi", lname="Kumar", gender="M", age=40,
            mobile="9999999999", email=customer.email,
            pan="ZZZZZ9999Z", account_number="998877665544",
        )
        with pytest.raises(Conflict):
            await CustomerStore(session).register(profile, password_hash="hash")

    @pytest.mark.asyncio
    async def test_register_and_get(self, session):
        profile = CustomerProfile(
            fname="Ravi", lname="Kumar", gender="M", age=40,
            mobile="9999999999", email="ravi@example.com",
            pan="ZZZZZ9999Z", account_number="998877665544",
        )
        created = await CustomerStore(session).register(profile, password_hash="hash")
        fetched = await CustomerStore(session).get(created.id)
        assert fetched.email == "ravi@example.com"
        assert fetched.last_accessed is None

    @pytest.mark.asyncio
    async def test_get_unknown(self, session):
        with pytest.raises(NotFound):
            await CustomerStore(session).get(777)
