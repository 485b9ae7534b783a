"""Tests for background jobs: moderator alerts and automated review."""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from app.config import settings
from app.models.notification import Notification
from app.repositories import report_repository
from app.services import auto_review_service, report_service
from app.workers.runner import Worker, worker

REASON = "Same advert pasted into every course folder."


async def count_alerts(db, report_id: int | None = None) -> int:
    query = select(func.count(Notification.id)).where(Notification.category == "moderator_alert")
    if report_id is not None:
        query = query.where(Notification.resource_id == str(report_id))
    result = await db.execute(query)
    return result.scalar()


# ============== Queue ==============


class TestWorkerQueue:
    """Tests for enqueueing and draining jobs."""

    def test_enqueue_returns_immediately(self):
        local = Worker(maxsize=5)

        assert local.enqueue_job("notify_moderators", report_id=1) is True
        assert local.queue.qsize() == 1

    def test_full_queue_drops_job(self):
        local = Worker(maxsize=1)

        assert local.enqueue_job("auto_review", report_id=1) is True
        assert local.enqueue_job("auto_review", report_id=2) is False
        assert local.queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_unknown_job_is_skipped(self, session_factory):
        local = Worker(session_factory=session_factory)
        local.enqueue_job("reindex_search")

        assert await local.drain() == 1

    @pytest.mark.asyncio
    async def test_failing_job_does_not_stop_the_queue(
        self, db_session, session_factory, reporter, admin, resource
    ):
        report = await report_service.submit_report(
            db_session, reporter.id, resource.id, "copyright_violation", REASON
        )
        local = Worker(session_factory=session_factory)
        local.enqueue_job("auto_review", report_id=report.id)
        local.enqueue_job("notify_moderators", report_id=report.id)

        with patch.object(
            auto_review_service, "review_report", side_effect=RuntimeError("boom")
        ):
            assert await local.drain() == 2

        assert await count_alerts(db_session, report.id) == 1

    @pytest.mark.asyncio
    async def test_running_loop_processes_jobs(
        self, db_session, session_factory, reporter, admin, resource
    ):
        report = await report_service.submit_report(
            db_session, reporter.id, resource.id, "inappropriate_content", REASON
        )
        local = Worker(session_factory=session_factory)
        await local.start()
        try:
            local.enqueue_job("notify_moderators", report_id=report.id)
            await asyncio.wait_for(local.queue.join(), timeout=5)
        finally:
            await local.stop()

        assert local.is_running is False
        assert await count_alerts(db_session, report.id) == 1


# ============== Moderator alerts ==============


@pytest.mark.asyncio
async def test_urgent_report_alerts_active_admins(
    db_session, run_jobs, reporter, admin, make_user, resource
):
    await make_user(name="Second Moderator", is_admin=True)
    await make_user(name="Former Moderator", is_admin=True, status="suspended")

    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "copyright_violation", REASON
    )

    assert await run_jobs() == 1
    assert await count_alerts(db_session, report.id) == 2


@pytest.mark.asyncio
async def test_moderator_alerts_are_idempotent(db_session, run_jobs, reporter, admin, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "copyright_violation", REASON
    )
    worker.enqueue_job("notify_moderators", report_id=report.id)

    assert await run_jobs() == 2
    assert await count_alerts(db_session, report.id) == 1


@pytest.mark.asyncio
async def test_alert_for_deleted_report_is_dropped(db_session, run_jobs, reporter, admin, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "copyright_violation", REASON
    )
    await report_service.delete_report(db_session, report.id)

    assert await run_jobs() == 1
    assert await count_alerts(db_session) == 0


@pytest.mark.asyncio
async def test_low_priority_report_does_not_alert(db_session, run_jobs, reporter, admin, resource):
    await report_service.submit_report(
        db_session, reporter.id, resource.id, "broken_file", REASON
    )

    assert await run_jobs() == 0
    assert await count_alerts(db_session) == 0


@pytest.mark.asyncio
async def test_submission_survives_full_queue(db_session, reporter, resource):
    with patch.object(worker, "enqueue_job", return_value=False):
        report = await report_service.submit_report(
            db_session, reporter.id, resource.id, "copyright_violation", REASON
        )

    assert report.status == "pending"


# ============== Automated review ==============


@pytest.mark.asyncio
async def test_auto_review_below_threshold(db_session, reporter, admin, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "spam", REASON
    )

    result = await auto_review_service.review_report(db_session, report.id)

    assert result.reviewed is True
    assert result.live_reports_of_type == 1
    assert result.escalated is False
    assert await count_alerts(db_session) == 0


@pytest.mark.asyncio
async def test_auto_review_escalates_corroborated_spam(
    db_session, run_jobs, admin, make_user, resource
):
    """Enough independent spam reports alert moderators without touching the reports."""
    report_ids = []
    for _ in range(settings.AUTO_REVIEW_ESCALATION_THRESHOLD):
        reporter = await make_user()
        report = await report_service.submit_report(
            db_session, reporter.id, resource.id, "spam", REASON
        )
        report_ids.append(report.id)

    assert await run_jobs() == settings.AUTO_REVIEW_ESCALATION_THRESHOLD
    assert await count_alerts(db_session, report_ids[-1]) == 1

    for report_id in report_ids:
        report = await report_repository.get_report_by_id(db_session, report_id)
        assert report.status == "pending"
        assert report.priority == "medium"


@pytest.mark.asyncio
async def test_auto_review_skips_manual_types(db_session, reporter, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "broken_file", REASON
    )

    result = await auto_review_service.review_report(db_session, report.id)

    assert result.reviewed is False
    assert "manually" in result.skipped_reason


@pytest.mark.asyncio
async def test_auto_review_skips_reports_already_picked_up(db_session, reporter, admin, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "wrong_category", REASON
    )
    await report_service.transition_report(db_session, report.id, "reviewing", admin.id)

    result = await auto_review_service.review_report(db_session, report.id)

    assert result.to_dict() == {
        "reviewed": False,
        "live_reports_of_type": 0,
        "escalated": False,
        "skipped_reason": "Report already reviewing",
    }


@pytest.mark.asyncio
async def test_auto_review_disabled(db_session, reporter, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "spam", REASON
    )

    with patch.object(settings, "ENABLE_AUTO_REVIEW", False):
        result = await auto_review_service.review_report(db_session, report.id)

    assert result.reviewed is False
    assert result.skipped_reason == "Auto-review is disabled"
