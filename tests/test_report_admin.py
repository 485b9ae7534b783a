"""Tests for the moderation dashboard queries and the report store."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.core.exceptions import DuplicateReportError, StoreUnavailableError, ValidationError
from app.repositories import report_repository
from app.services import report_service

REASON = "Reported during the weekly content sweep."


async def seed_reports(db, reporter, other_reporter, author, make_resource):
    """Three resources with reports of different types and statuses."""
    notes = await make_resource(author.id, title="Calculus Notes", description="Limits and series")
    slides = await make_resource(author.id, title="Organic Chemistry Slides", description=None)
    exam = await make_resource(author.id, title="Old Exam 2019", description="Leaked solutions")

    a = await report_service.submit_report(db, reporter.id, notes.id, "spam", REASON)
    b = await report_service.submit_report(db, reporter.id, slides.id, "copyright_violation", REASON)
    c = await report_service.submit_report(db, other_reporter.id, exam.id, "inappropriate_content", REASON)
    await report_service.transition_report(db, c.id, "dismissed", author.id)

    return {"notes": notes.id, "slides": slides.id, "exam": exam.id, "reports": (a.id, b.id, c.id)}


@pytest.fixture
def other_reporter_factory(make_user):
    async def _make():
        return await make_user(name="Carol Student", email="carol@uni.example")

    return _make


# ============== Admin search ==============


@pytest.mark.asyncio
async def test_admin_list_all(
    client: AsyncClient, db_session, auth_headers, reporter, author, admin,
    make_resource, other_reporter_factory,
):
    carol = await other_reporter_factory()
    await seed_reports(db_session, reporter, carol, author, make_resource)

    response = await client.get("/api/v1/reports/admin/all", headers=auth_headers(admin.id))

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert all("ip_address" in r for r in data["reports"])
    assert {r["reporter"]["email"] for r in data["reports"]} == {
        "alice@example.com",
        "carol@uni.example",
    }


@pytest.mark.asyncio
async def test_admin_filters(
    client: AsyncClient, db_session, auth_headers, reporter, author, admin,
    make_resource, other_reporter_factory,
):
    carol = await other_reporter_factory()
    await seed_reports(db_session, reporter, carol, author, make_resource)
    headers = auth_headers(admin.id)

    by_status = await client.get("/api/v1/reports/admin/all?status=dismissed", headers=headers)
    by_type = await client.get("/api/v1/reports/admin/all?type=spam", headers=headers)
    by_priority = await client.get("/api/v1/reports/admin/all?priority=urgent", headers=headers)
    combined = await client.get(
        "/api/v1/reports/admin/all?status=pending&priority=high", headers=headers
    )

    assert by_status.json()["total"] == 1
    assert by_status.json()["reports"][0]["type"] == "inappropriate_content"
    assert by_type.json()["total"] == 1
    assert by_priority.json()["reports"][0]["type"] == "copyright_violation"
    assert combined.json()["total"] == 0


@pytest.mark.asyncio
async def test_admin_invalid_filter_value(client: AsyncClient, auth_headers, admin):
    response = await client.get(
        "/api/v1/reports/admin/all?priority=critical", headers=auth_headers(admin.id)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_admin_search_matches_reporter_and_resource(
    db_session, reporter, author, make_resource, other_reporter_factory,
):
    carol = await other_reporter_factory()
    await seed_reports(db_session, reporter, carol, author, make_resource)

    by_title, total_title = await report_service.get_admin_reports(db_session, search="chemistry")
    by_email, total_email = await report_service.get_admin_reports(db_session, search="CAROL@")
    by_description, _ = await report_service.get_admin_reports(db_session, search="leaked")
    nothing, total_nothing = await report_service.get_admin_reports(db_session, search="zoology")

    assert total_title == 1
    assert by_title[0].resource.title == "Organic Chemistry Slides"
    assert total_email == 1
    assert by_email[0].reporter.name == "Carol Student"
    assert by_description[0].type == "inappropriate_content"
    assert total_nothing == 0


@pytest.mark.asyncio
async def test_admin_blank_search_is_ignored(
    db_session, reporter, author, make_resource, other_reporter_factory,
):
    carol = await other_reporter_factory()
    await seed_reports(db_session, reporter, carol, author, make_resource)

    _, total = await report_service.get_admin_reports(db_session, search="   ")

    assert total == 3


@pytest.mark.asyncio
async def test_resource_reports(
    client: AsyncClient, db_session, auth_headers, reporter, author, admin, make_user, resource,
):
    second = await make_user()
    await report_service.submit_report(db_session, reporter.id, resource.id, "spam", REASON)
    await report_service.submit_report(db_session, second.id, resource.id, "other", REASON)

    response = await client.get(
        f"/api/v1/reports/admin/resources/{resource.id}", headers=auth_headers(admin.id)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {r["resource_id"] for r in data["reports"]} == {str(resource.id)}


# ============== Statistics ==============


@pytest.mark.asyncio
async def test_statistics(
    client: AsyncClient, db_session, auth_headers, reporter, author, admin,
    make_resource, other_reporter_factory,
):
    carol = await other_reporter_factory()
    ids = await seed_reports(db_session, reporter, carol, author, make_resource)
    spam_id = ids["reports"][0]
    await report_service.transition_report(db_session, spam_id, "reviewing", admin.id)
    await report_service.transition_report(
        db_session, spam_id, "resolved", admin.id, action_taken="no_action"
    )

    response = await client.get(
        "/api/v1/reports/admin/statistics", headers=auth_headers(admin.id)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["pending"] == 1
    assert data["reviewing"] == 0
    assert data["resolved"] == 1
    assert data["dismissed"] == 1
    assert data["by_type"] == {
        "spam": 1,
        "copyright_violation": 1,
        "inappropriate_content": 1,
    }
    assert data["by_priority"] == {"medium": 1, "urgent": 1, "high": 1}
    assert data["resolution_rate"] == 33.33


@pytest.mark.asyncio
async def test_statistics_empty(db_session):
    stats = await report_service.get_report_statistics(db_session)

    assert stats["total"] == 0
    assert stats["by_type"] == {}
    assert stats["resolution_rate"] == 0.0


@pytest.mark.asyncio
async def test_statistics_date_bounds(db_session, reporter, resource):
    await report_service.submit_report(db_session, reporter.id, resource.id, "spam", REASON)
    now = datetime.now(timezone.utc)

    future = await report_service.get_report_statistics(
        db_session, start_date=now + timedelta(days=1)
    )
    past = await report_service.get_report_statistics(
        db_session, end_date=now - timedelta(days=1)
    )
    around = await report_service.get_report_statistics(
        db_session,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=1),
    )

    assert future["total"] == 0
    assert past["total"] == 0
    assert around["total"] == 1


@pytest.mark.asyncio
async def test_statistics_reversed_range(db_session):
    now = datetime.now(timezone.utc)

    with pytest.raises(ValidationError):
        await report_service.get_report_statistics(
            db_session, start_date=now, end_date=now - timedelta(days=7)
        )


# ============== Store ==============


@pytest.mark.asyncio
async def test_has_user_reported_ignores_closed_reports(db_session, reporter, admin, resource):
    report = await report_service.submit_report(
        db_session, reporter.id, resource.id, "spam", REASON
    )
    assert await report_repository.has_user_reported(db_session, reporter.id, resource.id)
    assert not await report_repository.has_user_reported(
        db_session, reporter.id, resource.id, exclude_report_id=report.id
    )

    await report_service.transition_report(db_session, report.id, "dismissed", admin.id)

    assert not await report_repository.has_user_reported(db_session, reporter.id, resource.id)


@pytest.mark.asyncio
async def test_store_rejects_second_live_report(db_session, reporter, resource):
    """The partial unique index catches a duplicate that slipped past the check."""
    fields = dict(
        user_id=reporter.id,
        resource_id=resource.id,
        type="spam",
        reason=REASON,
        priority="medium",
        status="pending",
    )
    await report_repository.create_report(db_session, **fields)

    with pytest.raises(DuplicateReportError):
        await report_repository.create_report(db_session, **fields)


@pytest.mark.asyncio
async def test_store_allows_closed_duplicates(db_session, reporter, resource):
    fields = dict(
        user_id=reporter.id,
        resource_id=resource.id,
        type="spam",
        reason=REASON,
        priority="medium",
    )
    await report_repository.create_report(db_session, status="dismissed", **fields)
    await report_repository.create_report(db_session, status="resolved", **fields)
    await report_repository.create_report(db_session, status="pending", **fields)

    _, total = await report_repository.get_reports_by_resource(db_session, fields["resource_id"])
    assert total == 3


@pytest.mark.asyncio
async def test_store_outage_is_retryable(client: AsyncClient, db_session, auth_headers, admin):
    headers = auth_headers(admin.id)
    outage = OperationalError("SELECT", {}, Exception("connection refused"))

    with patch.object(report_repository, "_paginate", side_effect=StoreUnavailableError()):
        response = await client.get("/api/v1/reports/admin/all", headers=headers)

    assert response.status_code == 503
    assert response.json()["code"] == "SERVER_UNAVAILABLE"
    assert response.json()["metadata"] == {"retryable": True}

    with patch.object(db_session, "execute", side_effect=outage):
        with pytest.raises(StoreUnavailableError):
            await report_repository.count_live_reports(db_session, admin.id)


@pytest.mark.asyncio
async def test_store_timeout(db_session):
    async def hang(*args, **kwargs):
        await asyncio.sleep(5)

    with patch.object(settings, "DB_QUERY_TIMEOUT_SECONDS", 0.05):
        with patch.object(db_session, "execute", side_effect=hang):
            with pytest.raises(StoreUnavailableError):
                await report_repository.get_report_by_id(db_session, 1)
