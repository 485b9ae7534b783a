"""
Seed script to populate database with users, resources and reports for
development and manual testing of the moderation dashboard.
Run with: python scripts/seed_test_data.py
"""

import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

# Add parent directory to path so we can import app
sys.path.insert(0, str(Path(__file__).parent.parent))

from faker import Faker
from sqlalchemy import func, select

from app.database import async_session_maker
from app.models.report import Report
from app.models.resource import Resource
from app.models.user import User
from app.schemas.report import ActionTaken, ReportStatus, ReportType
from app.services.report_policy import priority_for_type

fake = Faker()

# Configuration
NUM_USERS = 40
NUM_RESOURCES = 60
NUM_REPORTS = 80
TEST_EMAIL_DOMAIN = "test.unishare.dev"

FORMATS = ["pdf", "docx", "pptx", "xlsx", "link"]


async def seed_users(db) -> list[User]:
    """Create test users, a few of them already suspended."""
    users = []
    print(f"Creating {NUM_USERS} test users...")

    for i in range(NUM_USERS):
        status = random.choice(["active"] * 9 + ["suspended"])
        user = User(
            id=uuid4(),
            email=f"user{i+1}@{TEST_EMAIL_DOMAIN}",
            name=fake.name(),
            status=status,
            suspended_at=datetime.now(timezone.utc) if status == "suspended" else None,
            is_admin=False,
            created_at=datetime.now(timezone.utc) - timedelta(days=random.randint(1, 365)),
        )
        db.add(user)
        users.append(user)

    await db.flush()
    print(f"  Created {len(users)} users")
    return users


async def seed_resources(db, users: list[User]) -> list[Resource]:
    """Create published resources authored by the test users."""
    resources = []
    print(f"Creating {NUM_RESOURCES} resources...")

    for _ in range(NUM_RESOURCES):
        author = random.choice(users)
        resource = Resource(
            id=uuid4(),
            title=fake.sentence(nb_words=6).rstrip(".")[:255],
            description=fake.paragraph(nb_sentences=3) if random.choice([True, False]) else None,
            format=random.choice(FORMATS),
            author_id=author.id,
            status="published",
            created_at=author.created_at + timedelta(days=random.randint(0, 30)),
        )
        db.add(resource)
        resources.append(resource)

    await db.flush()
    print(f"  Created {len(resources)} resources")
    return resources


async def seed_reports(db, users: list[User], resources: list[Resource]) -> list[Report]:
    """
    Create reports in every status. Each reporter files at most one report
    per resource so the open-report constraint always holds.
    """
    reports = []
    active_users = [u for u in users if u.status == "active"]
    seen: set[tuple] = set()
    statuses = [ReportStatus.pending] * 4 + [
        ReportStatus.reviewing,
        ReportStatus.resolved,
        ReportStatus.dismissed,
    ]

    print(f"Creating up to {NUM_REPORTS} reports...")

    for _ in range(NUM_REPORTS):
        reporter = random.choice(active_users)
        resource = random.choice(resources)
        if resource.author_id == reporter.id or (reporter.id, resource.id) in seen:
            continue
        seen.add((reporter.id, resource.id))

        report_type = random.choice(list(ReportType))
        status = random.choice(statuses)
        created_at = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 60))

        report = Report(
            user_id=reporter.id,
            resource_id=resource.id,
            type=report_type.value,
            reason=fake.paragraph(nb_sentences=2)[:1000],
            additional_info=fake.url() if random.random() < 0.3 else None,
            status=status.value,
            priority=priority_for_type(report_type).value,
            ip_address=fake.ipv4(),
            user_agent=fake.user_agent(),
            created_at=created_at,
        )
        if status in (ReportStatus.resolved, ReportStatus.dismissed):
            report.resolution_notes = fake.sentence()
        if status == ReportStatus.resolved:
            report.action_taken = random.choice(
                [ActionTaken.no_action, ActionTaken.content_modified, ActionTaken.category_changed]
            ).value
            report.resolved_at = created_at + timedelta(hours=random.randint(1, 72))

        db.add(report)
        reports.append(report)

    await db.flush()
    print(f"  Created {len(reports)} reports")
    return reports


async def main():
    print("=" * 50)
    print("Seeding test data for UniShare Reports")
    print("=" * 50)

    async with async_session_maker() as db:
        try:
            count_result = await db.execute(
                select(func.count(User.id)).where(User.email.like(f"%@{TEST_EMAIL_DOMAIN}"))
            )
            existing_count = count_result.scalar() or 0

            if existing_count > 0:
                print(f"\nFound {existing_count} existing test users.")
                response = input("Do you want to add more test data? (y/n): ")
                if response.lower() != 'y':
                    print("Aborted.")
                    return

            print("\nCreating test data...")

            users = await seed_users(db)
            resources = await seed_resources(db, users)
            reports = await seed_reports(db, users, resources)

            await db.commit()

            print("\n" + "=" * 50)
            print("Summary:")
            print("=" * 50)
            print(f"  Users created: {len(users)}")
            print(f"    - Suspended: {len([u for u in users if u.status == 'suspended'])}")
            print(f"  Resources created: {len(resources)}")
            print(f"  Reports created: {len(reports)}")
            for status in ReportStatus:
                print(f"    - {status.value}: {len([r for r in reports if r.status == status.value])}")
            print("=" * 50)

        except Exception as e:
            print(f"\nError: {e}")
            await db.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(main())
