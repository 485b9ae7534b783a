"""
Classification rules for reports.

Both tables are immutable data so they can be audited and tested on their own:
- report type -> priority, auto-review flag and catalogue text
- report status -> statuses it may move to
"""

from dataclasses import dataclass
from types import MappingProxyType

from app.schemas.report import ReportPriority, ReportStatus, ReportType


@dataclass(frozen=True)
class ReportTypeConfig:
    priority: ReportPriority
    auto_review: bool
    label: str
    description: str


# Legal and safety risk outranks presentation issues
REPORT_TYPE_CONFIG: MappingProxyType[ReportType, ReportTypeConfig] = MappingProxyType({
    ReportType.inappropriate_content: ReportTypeConfig(
        priority=ReportPriority.high,
        auto_review=False,
        label="Inappropriate content",
        description="Content that violates the community guidelines",
    ),
    ReportType.copyright_violation: ReportTypeConfig(
        priority=ReportPriority.urgent,
        auto_review=False,
        label="Copyright violation",
        description="Content that infringes someone else's copyright",
    ),
    ReportType.spam: ReportTypeConfig(
        priority=ReportPriority.medium,
        auto_review=True,
        label="Spam",
        description="Unwanted promotional or repetitive content",
    ),
    ReportType.misleading_title: ReportTypeConfig(
        priority=ReportPriority.low,
        auto_review=True,
        label="Misleading title",
        description="The title does not match the content",
    ),
    ReportType.wrong_category: ReportTypeConfig(
        priority=ReportPriority.low,
        auto_review=True,
        label="Wrong category",
        description="The resource is filed under the wrong category",
    ),
    ReportType.broken_file: ReportTypeConfig(
        priority=ReportPriority.medium,
        auto_review=False,
        label="Broken file",
        description="The file cannot be opened or is corrupted",
    ),
    ReportType.other: ReportTypeConfig(
        priority=ReportPriority.medium,
        auto_review=False,
        label="Other",
        description="A problem not listed above",
    ),
})

# Resolved is terminal; dismissed reports can be reopened
VALID_TRANSITIONS: MappingProxyType[ReportStatus, frozenset[ReportStatus]] = MappingProxyType({
    ReportStatus.pending: frozenset({ReportStatus.reviewing, ReportStatus.dismissed}),
    ReportStatus.reviewing: frozenset(
        {ReportStatus.resolved, ReportStatus.dismissed, ReportStatus.pending}
    ),
    ReportStatus.dismissed: frozenset({ReportStatus.pending, ReportStatus.reviewing}),
    ReportStatus.resolved: frozenset(),
})

# Statuses counted by the one-live-report-per-resource rule
LIVE_STATUSES: frozenset[ReportStatus] = frozenset({ReportStatus.pending, ReportStatus.reviewing})

# Priorities that page moderators as soon as the report lands
NOTIFY_MODERATOR_PRIORITIES: frozenset[ReportPriority] = frozenset(
    {ReportPriority.high, ReportPriority.urgent}
)

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 1000
ADDITIONAL_INFO_MAX_LENGTH = 2000


def priority_for_type(report_type: ReportType) -> ReportPriority:
    """Look up the priority tier for a report type."""
    return REPORT_TYPE_CONFIG[report_type].priority


def requires_auto_review(report_type: ReportType) -> bool:
    return REPORT_TYPE_CONFIG[report_type].auto_review


def should_notify_moderators(priority: ReportPriority) -> bool:
    return priority in NOTIFY_MODERATOR_PRIORITIES


def is_valid_transition(current: ReportStatus, new: ReportStatus) -> bool:
    return new in VALID_TRANSITIONS[current]


def is_terminal(status: ReportStatus) -> bool:
    return not VALID_TRANSITIONS[status]
