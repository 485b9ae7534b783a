from app.models.notification import Notification
from app.models.report import Report
from app.models.resource import Resource
from app.models.user import User

__all__ = [
    "User",
    "Resource",
    "Report",
    "Notification",
]
