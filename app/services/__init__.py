"""Contract and task lifecycle services."""

from app.services.contracts import ContractManager
from app.services.dashboard import DashboardAggregator
from app.services.factory import LifecycleServices, build_email_dispatcher, build_services
from app.services.notifications import NotificationFanout
from app.services.sweep import ExpirySweep, SweepResult, days_until
from app.services.tasks import TaskManager
from app.services.users import UserDirectory

__all__ = [
    "ContractManager",
    "DashboardAggregator",
    "ExpirySweep",
    "LifecycleServices",
    "NotificationFanout",
    "SweepResult",
    "TaskManager",
    "UserDirectory",
    "build_email_dispatcher",
    "build_services",
    "days_until",
]
