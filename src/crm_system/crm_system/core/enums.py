from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "Admin"
    SUB_ADMIN = "Sub Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"


class MachineStatus(str, Enum):
    OPERATIONAL = "Operational"
    MAINTENANCE = "Maintenance"
    REPAIR = "Repair"
    OFFLINE = "Offline"
    RETIRED = "Retired"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TaskCategory(str, Enum):
    PRODUCTION = "Production"
    MAINTENANCE = "Maintenance"
    QUALITY_CHECK = "Quality Check"
    TRAINING = "Training"
    OTHER = "Other"


class RecurringPattern(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"
