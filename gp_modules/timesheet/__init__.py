"""
Timesheet Module (``gp_modules.timesheet``).

Hours submitted by staff against projects, reviewed by the department
head or the project's manager.  Approved hours drive labor cost.
"""

from gp_modules.timesheet.models import TimesheetEntry, TimesheetStatus
from gp_modules.timesheet.service import TimesheetService
from gp_modules.timesheet.workflows import TIMESHEET_APPROVAL_WORKFLOW

__all__ = [
    "TimesheetEntry",
    "TimesheetStatus",
    "TimesheetService",
    "TIMESHEET_APPROVAL_WORKFLOW",
]
