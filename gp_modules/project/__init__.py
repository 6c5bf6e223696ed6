"""
Project Module (``gp_modules.project``).

Responsibility
--------------
Client engagements, the five-step lifecycle state machine
(not_started -> in_progress -> completed -> invoiced -> received) and the
setup / completion commands.

Invariants enforced
-------------------
* Status is monotonically non-decreasing and moves one step at a time.
* Lifecycle triggers are compare-and-set against the exact predecessor.
"""

from gp_modules.project.lifecycle import ProjectLifecycle, TriggerOutcome
from gp_modules.project.models import Project, ProjectStatus
from gp_modules.project.service import ProjectService
from gp_modules.project.workflows import LifecycleTrigger, PROJECT_LIFECYCLE_WORKFLOW

__all__ = [
    "Project",
    "ProjectStatus",
    "ProjectLifecycle",
    "ProjectService",
    "LifecycleTrigger",
    "TriggerOutcome",
    "PROJECT_LIFECYCLE_WORKFLOW",
]
