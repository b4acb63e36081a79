"""
tasktally - a local command-line task tracker.

Tasks are kept in a JSON file and move between HOLD, DOING and DONE.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from tasktally.core.config.models import TallyConfig
from tasktally.core.tasks.models import Task, TaskStatus
from tasktally.core.tasks.store import TaskStore

__all__ = ["TallyConfig", "Task", "TaskStatus", "TaskStore", "__version__"]
