"""Domain models and DTOs."""

from src.domain.sprint import TeamCapacity, WipConfig
from src.domain.task import (
    STATUS_ORDER,
    Movement,
    Task,
    TaskPriority,
    TaskStatus,
    new_task,
    next_status,
    previous_status,
)


__all__ = [
    "STATUS_ORDER",
    "Movement",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TeamCapacity",
    "WipConfig",
    "new_task",
    "next_status",
    "previous_status",
]
