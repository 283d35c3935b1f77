"""Sprint-level configuration values injected into the core per call."""

from typing import Annotated

from pydantic import BaseModel, Field

from src.core.config import Settings
from src.domain.task import TaskStatus


class WipConfig(BaseModel):
    """Per-status concurrency limits and whether they block moves."""

    enforced: bool = Field(default=False, description="Limits block moves only when enforced")
    limits: dict[TaskStatus, Annotated[int, Field(ge=0)] | None] = Field(
        default_factory=dict, description="Limit per status; 0 or None means no limit"
    )

    def limit_for(self, status: TaskStatus) -> int | None:
        return self.limits.get(status)

    @classmethod
    def from_settings(cls, settings: Settings) -> "WipConfig":
        """Build the default configuration from application settings."""
        return cls(
            enforced=settings.wip_limits_enforced,
            limits={
                TaskStatus.PRIORITIZED: settings.wip_limit_prioritized,
                TaskStatus.DOING: settings.wip_limit_doing,
                TaskStatus.DONE: None,
            },
        )


class TeamCapacity(BaseModel):
    """Team capacity used to draw the ideal line."""

    developers: int = Field(default=1, ge=0, description="Developers on the team")
    hours_per_day: int = Field(default=8, ge=0, description="Working hours per developer per day")
    sprint_days: int = Field(default=10, ge=1, description="Nominal sprint length in days")

    @property
    def hours_per_sprint_day(self) -> int:
        return self.developers * self.hours_per_day

    @classmethod
    def from_settings(cls, settings: Settings) -> "TeamCapacity":
        return cls(
            developers=settings.default_developers,
            hours_per_day=settings.default_hours_per_day,
            sprint_days=settings.default_sprint_days,
        )
