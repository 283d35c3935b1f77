from src.services import (
    ledger_service,
    wip_service,
    time_validation_service,
    task_state_machine,
    burndown_service,
    analytics_service,
    task_service,
)


__all__ = [
    "analytics_service",
    "burndown_service",
    "ledger_service",
    "task_service",
    "task_state_machine",
    "time_validation_service",
    "wip_service",
]
