from bayit.services import (
    energy_filter,
    household_service,
    instance_generator,
    load_balancer,
    rewards_service,
    room_health,
    task_service,
    task_stats,
)


__all__ = [
    "energy_filter",
    "household_service",
    "instance_generator",
    "load_balancer",
    "rewards_service",
    "room_health",
    "task_service",
    "task_stats",
]
