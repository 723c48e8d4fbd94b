"""Planning module for weekly slot allocation."""

from .plan_state import PlanState
from .greedy_allocator import GreedyAllocator, AllocationResult
from .orchestrator import PlannerOrchestrator, PlanningResult, PlanningStage

__all__ = [
    "PlanState",
    "GreedyAllocator",
    "AllocationResult",
    "PlannerOrchestrator",
    "PlanningResult",
    "PlanningStage",
]
