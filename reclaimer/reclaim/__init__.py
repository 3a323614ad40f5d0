"""Последовательность шагов очистки Docker и её исполнение."""

from reclaimer.reclaim.executor import ReclaimReport, StepResult, run_reclaim, run_step
from reclaimer.reclaim.steps import ReclaimStep, build_default_steps

__all__ = [
    "ReclaimReport",
    "ReclaimStep",
    "StepResult",
    "build_default_steps",
    "run_reclaim",
    "run_step",
]
