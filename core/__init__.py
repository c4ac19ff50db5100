"""
Core modules for CPU Scheduling Simulator
"""

from .process import Process, ProcessState, ProcessIdGenerator, PROCESS_COLORS
from .config import (SchedulerConfig, InvalidConfiguration, build_config,
                     DEFAULT_ALGORITHM, DEFAULT_QUANTUM, MAX_SIMULATION_TIME)
from .algorithm import Algorithm
from .scheduler import Scheduler, SchedulerStats, SchedulerStatus, GanttEntry
from .comparison import ComparisonRun, run_simulation, compare_algorithms

__all__ = [
    'Process',
    'ProcessState',
    'ProcessIdGenerator',
    'PROCESS_COLORS',
    'SchedulerConfig',
    'InvalidConfiguration',
    'build_config',
    'DEFAULT_ALGORITHM',
    'DEFAULT_QUANTUM',
    'MAX_SIMULATION_TIME',
    'Algorithm',
    'Scheduler',
    'SchedulerStats',
    'SchedulerStatus',
    'GanttEntry',
    'ComparisonRun',
    'run_simulation',
    'compare_algorithms'
]
