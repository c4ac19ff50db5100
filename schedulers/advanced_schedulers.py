"""
우선순위 기반 스케줄링 알고리즘
- Priority (선점형, 방향 설정 가능)
"""

from typing import List, Optional

from core.algorithm import Algorithm, get_available_processes
from core.config import SchedulerConfig
from core.process import Process


class PriorityAlgorithm(Algorithm):
    """
    Priority 스케줄러 (선점형)
    high_priority_first가 True면 숫자가 큰 쪽이, False면 작은 쪽이 우선
    """

    key = 'priority'
    name = 'Priority Scheduling'
    short_name = 'Priority'
    preemptive = True

    @staticmethod
    def _highest(processes: List[Process], high_priority_first: bool) -> Process:
        # max/min 모두 동률이면 먼저 나온 프로세스를 반환
        if high_priority_first:
            return max(processes, key=lambda p: p.priority)
        return min(processes, key=lambda p: p.priority)

    @staticmethod
    def _is_higher(a: Process, b: Process, high_priority_first: bool) -> bool:
        """a가 b보다 엄격히 높은 우선순위인지"""
        if high_priority_first:
            return a.priority > b.priority
        return a.priority < b.priority

    def select_next(self, ready_queue: List[Process], current_time: int,
                    config: SchedulerConfig) -> Optional[Process]:
        """우선순위가 가장 높은 프로세스 선택"""
        available = get_available_processes(ready_queue, current_time)
        if not available:
            return None

        return self._highest(available, config.high_priority_first)

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        """더 높은 우선순위의 프로세스가 있으면 선점"""
        others = [p for p in get_available_processes(ready_queue, current_time)
                  if p.pid != current_process.pid]
        if not others:
            return False

        highest = self._highest(others, config.high_priority_first)
        return self._is_higher(highest, current_process, config.high_priority_first)
