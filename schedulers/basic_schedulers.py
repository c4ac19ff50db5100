"""
기본 스케줄링 알고리즘 구현
- FCFS (First-Come, First-Served)
- SJF (Shortest Job First - 비선점형)
- SJF 선점형 (SRTF: Shortest Remaining Time First)
- Round Robin
"""

from typing import Dict, List, Optional

from core.algorithm import Algorithm, get_available_processes
from core.config import SchedulerConfig
from core.process import Process


class FCFSAlgorithm(Algorithm):
    """
    FCFS (First-Come, First-Served)
    비선점형: 먼저 도착한 프로세스를 먼저 처리
    """

    key = 'fcfs'
    name = 'First Come First Serve'
    short_name = 'FCFS'
    preemptive = False

    def select_next(self, ready_queue: List[Process], current_time: int,
                    config: SchedulerConfig) -> Optional[Process]:
        """도착 시간이 가장 빠른 프로세스 선택"""
        available = get_available_processes(ready_queue, current_time)
        if not available:
            return None

        # Ready 큐는 도착 시간순으로 정렬되어 있으므로 첫 번째 프로세스 (FIFO)
        return available[0]

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        return False


class SJFAlgorithm(Algorithm):
    """
    SJF (Shortest Job First) - 비선점형
    남은 실행 시간이 가장 짧은 프로세스를 선택하고 끝날 때까지 실행
    """

    key = 'sjf'
    name = 'Shortest Job First'
    short_name = 'SJF'
    preemptive = False

    def select_next(self, ready_queue: List[Process], current_time: int,
                    config: SchedulerConfig) -> Optional[Process]:
        """남은 시간이 가장 짧은 프로세스 선택 (동률이면 큐에서 먼저 나온 것)"""
        available = get_available_processes(ready_queue, current_time)
        if not available:
            return None

        return min(available, key=lambda p: p.remaining_time)

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        return False


class SJFPreemptiveAlgorithm(SJFAlgorithm):
    """
    SJF 선점형 (SRTF: Shortest Remaining Time First)
    매 틱마다 남은 시간이 더 짧은 프로세스가 있으면 선점
    """

    key = 'sjf-preemptive'
    name = 'Shortest Job First (Preemptive)'
    short_name = 'SJF-P'
    preemptive = True

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        """
        선점 필요 여부 확인

        Returns:
            다른 프로세스의 남은 시간이 엄격히 더 짧으면 True
        """
        others = [p for p in get_available_processes(ready_queue, current_time)
                  if p.pid != current_process.pid]
        if not others:
            return False

        shortest = min(others, key=lambda p: p.remaining_time)
        return shortest.remaining_time < current_process.remaining_time


class RoundRobinAlgorithm(Algorithm):
    """
    Round Robin
    각 프로세스에게 동일한 타임 슬라이스(quantum)를 할당하고 순환 실행
    """

    key = 'rr'
    name = 'Round Robin'
    short_name = 'RR'
    preemptive = True

    def __init__(self):
        # PID → 마지막 디스패치 이후 사용한 시간
        self.time_slice_used: Dict[int, int] = {}
        self.last_process: Optional[Process] = None

    def select_next(self, ready_queue: List[Process], current_time: int,
                    config: SchedulerConfig) -> Optional[Process]:
        available = get_available_processes(ready_queue, current_time)
        if not available:
            return None

        if self.last_process is not None:
            last_index = next((i for i, p in enumerate(available)
                               if p.pid == self.last_process.pid), -1)

            if last_index != -1:
                # 타임 슬라이스가 남아 있으면 이어서 실행
                candidate = available[last_index]
                used = self.time_slice_used.get(candidate.pid, 0)
                if used < config.quantum and candidate.remaining_time > 0:
                    return candidate

                # 직전 프로세스 다음 순서로 순환
                if len(available) > 1:
                    return available[(last_index + 1) % len(available)]

        return available[0]

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        """타임 슬라이스 만료 시 선점"""
        used = self.time_slice_used.get(current_process.pid, 0)
        return used >= config.quantum

    def on_tick(self, process: Process, config: SchedulerConfig):
        self.time_slice_used[process.pid] = self.time_slice_used.get(process.pid, 0) + 1
        self.last_process = process

    def on_context_switch(self, new_process: Process, config: SchedulerConfig):
        # 새로 디스패치된 프로세스의 타임 슬라이스 초기화
        self.time_slice_used[new_process.pid] = 0
        self.last_process = new_process

    def reset(self):
        self.time_slice_used.clear()
        self.last_process = None
