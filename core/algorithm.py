"""
스케줄링 알고리즘 공통 인터페이스
"""

from typing import List, Optional

from .config import SchedulerConfig
from .process import Process


class Algorithm:
    """
    스케줄링 알고리즘 기본 클래스

    select_next / should_preempt는 하위 클래스에서 반드시 구현하고,
    on_tick / on_context_switch / reset 훅은 필요한 알고리즘만 재정의한다.
    인스턴스는 스케줄러마다 따로 생성된다.
    """

    key = ""
    name = "Base Algorithm"
    short_name = ""
    preemptive = False

    def select_next(self, ready_queue: List[Process], current_time: int,
                    config: SchedulerConfig) -> Optional[Process]:
        """
        다음 실행할 프로세스 선택

        Returns:
            선택된 프로세스 또는 None (CPU 유휴)
        """
        raise NotImplementedError("Subclasses must implement select_next()")

    def should_preempt(self, current_process: Process, ready_queue: List[Process],
                       current_time: int, config: SchedulerConfig) -> bool:
        """실행 중인 프로세스를 이번 틱 실행 전에 내보내야 하는지 여부"""
        raise NotImplementedError("Subclasses must implement should_preempt()")

    def on_tick(self, process: Process, config: SchedulerConfig):
        """한 시간 단위 실행 후 호출"""
        pass

    def on_context_switch(self, new_process: Process, config: SchedulerConfig):
        """새 프로세스가 CPU에 올라갈 때 호출"""
        pass

    def reset(self):
        """내부 상태 초기화"""
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}(key={self.key!r})"


def get_available_processes(ready_queue: List[Process], current_time: int) -> List[Process]:
    """도착 시간이 지난 (선택 가능한) 프로세스만 Ready 큐 순서대로 반환"""
    return [p for p in ready_queue if p.arrival_time <= current_time]
