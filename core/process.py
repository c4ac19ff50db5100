"""
프로세스 및 PCB (Process Control Block) 관리 모듈
"""

from enum import Enum
from typing import Optional


# 프로세스 식별 색상 (pid % 8로 선택)
PROCESS_COLORS = [
    '#00f0ff',  # cyan
    '#a855f7',  # purple
    '#22c55e',  # green
    '#f97316',  # orange
    '#ec4899',  # pink
    '#3b82f6',  # blue
    '#eab308',  # yellow
    '#ef4444',  # red
]


class ProcessState(Enum):
    """프로세스 상태"""
    WAITING = "waiting"  # 도착 전
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"


class ProcessIdGenerator:
    """
    프로세스 ID 발급기
    프로세스 묶음을 만드는 쪽이 직접 소유한다 (전역 카운터 없음)
    """

    def __init__(self, start: int = 0):
        self.start = start
        self._next_id = start

    def next_id(self) -> int:
        pid = self._next_id
        self._next_id += 1
        return pid

    def reset(self):
        self._next_id = self.start


class Process:
    """
    프로세스 제어 블록 (PCB)
    정적 파라미터(도착/버스트/우선순위)와 실행 상태를 함께 관리
    """

    def __init__(self, pid: int, arrival_time: int, burst_time: int, priority: int = 5,
                 name: Optional[str] = None, color: Optional[str] = None):
        """
        프로세스 초기화

        Args:
            pid: 프로세스 ID
            arrival_time: 도착 시간
            burst_time: 총 CPU 버스트 시간
            priority: 우선순위 (방향은 스케줄러 설정에 따름)
            name: 표시 이름 (기본값 P{pid})
            color: 식별 색상 (기본값은 팔레트에서 선택)
        """
        self.pid = pid
        self.name = name if name is not None else f"P{pid}"
        self.arrival_time = arrival_time
        self.burst_time = burst_time
        self.priority = priority
        self.color = color if color is not None else PROCESS_COLORS[pid % len(PROCESS_COLORS)]

        # 실행 상태 추적
        self.state = ProcessState.WAITING
        self.remaining_time = burst_time

        # 통계 정보
        self.start_time: Optional[int] = None  # 첫 실행 시간
        self.completion_time: Optional[int] = None  # 완료 시간
        self.response_time: Optional[int] = None  # 응답 시간

    def execute(self, time_units: int = 1) -> bool:
        """
        프로세스 실행 (남은 시간 감소)

        Args:
            time_units: 실행할 시간 단위

        Returns:
            실행이 끝났는지 여부
        """
        if self.remaining_time <= 0:
            raise ValueError(f"P{self.pid}: 남은 실행 시간이 없습니다.")

        self.remaining_time = max(0, self.remaining_time - time_units)
        return self.remaining_time == 0

    def is_completed(self) -> bool:
        return self.state == ProcessState.COMPLETED

    def get_turnaround_time(self) -> Optional[int]:
        """반환 시간 = 완료 시간 - 도착 시간 (완료 전에는 None)"""
        if self.completion_time is None:
            return None
        return self.completion_time - self.arrival_time

    def get_waiting_time(self) -> Optional[int]:
        """대기 시간 = 반환 시간 - 버스트 시간"""
        turnaround = self.get_turnaround_time()
        if turnaround is None:
            return None
        return turnaround - self.burst_time

    def get_response_time(self) -> Optional[int]:
        return self.response_time

    def reset(self):
        """실행 상태를 초기값으로 복원 (ID와 정적 파라미터는 유지)"""
        self.state = ProcessState.WAITING
        self.remaining_time = self.burst_time
        self.start_time = None
        self.completion_time = None
        self.response_time = None

    def clone(self) -> 'Process':
        """
        정적 파라미터만 공유하는 독립 복사본 생성
        같은 작업 부하를 두 스케줄러에서 동시에 돌릴 때 사용
        """
        return Process(self.pid, self.arrival_time, self.burst_time, self.priority,
                       name=self.name, color=self.color)

    def __repr__(self):
        return f"P{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.pid}: State={self.state.value}, Priority={self.priority}, " \
               f"Remaining={self.remaining_time}"
