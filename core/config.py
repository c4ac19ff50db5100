"""
스케줄러 설정 및 설정 검증
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .process import Process

DEFAULT_ALGORITHM = 'fcfs'
DEFAULT_QUANTUM = 3

# 무한 루프 방지용 최대 시뮬레이션 시간
MAX_SIMULATION_TIME = 10000


class InvalidConfiguration(ValueError):
    """실행 전에 거부되어야 하는 잘못된 설정"""


class SchedulerConfig(BaseModel):
    """알고리즘이 참조하는 설정 값"""
    model_config = ConfigDict(frozen=True)

    quantum: int = Field(DEFAULT_QUANTUM, ge=1)  # Round Robin 타임 슬라이스
    high_priority_first: bool = True  # True면 큰 숫자가 높은 우선순위


def build_config(**values) -> SchedulerConfig:
    """설정 생성 (검증 실패 시 InvalidConfiguration)"""
    try:
        return SchedulerConfig(**values)
    except ValidationError as e:
        raise InvalidConfiguration(f"잘못된 스케줄러 설정: {e}") from e


def validate_process(process: Process):
    """프로세스의 정적 파라미터 검증"""
    if not isinstance(process.arrival_time, int) or isinstance(process.arrival_time, bool):
        raise InvalidConfiguration(f"P{process.pid}: 도착 시간은 정수여야 합니다: {process.arrival_time!r}")
    if not isinstance(process.burst_time, int) or isinstance(process.burst_time, bool):
        raise InvalidConfiguration(f"P{process.pid}: 버스트 시간은 정수여야 합니다: {process.burst_time!r}")
    if process.arrival_time < 0:
        raise InvalidConfiguration(f"P{process.pid}: 도착 시간은 0 이상이어야 합니다: {process.arrival_time}")
    if process.burst_time < 1:
        raise InvalidConfiguration(f"P{process.pid}: 버스트 시간은 1 이상이어야 합니다: {process.burst_time}")


def validate_processes(processes: Iterable[Process]):
    """프로세스 목록 검증 (PID 중복 포함)"""
    seen = set()
    for process in processes:
        validate_process(process)
        if process.pid in seen:
            raise InvalidConfiguration(f"중복된 PID: {process.pid}")
        seen.add(process.pid)
