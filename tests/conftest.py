"""공용 pytest 픽스처"""

import pytest

from core.process import Process


def _make_processes(*params):
    """(도착, 버스트[, 우선순위]) 튜플로 PID 0부터 프로세스 생성"""
    return [Process(pid, values[0], values[1], values[2] if len(values) > 2 else 5)
            for pid, values in enumerate(params)]


def _segments(scheduler):
    """Gantt 기록을 (pid, 시작, 종료) 튜플로"""
    return [(e.process_id, e.start_time, e.end_time) for e in scheduler.gantt_chart]


@pytest.fixture
def make_processes():
    return _make_processes


@pytest.fixture
def segments():
    return _segments
