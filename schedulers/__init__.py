"""
CPU Scheduling Algorithms
"""

from core.algorithm import Algorithm

from .basic_schedulers import FCFSAlgorithm, SJFAlgorithm, SJFPreemptiveAlgorithm, RoundRobinAlgorithm
from .advanced_schedulers import PriorityAlgorithm


# 사용 가능한 알고리즘 정의 (드라이버가 선택하는 고정 키)
ALGORITHMS = {
    'fcfs': {
        'name': 'FCFS (First-Come, First-Served)',
        'class': FCFSAlgorithm,
        'preemptive': False
    },
    'sjf': {
        'name': 'SJF (Shortest Job First)',
        'class': SJFAlgorithm,
        'preemptive': False
    },
    'sjf-preemptive': {
        'name': 'SJF (Preemptive/SRTF)',
        'class': SJFPreemptiveAlgorithm,
        'preemptive': True
    },
    'priority': {
        'name': 'Priority Scheduling',
        'class': PriorityAlgorithm,
        'preemptive': True
    },
    'rr': {
        'name': 'Round Robin',
        'class': RoundRobinAlgorithm,
        'preemptive': True
    }
}


def create_algorithm(key: str) -> Algorithm:
    """
    알고리즘 인스턴스 생성 (스케줄러마다 새 인스턴스)

    Raises:
        KeyError: 알 수 없는 키
    """
    return ALGORITHMS[key]['class']()


__all__ = [
    'ALGORITHMS',
    'create_algorithm',
    'FCFSAlgorithm',
    'SJFAlgorithm',
    'SJFPreemptiveAlgorithm',
    'PriorityAlgorithm',
    'RoundRobinAlgorithm'
]
