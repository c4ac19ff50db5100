"""
알고리즘 비교 실행
같은 작업 부하를 복제해서 여러 스케줄러에 독립적으로 실행
"""

from typing import Dict, List, Optional, Tuple

from .config import MAX_SIMULATION_TIME, SchedulerConfig
from .process import Process
from .scheduler import Scheduler, SchedulerStatus

COMPARED_METRICS = [
    'avg_waiting_time',
    'avg_turnaround_time',
    'avg_response_time',
    'cpu_utilization',
    'throughput',
    'context_switches'
]


def run_simulation(processes: List[Process], algorithm: str,
                   config: Optional[SchedulerConfig] = None,
                   max_time: int = MAX_SIMULATION_TIME) -> Dict:
    """
    단일 알고리즘 실행 (원본 프로세스는 변경하지 않음)

    Returns:
        Scheduler.get_results() 결과
    """
    scheduler = Scheduler([p.clone() for p in processes], algorithm=algorithm, config=config)
    return scheduler.run(max_time=max_time)


def compare_algorithms(processes: List[Process], algorithms: List[str],
                       config: Optional[SchedulerConfig] = None) -> List[Dict]:
    """여러 알고리즘을 같은 작업 부하로 실행"""
    return [run_simulation(processes, algorithm, config) for algorithm in algorithms]


class ComparisonRun:
    """
    두 스케줄러를 같은 틱 순서로 나란히 실행 (비교 모드)
    첫 번째 스케줄러는 전달된 프로세스를, 두 번째는 복제본을 소유한다.
    """

    def __init__(self, processes: List[Process], algorithm_a: str = 'fcfs',
                 algorithm_b: str = 'rr', config: Optional[SchedulerConfig] = None):
        self.primary = Scheduler(list(processes), algorithm=algorithm_a, config=config)
        self.secondary = Scheduler([p.clone() for p in processes], algorithm=algorithm_b,
                                   config=config)

    @property
    def schedulers(self) -> Tuple[Scheduler, Scheduler]:
        return self.primary, self.secondary

    def select_algorithms(self, algorithm_a: Optional[str] = None,
                          algorithm_b: Optional[str] = None):
        if algorithm_a is not None:
            self.primary.select_algorithm(algorithm_a)
        if algorithm_b is not None:
            self.secondary.select_algorithm(algorithm_b)

    def set_config(self, quantum: Optional[int] = None,
                   high_priority_first: Optional[bool] = None):
        # 첫 번째에서 검증에 실패하면 두 번째는 건드리지 않음
        self.primary.set_config(quantum=quantum, high_priority_first=high_priority_first)
        self.secondary.set_config(quantum=quantum, high_priority_first=high_priority_first)

    def start(self):
        for scheduler in self.schedulers:
            scheduler.start()

    def pause(self):
        for scheduler in self.schedulers:
            scheduler.pause()

    def resume(self):
        for scheduler in self.schedulers:
            scheduler.resume()

    def reset(self):
        for scheduler in self.schedulers:
            scheduler.reset()

    def add_process(self, process: Process):
        self.primary.add_process(process)
        self.secondary.add_process(process.clone())

    def remove_process(self, pid: int) -> bool:
        removed = [scheduler.remove_process(pid) for scheduler in self.schedulers]
        return any(removed)

    def tick(self) -> bool:
        """두 스케줄러를 한 틱씩 진행, 둘 다 끝났으면 True"""
        completed = [scheduler.tick() for scheduler in self.schedulers]
        return all(completed)

    def advance(self) -> bool:
        advanced = [scheduler.advance() for scheduler in self.schedulers]
        return any(advanced)

    def is_complete(self) -> bool:
        return all(s.status == SchedulerStatus.COMPLETED for s in self.schedulers)

    def run(self, max_time: int = MAX_SIMULATION_TIME) -> Tuple[Dict, Dict]:
        self.start()
        while not self.is_complete() and self.advance():
            if max(s.current_time for s in self.schedulers) > max_time:
                self.pause()
                break
        return self.primary.get_results(), self.secondary.get_results()

    def compare_metrics(self) -> Dict[str, Tuple[float, float]]:
        """지표별 (첫 번째, 두 번째) 값"""
        metrics_a = self.primary.get_metrics()
        metrics_b = self.secondary.get_metrics()
        return {key: (metrics_a[key], metrics_b[key]) for key in COMPARED_METRICS}
