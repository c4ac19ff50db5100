"""
스케줄러 엔진: 틱 단위 실행 루프, Gantt 기록, 통계 관리
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Callable, Dict, List, Optional

from .algorithm import Algorithm
from .config import (DEFAULT_ALGORITHM, MAX_SIMULATION_TIME, InvalidConfiguration,
                     SchedulerConfig, build_config, validate_process, validate_processes)
from .process import Process, ProcessState

logger = logging.getLogger(__name__)


class SchedulerStatus(Enum):
    """스케줄러 실행 상태"""
    IDLE = "idle"  # 시작 전 또는 리셋 직후
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass
class GanttEntry:
    """Gantt Chart 엔트리 (한 프로세스가 연속으로 CPU를 점유한 구간)"""
    process_id: int
    start_time: int
    end_time: int
    preempted: bool = False
    context_switch: bool = False
    process_name: str = ""
    color: str = ""

    def duration(self) -> int:
        return self.end_time - self.start_time

    def to_dict(self) -> Dict:
        return asdict(self)


class SchedulerStats:
    """스케줄링 통계"""

    def __init__(self):
        self.context_switches = 0
        self.cpu_busy_time = 0

    def calculate_averages(self, completed: List[Process], total_count: int,
                           elapsed_time: int) -> Dict:
        """
        완료된 프로세스와 경과 시간으로 평균 계산
        0으로 나누는 경우는 모두 0으로 처리
        """
        waiting_times = [p.get_waiting_time() for p in completed if p.get_waiting_time() is not None]
        turnaround_times = [p.get_turnaround_time() for p in completed
                            if p.get_turnaround_time() is not None]
        response_times = [p.get_response_time() for p in completed
                          if p.get_response_time() is not None]

        return {
            'avg_waiting_time': _mean(waiting_times),
            'avg_turnaround_time': _mean(turnaround_times),
            'avg_response_time': _mean(response_times),
            'cpu_utilization': (self.cpu_busy_time / elapsed_time * 100)
                               if elapsed_time > 0 else 0.0,
            'throughput': len(completed) / elapsed_time if elapsed_time > 0 else 0.0,
            'context_switches': self.context_switches,
            'completed_count': len(completed),
            'total_count': total_count
        }


def _mean(values: List[int]) -> float:
    return sum(values) / len(values) if values else 0.0


class Scheduler:
    """
    CPU 스케줄러 엔진

    작업 부하(프로세스 집합), Ready 큐, 실행 중인 프로세스, 완료 목록,
    Gantt 기록을 소유하고, 선택된 알고리즘에게 결정을 위임하며 한 틱씩 진행한다.
    실시간 속도 조절은 외부 드라이버의 몫이고 엔진은 tick()만 제공한다.
    """

    def __init__(self, processes: Optional[List[Process]] = None,
                 algorithm: str = DEFAULT_ALGORITHM,
                 config: Optional[SchedulerConfig] = None):
        self.processes: List[Process] = []
        self.ready_queue: List[Process] = []
        self.current_process: Optional[Process] = None
        self.completed_processes: List[Process] = []
        self.current_time = 0
        self.status = SchedulerStatus.IDLE
        self.config = config if config is not None else SchedulerConfig()

        # Gantt Chart 데이터 (실행 기록)
        self.gantt_chart: List[GanttEntry] = []

        # 통계
        self.stats = SchedulerStats()

        # 이벤트 로그
        self.event_log: List[str] = []

        # 이벤트 콜백
        self.on_tick: Optional[Callable[[int, Optional[Process]], None]] = None
        self.on_context_switch: Optional[Callable[[Process, int], None]] = None
        self.on_process_complete: Optional[Callable[[Process], None]] = None
        self.on_gantt_update: Optional[Callable[[List[GanttEntry]], None]] = None
        self.on_metrics_update: Optional[Callable[[Dict], None]] = None

        self.algorithm_key: Optional[str] = None
        self.algorithm: Optional[Algorithm] = None
        if not self.select_algorithm(algorithm):
            raise InvalidConfiguration(f"Unknown algorithm: {algorithm}")

        self.metrics = self.get_metrics()

        if processes:
            self.configure(processes)

    @property
    def name(self) -> str:
        from schedulers import ALGORITHMS
        return ALGORITHMS[self.algorithm_key]['name']

    # ------------------------------------------------------------------
    # 명령
    # ------------------------------------------------------------------

    def configure(self, processes: List[Process]):
        """작업 부하 설정 (검증 후 전체 리셋)"""
        processes = list(processes)
        validate_processes(processes)
        self.processes = processes
        self.reset()

    def select_algorithm(self, key: str) -> bool:
        """
        알고리즘 선택
        알 수 없는 키는 무시하고 기존 알고리즘을 유지한다.

        Returns:
            변경 여부
        """
        from schedulers import ALGORITHMS, create_algorithm

        if key not in ALGORITHMS:
            logger.warning("Unknown algorithm key ignored: %r", key)
            self.log_event(f"Unknown algorithm '{key}' ignored")
            return False

        self.algorithm = create_algorithm(key)
        self.algorithm_key = key
        self.log_event(f"Algorithm → {self.algorithm.name}")
        return True

    def set_config(self, quantum: Optional[int] = None,
                   high_priority_first: Optional[bool] = None) -> SchedulerConfig:
        """설정 변경 (잘못된 값이면 InvalidConfiguration, 기존 설정 유지)"""
        values = self.config.model_dump()
        if quantum is not None:
            values['quantum'] = quantum
        if high_priority_first is not None:
            values['high_priority_first'] = high_priority_first

        self.config = build_config(**values)
        return self.config

    def start(self):
        """시뮬레이션 시작 (이미 실행 중이면 무시)"""
        if self.status == SchedulerStatus.RUNNING:
            return
        if self.status == SchedulerStatus.PAUSED:
            self.resume()
            return
        if self.status == SchedulerStatus.COMPLETED and self.is_simulation_complete():
            # 끝난 실행을 다시 시작하면 처음부터
            self.reset()

        self.status = SchedulerStatus.RUNNING
        self.log_event(f"===== {self.name} Scheduling Started =====")

    def pause(self):
        if self.status == SchedulerStatus.RUNNING:
            self.status = SchedulerStatus.PAUSED
            self.log_event("Paused")

    def resume(self):
        if self.status == SchedulerStatus.PAUSED:
            self.status = SchedulerStatus.RUNNING
            self.log_event("Resumed")

    def stop(self):
        """실행 중단 (상태는 조회용으로 유지)"""
        if self.status in (SchedulerStatus.RUNNING, SchedulerStatus.PAUSED):
            self.status = SchedulerStatus.IDLE
            self.log_event("Stopped")

    def reset(self):
        """모든 실행 상태 초기화"""
        self.ready_queue = []
        self.completed_processes = []
        self.current_process = None
        self.current_time = 0
        self.gantt_chart = []
        self.stats = SchedulerStats()
        self.event_log = []
        self.status = SchedulerStatus.IDLE

        for process in self.processes:
            process.reset()

        if self.algorithm is not None:
            self.algorithm.reset()

        self.metrics = self.get_metrics()
        self._emit(self.on_metrics_update, self.metrics)

    def add_process(self, process: Process):
        """실행 중에 프로세스 추가"""
        validate_process(process)
        if self.find_process(process.pid) is not None:
            raise InvalidConfiguration(f"중복된 PID: {process.pid}")

        # 이전 실행에서 쓰던 프로세스도 도착 전 상태로 받음
        process.reset()
        self.processes.append(process)
        self.log_event(f"P{process.pid} added (arrival={process.arrival_time}, "
                       f"burst={process.burst_time})")

        # 이미 도착 시간이 지났으면 바로 Ready 큐로
        if process.arrival_time <= self.current_time and process.state == ProcessState.WAITING:
            process.state = ProcessState.READY
            self.ready_queue.append(process)
            self.sort_ready_queue()

        if self.status == SchedulerStatus.COMPLETED:
            self.status = SchedulerStatus.PAUSED

    def remove_process(self, pid: int) -> bool:
        """
        프로세스 제거 (모든 큐와 CPU에서 제외, 선점 기록 없음)

        Returns:
            제거 여부 (없는 PID면 False)
        """
        if self.find_process(pid) is None:
            return False

        self.processes = [p for p in self.processes if p.pid != pid]
        self.ready_queue = [p for p in self.ready_queue if p.pid != pid]
        self.completed_processes = [p for p in self.completed_processes if p.pid != pid]
        if self.current_process is not None and self.current_process.pid == pid:
            self.current_process = None

        self.log_event(f"P{pid} removed")

        if self.status == SchedulerStatus.RUNNING and self.is_simulation_complete():
            self._finish()
        return True

    def find_process(self, pid: int) -> Optional[Process]:
        for process in self.processes:
            if process.pid == pid:
                return process
        return None

    # ------------------------------------------------------------------
    # 틱 실행
    # ------------------------------------------------------------------

    def advance(self) -> bool:
        """
        드라이버 루프용: 실행 중일 때만 한 틱 진행

        Returns:
            틱이 실행되었는지 여부
        """
        if self.status != SchedulerStatus.RUNNING:
            return False
        self.tick()
        return True

    def tick(self) -> bool:
        """
        한 시간 단위 실행 (원자적)

        Returns:
            시뮬레이션 완료 여부
        """
        if self.status == SchedulerStatus.COMPLETED:
            return True

        tick_time = self.current_time

        # 1. 프로세스 도착 처리
        self.handle_process_arrival()

        # 2. Ready 큐 정렬 (도착 시간 기준)
        self.sort_ready_queue()

        # 3. 선점 검사
        if self.current_process is not None and self.algorithm.should_preempt(
                self.current_process, self.ready_queue, self.current_time, self.config):
            self.preempt_current_process()

        # 4. 프로세스 선택 또는 Gantt 구간 연장
        if self.current_process is None:
            selected = self.algorithm.select_next(self.ready_queue, self.current_time, self.config)
            if selected is not None:
                self.dispatch(selected)
        else:
            self.extend_gantt_chart()

        # 5. CPU 실행
        if self.current_process is not None:
            self.execute_current_process()

        # 6. 통계 갱신 및 이벤트 발생 (시간 증가 전 기준)
        self.metrics = self.get_metrics()
        self._emit(self.on_tick, tick_time, self.current_process)
        self._emit(self.on_gantt_update, self.gantt_chart)
        self._emit(self.on_metrics_update, self.metrics)

        # 7. 시간 증가
        self.current_time += 1

        # 8. 완료 검사
        if self.is_simulation_complete():
            self._finish()
        return self.is_simulation_complete()

    def handle_process_arrival(self):
        """프로세스 도착 처리"""
        for process in self.processes:
            if process.arrival_time == self.current_time and process.state == ProcessState.WAITING:
                process.state = ProcessState.READY
                self.ready_queue.append(process)
                self.log_event(f"P{process.pid} arrived → Ready Queue")

    def sort_ready_queue(self):
        # 안정 정렬: 같은 도착 시간이면 기존 순서 유지
        self.ready_queue.sort(key=lambda p: p.arrival_time)

    def preempt_current_process(self):
        """실행 중인 프로세스를 Ready 큐로 복귀"""
        process = self.current_process
        process.state = ProcessState.READY
        self.ready_queue.append(process)

        if self.gantt_chart:
            self.gantt_chart[-1].preempted = True

        self.current_process = None
        self.log_event(f"P{process.pid} preempted → Ready Queue")

    def dispatch(self, process: Process):
        """선택된 프로세스를 CPU에 올림"""
        self.ready_queue = [p for p in self.ready_queue if p.pid != process.pid]

        is_context_switch = len(self.gantt_chart) > 0
        if is_context_switch:
            self.stats.context_switches += 1

        process.state = ProcessState.RUNNING
        if process.response_time is None:
            process.start_time = self.current_time
            process.response_time = self.current_time - process.arrival_time

        self.current_process = process
        self.algorithm.on_context_switch(process, self.config)
        self._emit(self.on_context_switch, process, self.current_time)

        self.gantt_chart.append(GanttEntry(process.pid, self.current_time, self.current_time + 1,
                                           preempted=False, context_switch=is_context_switch,
                                           process_name=process.name, color=process.color))
        self.log_event(f"P{process.pid} → Running")

    def extend_gantt_chart(self):
        """같은 프로세스가 계속 실행되면 마지막 구간 연장"""
        process = self.current_process
        if self.gantt_chart and self.gantt_chart[-1].process_id == process.pid:
            self.gantt_chart[-1].end_time = self.current_time + 1
            return

        is_context_switch = len(self.gantt_chart) > 0
        if is_context_switch:
            self.stats.context_switches += 1
        self.gantt_chart.append(GanttEntry(process.pid, self.current_time, self.current_time + 1,
                                           preempted=False, context_switch=is_context_switch,
                                           process_name=process.name, color=process.color))

    def execute_current_process(self):
        process = self.current_process
        finished = process.execute(1)
        self.stats.cpu_busy_time += 1
        self.algorithm.on_tick(process, self.config)

        if finished:
            self.terminate_process(process)

    def terminate_process(self, process: Process):
        """프로세스 종료 처리"""
        process.state = ProcessState.COMPLETED
        process.completion_time = self.current_time + 1
        self.completed_processes.append(process)
        self.current_process = None

        self.log_event(f"P{process.pid} → Completed (WT={process.get_waiting_time()}, "
                       f"TT={process.get_turnaround_time()})")
        self._emit(self.on_process_complete, process)

    def _finish(self):
        self.status = SchedulerStatus.COMPLETED
        self.log_event(f"===== {self.name} Scheduling Completed =====")

    def is_simulation_complete(self) -> bool:
        """시뮬레이션 완료 여부 확인"""
        return len(self.completed_processes) == len(self.processes)

    # ------------------------------------------------------------------
    # 관측
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict:
        return self.stats.calculate_averages(self.completed_processes, len(self.processes),
                                             self.current_time)

    def log_event(self, message: str):
        """이벤트 로그 기록"""
        log_entry = f"[T={self.current_time:3d}] {message}"
        self.event_log.append(log_entry)
        logger.debug(log_entry)

    def get_current_snapshot(self) -> Dict:
        """
        현재 시뮬레이션 상태 스냅샷 반환 (드라이버용)

        Returns:
            현재 상태 딕셔너리
        """
        return {
            'time': self.current_time,
            'status': self.status.value,
            'algorithm': self.algorithm_key,
            'running': self.current_process,
            'ready_queue': list(self.ready_queue),
            'completed': list(self.completed_processes),
            'context_switches': self.stats.context_switches,
            'cpu_busy_time': self.stats.cpu_busy_time,
            'latest_gantt_entry': self.gantt_chart[-1] if self.gantt_chart else None,
            'latest_log': self.event_log[-1] if self.event_log else "",
            'metrics': dict(self.metrics)
        }

    def run(self, max_time: int = MAX_SIMULATION_TIME, verbose: bool = False) -> Dict:
        """
        완료될 때까지 틱 반복 실행

        Args:
            max_time: 최대 시뮬레이션 시간 (무한 루프 방지)
            verbose: 상세 로그 출력 여부

        Returns:
            시뮬레이션 결과 딕셔너리
        """
        self.start()

        while self.status == SchedulerStatus.RUNNING:
            self.tick()

            if self.current_time > max_time and self.status == SchedulerStatus.RUNNING:
                logger.warning("Simulation timeout at T=%d (%s)", self.current_time, self.name)
                self.log_event("WARNING: Simulation timeout")
                self.pause()

        if verbose:
            for log in self.event_log:
                print(log)

        return self.get_results()

    def get_results(self) -> Dict:
        """
        시뮬레이션 결과 반환

        Returns:
            결과 딕셔너리 (통계, Gantt Chart, 로그 등)
        """
        return {
            'algorithm': self.name,
            'algorithm_key': self.algorithm_key,
            'statistics': self.get_metrics(),
            'gantt_chart': list(self.gantt_chart),
            'event_log': list(self.event_log),
            'processes': list(self.completed_processes)
        }

    @staticmethod
    def _emit(callback: Optional[Callable], *args):
        if callback is not None:
            callback(*args)
