"""스케줄러 엔진: 참조 시나리오, 불변 조건, 명령"""

import pytest

from core.config import InvalidConfiguration, SchedulerConfig
from core.process import Process, ProcessState
from core.scheduler import Scheduler, SchedulerStatus
from schedulers import ALGORITHMS
from utils.input_parser import InputParser


def run_to_end(scheduler, limit=1000):
    scheduler.start()
    for _ in range(limit):
        if scheduler.tick():
            break
    return scheduler


class TestReferenceScenarios:

    def test_fcfs(self, make_processes, segments):
        scheduler = run_to_end(Scheduler(make_processes((0, 3), (1, 2)), algorithm='fcfs'))

        assert segments(scheduler) == [(0, 0, 3), (1, 3, 5)]
        assert scheduler.gantt_chart[1].context_switch is True
        assert scheduler.gantt_chart[0].context_switch is False
        assert scheduler.current_time == 5
        metrics = scheduler.get_metrics()
        assert metrics['avg_waiting_time'] == pytest.approx(1.0)
        assert metrics['context_switches'] == 1
        assert metrics['cpu_utilization'] == pytest.approx(100.0)
        assert metrics['throughput'] == pytest.approx(0.4)

    def test_sjf_non_preemptive(self, make_processes, segments):
        scheduler = run_to_end(Scheduler(make_processes((0, 8), (1, 4), (2, 1)), algorithm='sjf'))
        assert segments(scheduler) == [(0, 0, 8), (2, 8, 9), (1, 9, 13)]

    def test_sjf_preemptive(self, make_processes, segments):
        processes = make_processes((0, 8), (1, 4))
        scheduler = run_to_end(Scheduler(processes, algorithm='sjf-preemptive'))

        assert segments(scheduler) == [(0, 0, 1), (1, 1, 5), (0, 5, 12)]
        assert scheduler.gantt_chart[0].preempted is True
        assert processes[1].completion_time == 5
        assert processes[0].completion_time == 12
        metrics = scheduler.get_metrics()
        assert metrics['avg_waiting_time'] == pytest.approx(2.0)
        assert metrics['context_switches'] == 2

    def test_round_robin(self, make_processes, segments):
        processes = make_processes((0, 5), (0, 5), (0, 5))
        scheduler = run_to_end(Scheduler(processes, algorithm='rr',
                                         config=SchedulerConfig(quantum=2)))

        assert segments(scheduler) == [
            (0, 0, 2), (1, 2, 4), (2, 4, 6),
            (0, 6, 8), (1, 8, 10), (2, 10, 12),
            (0, 12, 13), (1, 13, 14), (2, 14, 15),
        ]
        assert [e.preempted for e in scheduler.gantt_chart] == [True] * 6 + [False] * 3
        assert [p.completion_time for p in processes] == [13, 14, 15]
        assert scheduler.stats.context_switches == 8

    def test_round_robin_staggered_arrivals(self, make_processes, segments):
        processes = make_processes((0, 5), (1, 3), (3, 2))
        scheduler = run_to_end(Scheduler(processes, algorithm='rr',
                                         config=SchedulerConfig(quantum=2)))

        assert segments(scheduler) == [
            (0, 0, 2), (1, 2, 4), (2, 4, 6), (0, 6, 8), (1, 8, 9), (0, 9, 10),
        ]
        assert [e.preempted for e in scheduler.gantt_chart] == [True, True, False, True, False, False]
        assert [p.completion_time for p in processes] == [10, 9, 6]
        assert scheduler.stats.context_switches == 5

    def test_priority_high_first(self, make_processes, segments):
        scheduler = run_to_end(Scheduler(make_processes((0, 4, 1), (1, 2, 5)),
                                         algorithm='priority'))
        assert segments(scheduler) == [(0, 0, 1), (1, 1, 3), (0, 3, 6)]

    def test_priority_low_first(self, make_processes, segments):
        scheduler = run_to_end(Scheduler(make_processes((0, 4, 1), (1, 2, 5)),
                                         algorithm='priority',
                                         config=SchedulerConfig(high_priority_first=False)))
        assert segments(scheduler) == [(0, 0, 4), (1, 4, 6)]

    def test_idle_gap_before_first_arrival(self, make_processes, segments):
        processes = make_processes((2, 1))
        scheduler = run_to_end(Scheduler(processes))

        assert segments(scheduler) == [(0, 2, 3)]
        assert processes[0].get_response_time() == 0
        assert scheduler.get_metrics()['cpu_utilization'] == pytest.approx(100 / 3)


@pytest.mark.parametrize('algorithm', list(ALGORITHMS))
@pytest.mark.parametrize('seed', [1, 7, 42])
class TestInvariants:

    def _run(self, algorithm, seed):
        processes = InputParser.create_sample_processes(6, seed=seed)
        scheduler = Scheduler(processes, algorithm=algorithm, config=SchedulerConfig(quantum=2))
        run_to_end(scheduler)
        return scheduler, processes

    def test_all_processes_complete(self, algorithm, seed):
        scheduler, processes = self._run(algorithm, seed)
        assert scheduler.status == SchedulerStatus.COMPLETED
        assert all(p.state == ProcessState.COMPLETED for p in processes)
        assert all(p.remaining_time == 0 for p in processes)

    def test_cpu_time_conservation(self, algorithm, seed):
        scheduler, processes = self._run(algorithm, seed)
        assert sum(e.duration() for e in scheduler.gantt_chart) == sum(p.burst_time for p in processes)
        assert scheduler.stats.cpu_busy_time == sum(p.burst_time for p in processes)
        for p in processes:
            owned = sum(e.duration() for e in scheduler.gantt_chart if e.process_id == p.pid)
            assert owned == p.burst_time

    def test_gantt_is_ordered_and_disjoint(self, algorithm, seed):
        scheduler, _ = self._run(algorithm, seed)
        for previous, entry in zip(scheduler.gantt_chart, scheduler.gantt_chart[1:]):
            assert entry.start_time >= previous.end_time
            assert entry.duration() > 0

    def test_derived_times_consistent(self, algorithm, seed):
        _, processes = self._run(algorithm, seed)
        for p in processes:
            assert p.start_time >= p.arrival_time
            assert p.response_time == p.start_time - p.arrival_time
            assert p.get_turnaround_time() == p.get_waiting_time() + p.burst_time
            assert p.get_waiting_time() >= 0

    def test_no_idle_tick_while_work_is_ready(self, algorithm, seed):
        scheduler, processes = self._run(algorithm, seed)
        busy = {t for e in scheduler.gantt_chart for t in range(e.start_time, e.end_time)}
        for t in range(scheduler.current_time):
            arrived = [p for p in processes if p.arrival_time <= t < p.completion_time]
            if arrived:
                assert t in busy

    def test_each_process_in_exactly_one_place(self, algorithm, seed):
        processes = InputParser.create_sample_processes(6, seed=seed)
        scheduler = Scheduler(processes, algorithm=algorithm, config=SchedulerConfig(quantum=2))
        remaining = {p.pid: p.burst_time for p in processes}
        times = []

        def check(time, running):
            times.append(time)
            waiting = [p.pid for p in processes if p.state == ProcessState.WAITING]
            ready = [p.pid for p in scheduler.ready_queue]
            cpu = [running.pid] if running is not None else []
            done = [p.pid for p in scheduler.completed_processes]
            placed = waiting + ready + cpu + done
            assert sorted(placed) == sorted(p.pid for p in processes)
            for p in processes:
                assert p.remaining_time <= remaining[p.pid]
                remaining[p.pid] = p.remaining_time

        scheduler.on_tick = check
        run_to_end(scheduler)
        assert times == list(range(scheduler.current_time))

    def test_deterministic(self, algorithm, seed):
        first, _ = self._run(algorithm, seed)
        second, _ = self._run(algorithm, seed)
        assert first.gantt_chart == second.gantt_chart
        assert first.get_metrics() == second.get_metrics()


class TestRunControl:

    def test_initial_state(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        assert scheduler.status == SchedulerStatus.IDLE
        assert scheduler.current_time == 0
        assert scheduler.metrics['total_count'] == 1

    def test_advance_only_while_running(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        assert scheduler.advance() is False
        assert scheduler.current_time == 0

        scheduler.start()
        assert scheduler.advance() is True
        assert scheduler.current_time == 1

        scheduler.pause()
        assert scheduler.advance() is False
        assert scheduler.current_time == 1

    def test_tick_works_while_paused(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        scheduler.start()
        scheduler.pause()
        scheduler.tick()
        assert scheduler.current_time == 1
        assert scheduler.status == SchedulerStatus.PAUSED

    def test_pause_resume_idempotent(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        scheduler.start()
        scheduler.start()
        assert scheduler.status == SchedulerStatus.RUNNING
        scheduler.pause()
        scheduler.pause()
        assert scheduler.status == SchedulerStatus.PAUSED
        scheduler.resume()
        scheduler.resume()
        assert scheduler.status == SchedulerStatus.RUNNING

    def test_start_on_paused_resumes(self, make_processes):
        scheduler = Scheduler(make_processes((0, 3)))
        scheduler.start()
        scheduler.tick()
        scheduler.pause()
        scheduler.start()
        assert scheduler.status == SchedulerStatus.RUNNING
        assert scheduler.current_time == 1

    def test_stop_keeps_state(self, make_processes):
        scheduler = Scheduler(make_processes((0, 3)))
        scheduler.start()
        scheduler.tick()
        scheduler.stop()
        assert scheduler.status == SchedulerStatus.IDLE
        assert scheduler.current_time == 1
        assert scheduler.advance() is False

    def test_start_after_completion_restarts(self, make_processes, segments):
        scheduler = run_to_end(Scheduler(make_processes((0, 2))))
        assert scheduler.status == SchedulerStatus.COMPLETED

        scheduler.start()
        assert scheduler.status == SchedulerStatus.RUNNING
        assert scheduler.current_time == 0
        assert scheduler.gantt_chart == []

    def test_tick_after_completion_is_noop(self, make_processes):
        scheduler = run_to_end(Scheduler(make_processes((0, 2))))
        time = scheduler.current_time
        assert scheduler.tick() is True
        assert scheduler.current_time == time

    def test_reset_restores_initial_state(self, make_processes):
        processes = make_processes((0, 3), (1, 2))
        scheduler = run_to_end(Scheduler(processes, algorithm='rr'))
        scheduler.reset()
        first = (scheduler.current_time, scheduler.status, list(scheduler.gantt_chart),
                 scheduler.get_metrics())
        scheduler.reset()
        second = (scheduler.current_time, scheduler.status, list(scheduler.gantt_chart),
                  scheduler.get_metrics())

        assert first == second
        assert first[0] == 0
        assert first[1] == SchedulerStatus.IDLE
        assert all(p.state == ProcessState.WAITING and p.remaining_time == p.burst_time
                   for p in processes)
        assert scheduler.ready_queue == []
        assert scheduler.completed_processes == []
        assert scheduler.current_process is None

    def test_run_returns_results(self, make_processes):
        result = Scheduler(make_processes((0, 3), (1, 2))).run()
        assert result['algorithm_key'] == 'fcfs'
        assert result['algorithm'] == ALGORITHMS['fcfs']['name']
        assert result['statistics']['completed_count'] == 2
        assert len(result['processes']) == 2
        assert result['event_log']

    def test_run_timeout_pauses(self, make_processes):
        scheduler = Scheduler(make_processes((0, 50)))
        scheduler.run(max_time=10)
        assert scheduler.status == SchedulerStatus.PAUSED
        assert scheduler.current_time == 11
        assert any("Simulation timeout" in log for log in scheduler.event_log)

    def test_empty_workload_completes_on_first_tick(self):
        scheduler = Scheduler()
        scheduler.start()
        assert scheduler.tick() is True
        assert scheduler.status == SchedulerStatus.COMPLETED
        assert scheduler.gantt_chart == []


class TestConfiguration:

    def test_unknown_algorithm_at_construction(self):
        with pytest.raises(InvalidConfiguration):
            Scheduler(algorithm='lottery')

    def test_unknown_algorithm_is_ignored(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)), algorithm='sjf')
        assert scheduler.select_algorithm('lottery') is False
        assert scheduler.algorithm_key == 'sjf'

    def test_select_algorithm_creates_fresh_instance(self):
        scheduler = Scheduler(algorithm='rr')
        before = scheduler.algorithm
        assert scheduler.select_algorithm('rr') is True
        assert scheduler.algorithm is not before

    def test_set_config_partial_update(self):
        scheduler = Scheduler()
        config = scheduler.set_config(quantum=5)
        assert config.quantum == 5
        assert config.high_priority_first is True
        scheduler.set_config(high_priority_first=False)
        assert scheduler.config.quantum == 5
        assert scheduler.config.high_priority_first is False

    @pytest.mark.parametrize('quantum', [0, -1])
    def test_invalid_quantum_rejected(self, quantum):
        scheduler = Scheduler()
        with pytest.raises(InvalidConfiguration):
            scheduler.set_config(quantum=quantum)
        assert scheduler.config.quantum == 3

    def test_quantum_change_mid_run(self, make_processes, segments):
        scheduler = Scheduler(make_processes((0, 4), (0, 4)), algorithm='rr',
                              config=SchedulerConfig(quantum=4))
        scheduler.start()
        scheduler.tick()
        scheduler.set_config(quantum=1)
        run_to_end(scheduler)
        assert segments(scheduler)[:3] == [(0, 0, 1), (1, 1, 2), (0, 2, 3)]

    @pytest.mark.parametrize('times', [(-1, 3), (0, 0), (0, -2)])
    def test_configure_rejects_invalid_process(self, times):
        with pytest.raises(InvalidConfiguration):
            Scheduler([Process(0, *times)])

    def test_configure_rejects_duplicate_pid(self):
        with pytest.raises(InvalidConfiguration):
            Scheduler([Process(1, 0, 2), Process(1, 1, 2)])

    def test_configure_resets(self, make_processes):
        scheduler = run_to_end(Scheduler(make_processes((0, 2))))
        scheduler.configure(make_processes((0, 1), (0, 1)))
        assert scheduler.current_time == 0
        assert scheduler.status == SchedulerStatus.IDLE
        assert scheduler.get_metrics()['total_count'] == 2


class TestWorkloadEdits:

    def test_add_process_already_arrived_goes_to_ready(self, make_processes):
        scheduler = Scheduler(make_processes((0, 5)))
        scheduler.start()
        scheduler.tick()
        scheduler.tick()

        late = Process(7, 1, 2)
        scheduler.add_process(late)
        assert late.state == ProcessState.READY
        assert late in scheduler.ready_queue

    def test_add_future_process_arrives_normally(self, make_processes, segments):
        scheduler = Scheduler(make_processes((0, 2)))
        scheduler.start()
        scheduler.tick()
        scheduler.add_process(Process(5, 4, 1))
        run_to_end(scheduler)
        assert segments(scheduler) == [(0, 0, 2), (5, 4, 5)]

    def test_add_duplicate_pid_rejected(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        with pytest.raises(InvalidConfiguration):
            scheduler.add_process(Process(0, 0, 1))

    def test_add_after_completion_pauses(self, make_processes):
        scheduler = run_to_end(Scheduler(make_processes((0, 1))))
        scheduler.add_process(Process(3, 0, 2))
        assert scheduler.status == SchedulerStatus.PAUSED
        scheduler.resume()
        run_to_end(scheduler)
        assert scheduler.status == SchedulerStatus.COMPLETED
        assert len(scheduler.completed_processes) == 2

    def test_add_process_from_finished_run_is_admitted(self, make_processes):
        finished = run_to_end(Scheduler(make_processes((0, 2)))).processes[0]
        assert finished.state == ProcessState.COMPLETED

        scheduler = Scheduler([Process(5, 0, 1)])
        scheduler.start()
        scheduler.tick()
        scheduler.add_process(finished)
        assert finished.state == ProcessState.READY
        assert finished.remaining_time == 2

        run_to_end(scheduler)
        assert scheduler.status == SchedulerStatus.COMPLETED
        assert finished.completion_time == 3

    def test_remove_running_process(self, make_processes, segments):
        scheduler = Scheduler(make_processes((0, 5), (0, 2)))
        scheduler.start()
        scheduler.tick()

        assert scheduler.remove_process(0) is True
        assert scheduler.current_process is None
        run_to_end(scheduler)
        assert segments(scheduler) == [(0, 0, 1), (1, 1, 3)]
        assert scheduler.gantt_chart[0].preempted is False

    def test_remove_unknown_pid(self, make_processes):
        scheduler = Scheduler(make_processes((0, 2)))
        assert scheduler.remove_process(99) is False

    def test_remove_last_pending_completes_run(self, make_processes):
        scheduler = Scheduler(make_processes((0, 1), (5, 3)))
        scheduler.start()
        scheduler.tick()
        scheduler.remove_process(1)
        assert scheduler.status == SchedulerStatus.COMPLETED

    def test_remove_completed_process(self, make_processes):
        scheduler = run_to_end(Scheduler(make_processes((0, 1), (0, 1))))
        scheduler.remove_process(0)
        assert [p.pid for p in scheduler.completed_processes] == [1]
        assert scheduler.get_metrics()['total_count'] == 1


class TestObservation:

    def test_callbacks(self, make_processes):
        events = []
        scheduler = Scheduler(make_processes((0, 2), (0, 1)))
        scheduler.on_tick = lambda time, running: events.append(('tick', time))
        scheduler.on_context_switch = lambda p, time: events.append(('switch', p.pid, time))
        scheduler.on_process_complete = lambda p: events.append(('complete', p.pid))
        run_to_end(scheduler)

        assert events == [
            ('switch', 0, 0), ('tick', 0),
            ('complete', 0), ('tick', 1),
            ('switch', 1, 2), ('complete', 1), ('tick', 2),
        ]

    def test_metrics_callback_each_tick(self, make_processes):
        seen = []
        scheduler = Scheduler(make_processes((0, 2)))
        scheduler.on_metrics_update = seen.append
        run_to_end(scheduler)
        assert len(seen) == 2
        assert seen[-1]['completed_count'] == 1
        assert seen[-1] is scheduler.metrics

    def test_emitted_metrics_use_clock_before_increment(self, make_processes):
        seen = []
        scheduler = Scheduler(make_processes((0, 3), (1, 2)))
        scheduler.on_metrics_update = lambda metrics: seen.append(metrics['cpu_utilization'])
        scheduler.start()
        for _ in range(3):
            scheduler.tick()

        assert seen == [0.0, pytest.approx(200.0), pytest.approx(150.0)]
        assert scheduler.metrics['cpu_utilization'] == pytest.approx(150.0)
        assert scheduler.get_metrics()['cpu_utilization'] == pytest.approx(100.0)

    def test_gantt_callback_receives_history(self, make_processes):
        seen = []
        scheduler = Scheduler(make_processes((0, 2)))
        scheduler.on_gantt_update = lambda chart: seen.append(len(chart))
        run_to_end(scheduler)
        assert seen == [1, 1]

    def test_event_log_format(self, make_processes):
        scheduler = run_to_end(Scheduler(make_processes((1, 1))))
        assert "[T=  1] P0 arrived → Ready Queue" in scheduler.event_log
        assert scheduler.event_log[-1].endswith("Scheduling Completed =====")

    def test_snapshot(self, make_processes):
        scheduler = Scheduler(make_processes((0, 3), (0, 2)))
        scheduler.start()
        scheduler.tick()
        snapshot = scheduler.get_current_snapshot()

        assert snapshot['time'] == 1
        assert snapshot['status'] == 'running'
        assert snapshot['running'].pid == 0
        assert [p.pid for p in snapshot['ready_queue']] == [1]
        assert snapshot['latest_gantt_entry'].process_id == 0
        assert snapshot['cpu_busy_time'] == 1
