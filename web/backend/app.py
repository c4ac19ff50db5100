"""
CPU 스케줄러 시뮬레이터 - FastAPI 백엔드
엔진 명령/관측 계약을 HTTP와 WebSocket으로 노출하는 드라이버
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from core.comparison import COMPARED_METRICS, compare_algorithms
from core.config import DEFAULT_QUANTUM, InvalidConfiguration, build_config
from core.process import Process
from core.scheduler import GanttEntry, Scheduler, SchedulerStatus
from schedulers import ALGORITHMS

logger = logging.getLogger(__name__)

app = FastAPI(
    title="CPU Scheduler Simulator",
    description="CPU 스케줄링 알고리즘 시뮬레이터",
    version="1.0.0"
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic 모델
class ProcessInput(BaseModel):
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 5
    name: Optional[str] = None


class SimulationRequest(BaseModel):
    processes: List[ProcessInput]
    algorithms: List[str]
    quantum: int = DEFAULT_QUANTUM
    high_priority_first: bool = True


def create_process_objects(process_inputs: List[ProcessInput]) -> List[Process]:
    """ProcessInput을 Process 객체로 변환"""
    return [
        Process(
            pid=p.pid,
            arrival_time=p.arrival_time,
            burst_time=p.burst_time,
            priority=p.priority,
            name=p.name
        )
        for p in process_inputs
    ]


def serialize_process(process: Process) -> Dict[str, Any]:
    return {
        'pid': process.pid,
        'name': process.name,
        'color': process.color,
        'arrival_time': process.arrival_time,
        'burst_time': process.burst_time,
        'priority': process.priority,
        'remaining_time': process.remaining_time,
        'state': process.state.value,
        'start_time': process.start_time,
        'completion_time': process.completion_time,
        'waiting_time': process.get_waiting_time(),
        'turnaround_time': process.get_turnaround_time(),
        'response_time': process.get_response_time()
    }


def serialize_gantt(entries: List[GanttEntry]) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in entries]


def serialize_result(result: Dict) -> Dict[str, Any]:
    return {
        'algorithm': result['algorithm'],
        'algorithm_key': result['algorithm_key'],
        'gantt_chart': serialize_gantt(result['gantt_chart']),
        'processes': [serialize_process(p) for p in result['processes']],
        'statistics': result['statistics'],
        'event_log': result['event_log']
    }


def check_algorithms(keys: List[str]):
    unknown = [key for key in keys if key not in ALGORITHMS]
    if unknown:
        raise InvalidConfiguration(f"Unknown algorithm: {', '.join(unknown)}")


def run_request(request: SimulationRequest) -> List[Dict]:
    check_algorithms(request.algorithms)
    config = build_config(quantum=request.quantum,
                          high_priority_first=request.high_priority_first)
    processes = create_process_objects(request.processes)
    return compare_algorithms(processes, request.algorithms, config)


@app.get("/")
async def root():
    return {"message": "CPU Scheduler Simulator API", "version": "1.0.0"}


@app.get("/algorithms")
async def get_algorithms():
    """사용 가능한 알고리즘 목록 반환"""
    return {
        "algorithms": [
            {"id": key, "name": info['name'], "preemptive": info['preemptive']}
            for key, info in ALGORITHMS.items()
        ]
    }


@app.post("/simulate")
async def simulate(request: SimulationRequest):
    """스케줄링 시뮬레이션 실행"""
    try:
        results = run_request(request)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "results": [serialize_result(r) for r in results]}


@app.post("/simulate/compare")
async def simulate_compare(request: SimulationRequest):
    """여러 알고리즘 비교 시뮬레이션"""
    try:
        results = run_request(request)
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))

    comparison: Dict[str, list] = {'algorithms': list(request.algorithms)}
    for metric in COMPARED_METRICS:
        comparison[metric] = [r['statistics'][metric] for r in results]

    return {
        "success": True,
        "results": [serialize_result(r) for r in results],
        "comparison": comparison
    }


# WebSocket을 통한 실시간 시뮬레이션
class RealtimeSimulator:
    """스케줄러 하나를 감싸고 새로 생긴 Gantt/로그만 전달"""

    def __init__(self, processes: List[Process], algorithm: str,
                 quantum: int = DEFAULT_QUANTUM, high_priority_first: bool = True):
        check_algorithms([algorithm])
        config = build_config(quantum=quantum, high_priority_first=high_priority_first)
        self.scheduler = Scheduler(processes, algorithm=algorithm, config=config)
        self.last_log_index = 0
        self.run_task: Optional[asyncio.Task] = None
        self.run_delay: Optional[float] = None  # 마지막 run의 스텝 간격, reset 전까지 유지

    @property
    def is_complete(self) -> bool:
        return self.scheduler.status == SchedulerStatus.COMPLETED

    def start_run(self, websocket: WebSocket, delay: float):
        """자동 실행 태스크 시작 (수신 루프는 계속 메시지를 처리)"""
        self.stop_run()
        self.run_delay = delay
        self.run_task = asyncio.create_task(run_loop(websocket, self, delay))

    def stop_run(self):
        """자동 실행 태스크 취소"""
        if self.run_task is not None and not self.run_task.done():
            self.run_task.cancel()
        self.run_task = None

    def step(self) -> Dict:
        """한 스텝 실행 및 상태 반환"""
        gantt_before = len(self.scheduler.gantt_chart)
        self.scheduler.tick()
        return self.build_state(gantt_before)

    def advance(self) -> Optional[Dict]:
        """실행 중일 때만 한 스텝 진행"""
        gantt_before = len(self.scheduler.gantt_chart)
        if not self.scheduler.advance():
            return None
        return self.build_state(gantt_before)

    def build_state(self, gantt_before: Optional[int] = None) -> Dict:
        scheduler = self.scheduler

        # 새로 추가되거나 연장된 Gantt 엔트리 (마지막 엔트리는 연장될 수 있음)
        if gantt_before is None:
            new_gantt = scheduler.gantt_chart
        else:
            new_gantt = scheduler.gantt_chart[max(0, gantt_before - 1):]

        # 새로운 로그
        new_logs = scheduler.event_log[self.last_log_index:]
        self.last_log_index = len(scheduler.event_log)

        running = scheduler.current_process
        return {
            'complete': self.is_complete,
            'status': scheduler.status.value,
            'time': scheduler.current_time,
            'running': serialize_process(running) if running is not None else None,
            'ready_queue': [serialize_process(p) for p in scheduler.ready_queue],
            'completed': [serialize_process(p) for p in scheduler.completed_processes],
            'new_gantt': serialize_gantt(new_gantt),
            'new_logs': new_logs,
            'metrics': scheduler.metrics
        }


def parse_processes(raw: List[Dict]) -> List[Process]:
    return create_process_objects([ProcessInput(**p) for p in raw])


async def run_loop(websocket: WebSocket, simulator: RealtimeSimulator, delay: float):
    """실행 중인 동안 한 스텝씩 진행 (pause/reset 되면 종료)"""
    while True:
        result = simulator.advance()
        if result is None:
            break
        await websocket.send_json({'type': 'step_result', **result})
        if result['complete']:
            break
        await asyncio.sleep(delay)


async def handle_message(websocket: WebSocket, simulator: Optional[RealtimeSimulator],
                         message: Dict) -> Optional[RealtimeSimulator]:
    """WebSocket 메시지 하나 처리, 갱신된 시뮬레이터 반환"""
    action = message.get('action')

    if action == 'init':
        processes = parse_processes(message.get('processes', []))
        new_simulator = RealtimeSimulator(
            processes,
            message.get('algorithm', 'fcfs'),
            message.get('quantum', DEFAULT_QUANTUM),
            message.get('high_priority_first', True)
        )
        if simulator is not None:
            simulator.stop_run()
        simulator = new_simulator
        await websocket.send_json({
            'type': 'initialized',
            'algorithm': simulator.scheduler.algorithm_key,
            'process_count': len(processes)
        })
        return simulator

    if simulator is None:
        await websocket.send_json({'type': 'error', 'message': 'Simulator not initialized'})
        return None

    scheduler = simulator.scheduler

    if action == 'step':
        await websocket.send_json({'type': 'step_result', **simulator.step()})

    elif action == 'run':
        # 자동 실행 (속도 조절 가능)
        speed = float(message.get('speed', 1.0))
        delay = 1.0 / speed if speed > 0 else 0
        scheduler.start()
        simulator.start_run(websocket, delay)

    elif action == 'pause':
        scheduler.pause()
        await websocket.send_json({'type': 'state', **simulator.build_state()})

    elif action == 'resume':
        scheduler.resume()
        await websocket.send_json({'type': 'state', **simulator.build_state()})
        if simulator.run_delay is not None:
            simulator.start_run(websocket, simulator.run_delay)

    elif action == 'reset':
        simulator.stop_run()
        simulator.run_delay = None
        scheduler.reset()
        simulator.last_log_index = 0
        await websocket.send_json({'type': 'state', **simulator.build_state()})

    elif action == 'config':
        if 'algorithm' in message:
            check_algorithms([message['algorithm']])
            scheduler.select_algorithm(message['algorithm'])
        scheduler.set_config(quantum=message.get('quantum'),
                             high_priority_first=message.get('high_priority_first'))
        await websocket.send_json({
            'type': 'config',
            'algorithm': scheduler.algorithm_key,
            'quantum': scheduler.config.quantum,
            'high_priority_first': scheduler.config.high_priority_first
        })

    elif action == 'add_process':
        scheduler.add_process(parse_processes([message['process']])[0])
        await websocket.send_json({'type': 'state', **simulator.build_state()})

    elif action == 'remove_process':
        removed = scheduler.remove_process(message.get('pid'))
        await websocket.send_json({'type': 'state', 'removed': removed, **simulator.build_state()})

    else:
        await websocket.send_json({'type': 'error', 'message': f'Unknown action: {action}'})

    return simulator


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """실시간 시뮬레이션 WebSocket 엔드포인트"""
    await websocket.accept()
    simulator = None

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
                simulator = await handle_message(websocket, simulator, message)
            except (InvalidConfiguration, ValueError, KeyError, TypeError) as e:
                # pydantic ValidationError, JSON 오류 포함
                logger.warning("WebSocket request rejected: %s", e)
                await websocket.send_json({'type': 'error', 'message': str(e)})
    except WebSocketDisconnect:
        logger.debug("WebSocket disconnected")
    finally:
        if simulator is not None:
            simulator.stop_run()


@app.get("/sample-processes")
async def get_sample_processes():
    """샘플 프로세스 데이터 반환"""
    return {
        "samples": [
            {
                "name": "기본 테스트 (FCFS 2개 프로세스)",
                "processes": [
                    {"pid": 0, "arrival_time": 0, "burst_time": 3, "priority": 1},
                    {"pid": 1, "arrival_time": 1, "burst_time": 2, "priority": 2}
                ]
            },
            {
                "name": "선점 테스트 (SJF-P)",
                "processes": [
                    {"pid": 0, "arrival_time": 0, "burst_time": 8, "priority": 1},
                    {"pid": 1, "arrival_time": 1, "burst_time": 4, "priority": 2}
                ]
            },
            {
                "name": "Round Robin (동시 도착 3개)",
                "processes": [
                    {"pid": 0, "arrival_time": 0, "burst_time": 5, "priority": 3},
                    {"pid": 1, "arrival_time": 0, "burst_time": 5, "priority": 2},
                    {"pid": 2, "arrival_time": 0, "burst_time": 5, "priority": 1}
                ]
            }
        ]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
