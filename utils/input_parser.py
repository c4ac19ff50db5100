"""
입력 데이터 파서 및 프로세스 생성 모듈
"""

import csv
import logging
import random
from typing import List, Optional

from core.config import InvalidConfiguration, validate_process
from core.process import Process, ProcessIdGenerator

logger = logging.getLogger(__name__)

FILE_HEADER = "# Format: PID,ArrivalTime,BurstTime,Priority[,Name]"


class InputParser:
    """입력 파일 파서 및 작업 부하 생성기"""

    @staticmethod
    def parse_file(filename: str) -> List[Process]:
        """
        CSV 파일에서 프로세스 정보 읽기

        파일 형식: PID,도착시간,버스트시간,우선순위[,이름]
        예: 1,0,5,3,Editor

        잘못된 라인은 경고 로그를 남기고 건너뛴다.

        Args:
            filename: 입력 파일 경로

        Returns:
            프로세스 리스트
        """
        processes = []

        with open(filename, 'r', encoding='utf-8', newline='') as f:
            for line_no, parts in enumerate(csv.reader(f), 1):
                # 주석 및 빈 줄 제거
                if not parts or not ''.join(parts).strip() or parts[0].strip().startswith('#'):
                    continue

                try:
                    processes.append(InputParser._create_process_from_parts(parts))
                except ValueError as e:
                    logger.warning("%s:%d 라인 파싱 실패 (%s): %s", filename, line_no, e, parts)

        logger.info("%s에서 %d개의 프로세스를 로드했습니다", filename, len(processes))
        return processes

    @staticmethod
    def _create_process_from_parts(parts: List[str]) -> Process:
        """파싱된 부분에서 프로세스 객체 생성"""
        parts = [part.strip() for part in parts]
        if len(parts) < 4:
            raise InvalidConfiguration(f"잘못된 형식: 4개 필드가 필요하지만 {len(parts)}개만 있습니다")

        try:
            pid = int(parts[0])
            arrival_time = int(parts[1])
            burst_time = int(parts[2])
            priority = int(parts[3])
        except ValueError as e:
            raise InvalidConfiguration(f"숫자 필드 변환 오류: {e}") from e

        if pid < 0:
            raise InvalidConfiguration(f"PID는 0 이상이어야 합니다: {pid}")

        name = parts[4] if len(parts) > 4 and parts[4] else None
        process = Process(pid, arrival_time, burst_time, priority, name=name)
        validate_process(process)
        return process

    @staticmethod
    def create_sample_processes(count: int = 5, seed: Optional[int] = None,
                                id_generator: Optional[ProcessIdGenerator] = None) -> List[Process]:
        """
        기본 샘플 프로세스 생성

        Args:
            count: 생성할 프로세스 수
            seed: 랜덤 시드
            id_generator: PID 발급기 (없으면 0부터 새로 발급)

        Returns:
            도착 시간순으로 정렬된 프로세스 리스트
        """
        return InputParser._generate(count, max_arrival=4, min_burst=2, max_burst=9,
                                     seed=seed, id_generator=id_generator)

    @staticmethod
    def create_stress_processes(count: int = 100, seed: Optional[int] = None,
                                id_generator: Optional[ProcessIdGenerator] = None) -> List[Process]:
        """스트레스 테스트용 다수의 짧은 프로세스 생성"""
        return InputParser._generate(count, max_arrival=19, min_burst=1, max_burst=5,
                                     seed=seed, id_generator=id_generator)

    @staticmethod
    def create_random_process(current_time: int, id_generator: ProcessIdGenerator,
                              rng: Optional[random.Random] = None) -> Process:
        """실행 중 추가할 프로세스 하나 생성 (현재 시간부터 3틱 안에 도착)"""
        rng = rng or random.Random()
        return Process(id_generator.next_id(),
                       arrival_time=current_time + rng.randint(0, 2),
                       burst_time=rng.randint(2, 9),
                       priority=rng.randint(1, 10))

    @staticmethod
    def _generate(count: int, max_arrival: int, min_burst: int, max_burst: int,
                  seed: Optional[int], id_generator: Optional[ProcessIdGenerator]) -> List[Process]:
        rng = random.Random(seed)
        id_generator = id_generator or ProcessIdGenerator()

        processes = [
            Process(id_generator.next_id(),
                    arrival_time=rng.randint(0, max_arrival),
                    burst_time=rng.randint(min_burst, max_burst),
                    priority=rng.randint(1, 10))
            for _ in range(count)
        ]

        # 도착 시간순 정렬
        processes.sort(key=lambda p: p.arrival_time)
        logger.debug("%d개의 랜덤 프로세스를 생성했습니다", count)
        return processes

    @staticmethod
    def save_processes_to_file(processes: List[Process], filename: str):
        """
        프로세스 리스트를 파일로 저장

        Args:
            processes: 저장할 프로세스 리스트
            filename: 출력 파일 경로
        """
        with open(filename, 'w', encoding='utf-8', newline='') as f:
            f.write("# CPU Scheduler Simulator Input Data\n")
            f.write(FILE_HEADER + "\n\n")

            writer = csv.writer(f, lineterminator='\n')
            for process in processes:
                writer.writerow([process.pid, process.arrival_time, process.burst_time,
                                 process.priority, process.name])

        logger.info("%d개의 프로세스를 %s에 저장했습니다", len(processes), filename)

    @staticmethod
    def print_process_summary(processes: List[Process]):
        """프로세스 요약 정보 출력"""
        print("\n" + "="*70)
        print("프로세스 요약")
        print("="*70)
        print(f"{'PID':<6} {'이름':<12} {'도착시간':>8} {'버스트':>8} {'우선순위':>10}")
        print("-"*70)

        for p in sorted(processes, key=lambda x: x.pid):
            print(f"{p.pid:<6} {p.name:<12} {p.arrival_time:>8} {p.burst_time:>8} {p.priority:>10}")

        print("="*70 + "\n")

        total_burst = sum(p.burst_time for p in processes)
        print(f"전체 프로세스: {len(processes)}개")
        print(f"  - 총 버스트 시간: {total_burst}")
        print()
