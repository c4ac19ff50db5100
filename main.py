#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CPU 스케줄러 시뮬레이터 - 메인 실행 파일
알고리즘 선택 기능 포함
"""

import logging
import os
import sys
from typing import Dict, List, Optional

from core.comparison import ComparisonRun, run_simulation
from core.config import InvalidConfiguration, SchedulerConfig, build_config
from core.process import Process
from schedulers import ALGORITHMS
from utils.input_parser import InputParser
from utils.report import Reporter

logger = logging.getLogger(__name__)

# 메뉴 번호 → 알고리즘 키
MENU_KEYS = {
    '1': 'fcfs',
    '2': 'sjf',
    '3': 'sjf-preemptive',
    '4': 'priority',
    '5': 'rr'
}


def print_banner():
    """배너 출력"""
    print("\n" + "="*80)
    print(" "*25 + "CPU 스케줄러 시뮬레이터")
    print("="*80 + "\n")


def print_algorithm_menu(config: SchedulerConfig):
    """알고리즘 선택 메뉴 출력"""
    print("\n" + "="*80)
    print("스케줄링 알고리즘 선택")
    print("="*80)
    for number, key in MENU_KEYS.items():
        print(f"  {number}. {ALGORITHMS[key]['name']}")
    print(f"\n  q. Round Robin 타임 슬라이스 변경 (현재 {config.quantum})")
    direction = '큰 숫자' if config.high_priority_first else '작은 숫자'
    print(f"  d. 우선순위 방향 변경 (현재 {direction}가 높은 우선순위)")
    print("  all. 모든 알고리즘 실행")
    print("  cmp. 두 알고리즘 나란히 비교")
    print("  0. 종료")
    print("="*80)


def get_user_choice() -> str:
    """사용자 선택 입력"""
    valid = set(MENU_KEYS) | {'q', 'd', 'all', 'cmp'}
    while True:
        choice = input("\n선택하세요: ").strip().lower()

        if choice == '0':
            print("\n프로그램을 종료합니다...")
            sys.exit(0)

        if choice in valid:
            return choice

        print("[오류] 잘못된 선택입니다. 다시 시도하세요.")


def run_single_algorithm(key: str, processes: List[Process], config: SchedulerConfig,
                         verbose: bool = False) -> Dict:
    """단일 알고리즘 실행"""
    print(f"\n{'='*80}")
    print(f"실행 중: {ALGORITHMS[key]['name']}")
    print(f"{'='*80}\n")

    result = run_simulation(processes, key, config)
    if verbose:
        for log in result['event_log']:
            print(log)
    return result


def run_all_algorithms(processes: List[Process], config: SchedulerConfig) -> List[Dict]:
    """모든 알고리즘 실행"""
    results = []

    print("\n" + "="*80)
    print("모든 스케줄링 알고리즘 실행")
    print("="*80 + "\n")

    for index, key in enumerate(ALGORITHMS, 1):
        print(f"[{index}/{len(ALGORITHMS)}] {ALGORITHMS[key]['name']} 실행 중...")
        results.append(run_simulation(processes, key, config))

    return results


def run_comparison(processes: List[Process], config: SchedulerConfig) -> List[Dict]:
    """두 알고리즘을 같은 작업 부하로 나란히 실행"""
    first = MENU_KEYS.get(input("첫 번째 알고리즘 번호 (1-5): ").strip(), 'fcfs')
    second = MENU_KEYS.get(input("두 번째 알고리즘 번호 (1-5): ").strip(), 'rr')

    comparison = ComparisonRun([p.clone() for p in processes], first, second, config)
    result_a, result_b = comparison.run()

    print(f"\n{'지표':<24} {ALGORITHMS[first]['name']:>28} {ALGORITHMS[second]['name']:>28}")
    print("-"*82)
    for metric, (a, b) in comparison.compare_metrics().items():
        print(f"{metric:<24} {a:>28.2f} {b:>28.2f}")

    return [result_a, result_b]


def ask_config_change(config: SchedulerConfig, choice: str) -> SchedulerConfig:
    """설정 변경 입력 처리"""
    if choice == 'd':
        return build_config(quantum=config.quantum,
                            high_priority_first=not config.high_priority_first)

    raw = input("새 타임 슬라이스 (1 이상): ").strip()
    try:
        return build_config(quantum=int(raw), high_priority_first=config.high_priority_first)
    except (ValueError, InvalidConfiguration) as e:
        print(f"[오류] {e}")
        return config


def show_results(results: List[Dict]):
    """결과 출력"""
    reporter = Reporter()
    reporter.print_statistics_table(results)
    for result in results:
        reporter.print_gantt_chart(result)
        reporter.print_process_details(result)


def save_results_to_file(results: List[Dict], filename: str):
    """결과를 텍스트 파일로 저장"""
    with open(filename, 'w', encoding='utf-8') as f:
        f.write("CPU 스케줄러 시뮬레이션 결과\n\n")
        f.write(Reporter.format_statistics_table(results) + "\n\n")

        for result in results:
            f.write(f"Gantt - {result['algorithm']}\n")
            f.write(Reporter.format_gantt_chart(result['gantt_chart']) + "\n\n")
            f.write(Reporter.format_process_details(result) + "\n\n")

    print(f"[완료] 결과가 {filename}에 저장되었습니다")


def select_workload() -> Optional[List[Process]]:
    """작업 부하 선택"""
    print("\n" + "="*80)
    print("작업 부하 선택")
    print("="*80)
    print("  0. 샘플 데이터 (data/sample_processes.txt)")
    print("  1. 랜덤 프로세스 5개")
    print("  2. 스트레스 테스트 (프로세스 100개)")
    print("  3. 파일 경로 직접 입력")
    print("="*80)

    script_dir = os.path.dirname(os.path.abspath(__file__))

    while True:
        choice = input("\n입력 옵션 선택 (0-3): ").strip()

        if choice == '1':
            return InputParser.create_sample_processes(5)
        if choice == '2':
            return InputParser.create_stress_processes(100)
        if choice in ('0', '3'):
            if choice == '0':
                path = os.path.join(script_dir, "data", "sample_processes.txt")
            else:
                path = input("파일 경로: ").strip()
            try:
                return InputParser.parse_file(path)
            except (OSError, UnicodeDecodeError) as e:
                print(f"[오류] 파일을 읽을 수 없습니다: {e}")
                continue

        print("[오류] 잘못된 선택입니다. 0-3 중에서 입력하세요.")


def main():
    """메인 함수"""
    print_banner()

    processes = select_workload()
    if not processes:
        print("\n[오류] 프로세스 로드 실패 또는 파일이 비어있습니다.")
        sys.exit(1)

    InputParser.print_process_summary(processes)
    config = SchedulerConfig()

    # 알고리즘 선택 루프
    while True:
        print_algorithm_menu(config)
        choice = get_user_choice()

        if choice in ('q', 'd'):
            config = ask_config_change(config, choice)
            continue

        try:
            if choice == 'all':
                results = run_all_algorithms(processes, config)
            elif choice == 'cmp':
                results = run_comparison(processes, config)
            else:
                results = [run_single_algorithm(MENU_KEYS[choice], processes, config)]
        except InvalidConfiguration as e:
            print(f"[오류] 잘못된 설정: {e}")
            continue

        show_results(results)

        if input("결과를 results.txt로 저장하시겠습니까? (y/n): ").strip().lower() == 'y':
            save_results_to_file(results, "results.txt")

        # 계속 여부 확인
        print("\n" + "="*80)
        continue_choice = input("다른 시뮬레이션을 실행하시겠습니까? (y/n): ").strip().lower()
        if continue_choice != 'y':
            print("\nCPU 스케줄러 시뮬레이터를 사용해 주셔서 감사합니다!")
            print("="*80 + "\n")
            break


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n사용자에 의해 시뮬레이션이 중단되었습니다.")
        print("="*80 + "\n")
        sys.exit(0)
