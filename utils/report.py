"""
결과 보고 모듈: 통계 표, 프로세스 상세, 텍스트 Gantt 출력
"""

from typing import Dict, List

from core.scheduler import GanttEntry


class Reporter:
    """스케줄링 결과를 텍스트로 정리"""

    @staticmethod
    def format_gantt_chart(gantt_data: List[GanttEntry]) -> str:
        """
        Gantt Chart를 한 줄 텍스트로 변환
        예: |P0 0-3|P1 3-5*|  (*는 선점된 구간)
        """
        if not gantt_data:
            return "(empty)"

        segments = []
        previous_end = None
        for entry in gantt_data:
            if previous_end is not None and entry.start_time > previous_end:
                segments.append(f"idle {previous_end}-{entry.start_time}")
            mark = '*' if entry.preempted else ''
            segments.append(f"P{entry.process_id} {entry.start_time}-{entry.end_time}{mark}")
            previous_end = entry.end_time

        return "|" + "|".join(segments) + "|"

    @staticmethod
    def format_statistics_table(results: List[Dict]) -> str:
        """통계 비교 표 문자열 생성"""
        lines = [
            "="*120,
            "스케줄링 알고리즘 성능 비교",
            "="*120,
            f"{'알고리즘':<32} {'평균 대기':>10} {'평균 반환':>10} {'평균 응답':>10} "
            f"{'CPU 이용률(%)':>14} {'처리량':>8} {'문맥전환':>8}",
            "-"*120
        ]

        for result in results:
            stats = result['statistics']
            lines.append(f"{result['algorithm']:<32} "
                         f"{stats['avg_waiting_time']:>10.2f} "
                         f"{stats['avg_turnaround_time']:>10.2f} "
                         f"{stats['avg_response_time']:>10.2f} "
                         f"{stats['cpu_utilization']:>14.1f} "
                         f"{stats['throughput']:>8.2f} "
                         f"{stats['context_switches']:>8}")

        lines.append("="*120)
        return "\n".join(lines)

    @staticmethod
    def format_process_details(result: Dict) -> str:
        """개별 프로세스 상세 정보 문자열 생성"""
        lines = [
            "="*80,
            f"프로세스 상세 - {result['algorithm']}",
            "="*80,
            f"{'PID':<6} {'도착':>6} {'버스트':>8} {'우선순위':>8} {'시작':>6} {'완료':>6} "
            f"{'대기':>6} {'반환':>6} {'응답':>6}",
            "-"*80
        ]

        for p in sorted(result['processes'], key=lambda x: x.pid):
            lines.append(f"{p.pid:<6} "
                         f"{p.arrival_time:>6} "
                         f"{p.burst_time:>8} "
                         f"{p.priority:>8} "
                         f"{p.start_time:>6} "
                         f"{p.completion_time:>6} "
                         f"{p.get_waiting_time():>6} "
                         f"{p.get_turnaround_time():>6} "
                         f"{p.get_response_time():>6}")

        lines.append("="*80)
        return "\n".join(lines)

    def print_statistics_table(self, results: List[Dict]):
        print("\n" + self.format_statistics_table(results) + "\n")

    def print_process_details(self, result: Dict):
        print("\n" + self.format_process_details(result) + "\n")

    def print_gantt_chart(self, result: Dict):
        print(f"Gantt - {result['algorithm']}")
        print(self.format_gantt_chart(result['gantt_chart']) + "\n")
