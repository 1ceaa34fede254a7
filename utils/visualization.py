"""
Visualization: Gantt chart and statistics tables
"""

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import List, Dict, Optional
from core.scheduler_base import GanttEntry
from core.process import ProcessState

BLOCKED_MARKER_WIDTH = 0.15


class Visualizer:
    """Scheduling result visualization"""

    def __init__(self):
        # Per-process colors
        self.colors = plt.cm.Set3.colors
        self.blocked_color = '#FFE5E5'

    def draw_gantt_chart(self, gantt_data: List[GanttEntry], algorithm_name: str,
                         save_path: Optional[str] = None, show: bool = True) -> bool:
        """
        Draw a Gantt chart

        Args:
            gantt_data: Gantt chart entries
            algorithm_name: title suffix
            save_path: output path (None to skip saving)
            show: display the figure

        Returns:
            False when there was nothing to draw
        """
        if not gantt_data:
            print(f"No Gantt chart data for {algorithm_name}")
            return False

        fig, ax = plt.subplots(figsize=(16, 6))

        unique_pids = sorted(set(entry.pid for entry in gantt_data))
        pid_to_y = {pid: idx for idx, pid in enumerate(unique_pids)}

        for entry in gantt_data:
            duration = entry.end_time - entry.start_time
            y_pos = pid_to_y[entry.pid]

            if entry.state == ProcessState.RUNNING:
                color = self.colors[entry.pid % len(self.colors)]
                alpha = 1.0
            else:
                color = self.blocked_color
                alpha = 0.7
                # NETWORK 0/1 unblocks on the next tick
                duration = max(duration, BLOCKED_MARKER_WIDTH)

            ax.barh(y_pos, duration, left=entry.start_time, height=0.8,
                    color=color, alpha=alpha, edgecolor='black', linewidth=0.5)

            if duration > 1:
                ax.text(entry.start_time + duration/2, y_pos, f'P{entry.pid}',
                        ha='center', va='center', fontsize=8, fontweight='bold')

        ax.set_yticks(range(len(unique_pids)))
        ax.set_yticklabels([f'P{pid}' for pid in unique_pids])
        ax.set_xlabel('Time (ticks)', fontsize=12)
        ax.set_ylabel('Process', fontsize=12)
        ax.set_title(f'Gantt Chart - {algorithm_name}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [
            mpatches.Patch(color=self.colors[0], label='Running'),
            mpatches.Patch(color=self.blocked_color, alpha=0.7, label='Blocked (NETWORK)')
        ]
        ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt chart saved to {save_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)
        return True

    def print_statistics_table(self, results: List[Dict]):
        """
        Print statistics as a table

        Args:
            results: result dictionaries from ``scheduler.run()``
        """
        print("\n" + "="*110)
        print("Scheduling statistics")
        print("="*110)
        print(f"{'Algorithm':<24} {'Avg wait':>10} {'Avg turnaround':>16} {'Avg response':>14} "
              f"{'CPU util(%)':>12} {'Switches':>10} {'Timer':>8} {'Syscalls':>10}")
        print("-"*110)

        for result in results:
            algo = result['algorithm']
            stats = result['statistics']
            print(f"{algo:<24} "
                  f"{stats['avg_waiting_time']:>10.2f} "
                  f"{stats['avg_turnaround_time']:>16.2f} "
                  f"{stats['avg_response_time']:>14.2f} "
                  f"{stats['cpu_utilization']:>12.2f} "
                  f"{stats['context_switches']:>10} "
                  f"{stats['timer_interrupts']:>8} "
                  f"{stats['software_interrupts']:>10}")

        print("="*110 + "\n")

    def print_process_details(self, results: Dict):
        """
        Print per-process details

        Args:
            results: result dictionary
        """
        print(f"\n{'='*80}")
        print(f"Process details - {results['algorithm']}")
        print(f"{'='*80}")
        print(f"{'PID':<6} {'Priority':>10} {'Start':>8} {'Finish':>8} "
              f"{'Wait':>8} {'CPU':>8} {'Response':>10} {'Exit':>10}")
        print(f"{'-'*80}")

        for process in results['processes']:
            start = process.start_time if process.start_time is not None else 'N/A'
            print(f"{process.pid:<6} "
                  f"{process.priority:>10} "
                  f"{start:>8} "
                  f"{process.finish_time:>8} "
                  f"{process.waiting_time:>8} "
                  f"{process.cpu_time:>8} "
                  f"{process.response_time if process.response_time is not None else 'N/A':>10} "
                  f"{process.exit_reason:>10}")

        print(f"{'='*80}\n")
