"""
Priority scheduler simulator - FastAPI backend
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError
from typing import List, Optional, Dict, Any
import asyncio

from core.instruction import SYSCALL_MARKER
from core.process import Process
from core.scheduler_base import TIME_QUANTUM, Event, GanttEntry
from schedulers.priority_scheduler import PriorityScheduler

app = FastAPI(
    title="Priority Scheduler Simulator",
    description="Preemptive priority CPU scheduler with timer and system-call interrupts",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models
class ProcessInput(BaseModel):
    pid: int = Field(..., ge=1)
    priority: int
    instructions: List[str] = []


class SimulationRequest(BaseModel):
    processes: List[ProcessInput]
    time_quantum: int = Field(TIME_QUANTUM, ge=1)


class RunRequest(BaseModel):
    speed: float = Field(0, ge=0)  # steps per second, 0 = no delay


class EventOutput(BaseModel):
    time: int
    type: str
    pid: Optional[int]
    message: str


class GanttOutput(BaseModel):
    pid: int
    start_time: int
    end_time: int
    state: str


class ProcessResult(BaseModel):
    pid: int
    priority: int
    start_time: Optional[int]
    finish_time: Optional[int]
    waiting_time: int
    cpu_time: int
    response_time: Optional[int]
    exit_reason: Optional[str]


class SimulationResult(BaseModel):
    algorithm: str
    events: List[EventOutput]
    event_log: List[str]
    gantt_chart: List[GanttOutput]
    processes: List[ProcessResult]
    statistics: Dict[str, float]
    warnings: List[str]


def create_process_objects(process_inputs: List[ProcessInput]) -> List[Process]:
    """Convert ProcessInput models to Process objects"""
    return [Process(pid=p.pid, priority=p.priority, script=p.instructions) for p in process_inputs]


def event_to_dict(event: Event) -> Dict[str, Any]:
    return {
        'time': event.time,
        'type': event.event_type.value,
        'pid': event.pid,
        'message': event.description
    }


def gantt_to_dict(entry: GanttEntry) -> Dict[str, Any]:
    return {
        'pid': entry.pid,
        'start_time': entry.start_time,
        'end_time': entry.end_time,
        'state': entry.state.value
    }


def run_scheduler(processes: List[Process], time_quantum: int = TIME_QUANTUM) -> Dict:
    """Run the scheduler and convert the result for JSON"""
    scheduler = PriorityScheduler(processes, time_quantum=time_quantum)
    result = scheduler.run()

    processes_result = [
        {
            'pid': p.pid,
            'priority': p.priority,
            'start_time': p.start_time,
            'finish_time': p.finish_time,
            'waiting_time': p.waiting_time,
            'cpu_time': p.cpu_time,
            'response_time': p.response_time,
            'exit_reason': p.exit_reason
        }
        for p in result['processes']
    ]

    return {
        'algorithm': result['algorithm'],
        'events': [event_to_dict(e) for e in scheduler.events],
        'event_log': result['event_log'],
        'gantt_chart': [gantt_to_dict(e) for e in result['gantt_chart']],
        'processes': processes_result,
        'statistics': result['statistics'],
        'warnings': result['warnings']
    }


@app.get("/")
async def root():
    return {"message": "Priority Scheduler Simulator API", "version": "1.0.0"}


@app.get("/config")
async def get_config():
    """Default simulation parameters"""
    return {
        "time_quantum": TIME_QUANTUM,
        "syscall_marker": SYSCALL_MARKER,
        "syscalls": ["TERMINATE", "ERROR", "NETWORK <cycles>"]
    }


@app.post("/simulate", response_model=SimulationResult)
async def simulate(request: SimulationRequest):
    """Run one simulation"""
    try:
        processes = create_process_objects(request.processes)
        return run_scheduler(processes, request.time_quantum)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class RealtimeSimulator:
    """Steps one scheduler per WebSocket connection"""

    def __init__(self, processes: List[Process], time_quantum: int = TIME_QUANTUM):
        self.scheduler = PriorityScheduler(processes, time_quantum=time_quantum)
        self.is_complete = self.scheduler.is_simulation_complete()
        self.last_gantt_index = 0

    def step(self) -> Dict:
        """Run one tick and report the state"""
        if self.is_complete:
            return {'complete': True}

        new_events = self.scheduler.execute_one_step()

        new_gantt = [gantt_to_dict(e) for e in self.scheduler.gantt_chart[self.last_gantt_index:]]
        self.last_gantt_index = len(self.scheduler.gantt_chart)

        running = None
        if self.scheduler.running_process:
            p = self.scheduler.running_process
            running = {
                'pid': p.pid,
                'priority': p.priority,
                'cursor': p.cursor
            }

        ready_queue = [{'pid': p.pid, 'priority': p.priority} for p in self.scheduler.ready_queue]
        blocked = [{'pid': p.pid, 'remaining': p.blocked_cycles} for p in self.scheduler.blocked_set]

        stats = {
            'current_time': self.scheduler.current_time,
            'tick': self.scheduler.tick,
            'context_switches': self.scheduler.stats.context_switches,
            'cpu_busy_time': self.scheduler.stats.cpu_busy_time,
            'completed': len(self.scheduler.halted_processes),
            'total': len(self.scheduler.processes)
        }

        is_complete = self.scheduler.is_simulation_complete()
        if is_complete:
            self.is_complete = True
            self.scheduler.update_statistics()
            stats['final'] = self.scheduler.stats.calculate_averages()

        return {
            'complete': is_complete,
            'running': running,
            'ready_queue': ready_queue,
            'blocked': blocked,
            'new_events': [event_to_dict(e) for e in new_events],
            'new_gantt': new_gantt,
            'stats': stats
        }


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """Realtime simulation over WebSocket"""
    await websocket.accept()
    simulator = None

    try:
        while True:
            message = await websocket.receive_json()
            if not isinstance(message, dict):
                await websocket.send_json({'type': 'error', 'message': 'message must be a JSON object'})
                continue
            action = message.get('action')

            if action == 'init':
                request = SimulationRequest(
                    processes=message.get('processes', []),
                    time_quantum=message.get('time_quantum', TIME_QUANTUM)
                )
                simulator = RealtimeSimulator(create_process_objects(request.processes),
                                              request.time_quantum)
                await websocket.send_json({
                    'type': 'initialized',
                    'process_count': len(request.processes),
                    'time_quantum': request.time_quantum
                })

            elif action == 'step':
                if simulator is None:
                    await websocket.send_json({'type': 'error', 'message': 'not initialized'})
                    continue
                await websocket.send_json({'type': 'step_result', **simulator.step()})

            elif action == 'run':
                if simulator is None:
                    await websocket.send_json({'type': 'error', 'message': 'not initialized'})
                    continue
                try:
                    run_request = RunRequest(speed=message.get('speed', 0))
                except ValidationError as e:
                    await websocket.send_json({'type': 'error', 'message': str(e)})
                    continue
                delay = 1.0 / run_request.speed if run_request.speed > 0 else 0

                if simulator.is_complete:
                    await websocket.send_json({'type': 'step_result', **simulator.step()})
                    continue

                while not simulator.is_complete:
                    result = simulator.step()
                    await websocket.send_json({'type': 'step_result', **result})
                    if delay:
                        await asyncio.sleep(delay)

            else:
                await websocket.send_json({'type': 'error', 'message': f"unknown action: {action}"})

    except WebSocketDisconnect:
        pass
    except Exception as e:
        await websocket.send_json({'type': 'error', 'message': str(e)})
        await websocket.close()


@app.get("/sample-processes")
async def get_sample_processes():
    """Sample workloads"""
    return {
        "samples": [
            {
                "name": "Blocking I/O (2 processes)",
                "processes": [
                    {"pid": 1, "priority": 5,
                     "instructions": ["work", f"{SYSCALL_MARKER} NETWORK 3", "work"]},
                    {"pid": 2, "priority": 3, "instructions": ["work"]}
                ]
            },
            {
                "name": "Timer preemption (1 process)",
                "processes": [
                    {"pid": 1, "priority": 1, "instructions": ["work"] * 6}
                ]
            },
            {
                "name": "Mixed system calls (3 processes)",
                "processes": [
                    {"pid": 1, "priority": 2,
                     "instructions": ["load", "add", f"{SYSCALL_MARKER} TERMINATE"]},
                    {"pid": 2, "priority": 2,
                     "instructions": ["load", f"{SYSCALL_MARKER} ERROR_DIVIDE_BY_ZERO", "store"]},
                    {"pid": 3, "priority": 7,
                     "instructions": ["read", f"{SYSCALL_MARKER} NETWORK_IO NETWORK 2", "write"]}
                ]
            }
        ]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
