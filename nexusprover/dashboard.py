"""Dashboard state, and how worker events update it."""

from __future__ import annotations

import re
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Callable

from nexusprover.metrics import SystemMetrics, TaskFetchInfo, ZkVMMetrics
from nexusprover.system import total_memory_gb

MAX_ACTIVITY_LOGS = 50
FETCHING_TIMEOUT_SECS = 5
POINTS_PER_PROOF = 300

_UNSIGNED = re.compile(r"\+?[0-9]+")


class WorkerKind(Enum):
    """Which part of the worker an event came from."""

    TASK_FETCHER = "task_fetcher"
    PROVER = "prover"
    PROOF_SUBMITTER = "proof_submitter"


class EventType(Enum):
    SUCCESS = "success"
    ERROR = "error"
    REFRESH = "refresh"
    WAITING = "waiting"
    STATE_CHANGE = "state_change"


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


class ProverState(Enum):
    WAITING = "waiting"
    PROVING = "proving"


def _now_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class WorkerEvent:
    """A message emitted by a worker."""

    worker: WorkerKind
    msg: str
    event_type: EventType
    log_level: LogLevel = LogLevel.INFO
    timestamp: str = field(default_factory=_now_timestamp)
    prover_state: ProverState | None = None
    thread_id: int | None = None

    @classmethod
    def task_fetcher(
        cls, msg: str, event_type: EventType, log_level: LogLevel = LogLevel.INFO
    ) -> "WorkerEvent":
        return cls(WorkerKind.TASK_FETCHER, msg, event_type, log_level)

    @classmethod
    def prover(
        cls,
        thread_id: int,
        msg: str,
        event_type: EventType,
        log_level: LogLevel = LogLevel.INFO,
    ) -> "WorkerEvent":
        return cls(WorkerKind.PROVER, msg, event_type, log_level, thread_id=thread_id)

    @classmethod
    def proof_submitter(
        cls, msg: str, event_type: EventType, log_level: LogLevel = LogLevel.INFO
    ) -> "WorkerEvent":
        return cls(WorkerKind.PROOF_SUBMITTER, msg, event_type, log_level)

    @classmethod
    def state_change(cls, state: ProverState, msg: str) -> "WorkerEvent":
        return cls(
            WorkerKind.PROVER,
            msg,
            EventType.STATE_CHANGE,
            LogLevel.INFO,
            prover_state=state,
            thread_id=0,
        )

    def should_display(self) -> bool:
        """Whether the event belongs in the activity log.

        State changes and events below INFO level are not shown.
        """
        return self.event_type is not EventType.STATE_CHANGE and self.log_level >= LogLevel.INFO


class FetchingStatus(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class FetchingState:
    """Fetching status; ``started_at`` is set while active."""

    status: FetchingStatus = FetchingStatus.IDLE
    started_at: float | None = None

    @classmethod
    def active(cls, started_at: float) -> "FetchingState":
        return cls(FetchingStatus.ACTIVE, started_at)


def extract_task_id(msg: str) -> str | None:
    """Task ID following "Got task " in a message, up to the next whitespace."""
    pattern = "Got task "
    start = msg.find(pattern)
    if start < 0:
        return None
    remaining = msg[start + len(pattern):]
    end = next((i for i, ch in enumerate(remaining) if ch.isspace()), None)
    if end is not None:
        return remaining[:end]
    return remaining or None


def extract_wait_seconds(msg: str) -> int | None:
    """Seconds from a message of the form "...(30) seconds"."""
    start = msg.find("(")
    if start < 0:
        return None
    end = msg[start:].find(") seconds")
    if end < 0:
        return None
    text = msg[start + 1:start + end]
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value < (1 << 64) else None


def _is_completion_event(event: WorkerEvent) -> bool:
    return (
        event.worker is WorkerKind.TASK_FETCHER
        and event.event_type in (EventType.SUCCESS, EventType.ERROR)
        and "Step 1 of 4" not in event.msg
    )


def _is_fetching_start_event(event: WorkerEvent) -> bool:
    return (
        event.worker is WorkerKind.TASK_FETCHER
        and "Step 1 of 4: Requesting task..." in event.msg
    )


@dataclass
class DashboardState:
    """Everything the dashboard shows, updated from worker events."""

    node_id: int | None = None
    environment: str = "Production"
    start_time: float | None = None
    num_threads: int = 1
    update_available: bool = False
    latest_version: str | None = None
    with_background_color: bool = False
    clock: Callable[[], float] = time.monotonic
    total_ram_gb: float = field(default_factory=total_memory_gb)
    last_task: str | None = None
    current_task: str | None = None
    pending_events: deque = field(default_factory=deque)
    activity_logs: deque = field(default_factory=deque)
    system_metrics: SystemMetrics = field(default_factory=SystemMetrics)
    zkvm_metrics: ZkVMMetrics = field(default_factory=ZkVMMetrics)
    task_fetch_info: TaskFetchInfo = field(default_factory=TaskFetchInfo)
    tick: int = 0
    last_submission_timestamp: str | None = None
    fetching_state: FetchingState = field(default_factory=FetchingState)
    current_prover_state: ProverState = ProverState.WAITING
    step2_start_time: float | None = None
    waiting_start_info: tuple[float, int] | None = None

    def __post_init__(self) -> None:
        if self.start_time is None:
            self.start_time = self.clock()

    def _elapsed_secs(self, since: float) -> int:
        return max(0, int(self.clock() - since))

    def add_to_activity_log(self, event: WorkerEvent) -> None:
        """Append to the activity log, dropping the oldest entry when full."""
        if len(self.activity_logs) >= MAX_ACTIVITY_LOGS:
            self.activity_logs.popleft()
        self.activity_logs.append(event)

    def add_event(self, event: WorkerEvent) -> None:
        """Queue an event for the next update."""
        self.pending_events.append(event)

    def update(self) -> None:
        """Advance one tick: refresh metrics and process queued events."""
        self.tick += 1
        self.system_metrics = SystemMetrics.update(
            self.system_metrics.peak_ram_bytes, self.system_metrics
        )
        while self.pending_events:
            event = self.pending_events.popleft()
            self.add_to_activity_log(event)
            self.process_event(event)
        self._check_fetching_timeout()
        self._update_task_fetch_countdown()

    def process_event(self, event: WorkerEvent) -> None:
        """Apply a single event to the state."""
        if event.worker is WorkerKind.TASK_FETCHER:
            self._handle_task_fetcher_event(event)
        elif event.worker is WorkerKind.PROVER:
            self._handle_prover_event(event)
        else:
            self._handle_proof_submitter_event(event)

        if event.event_type is EventType.STATE_CHANGE and event.prover_state is not None:
            self.current_prover_state = event.prover_state

    def _handle_task_fetcher_event(self, event: WorkerEvent) -> None:
        if event.event_type is EventType.SUCCESS and "Step 1 of 4: Got task" in event.msg:
            task_id = extract_task_id(event.msg)
            if task_id is not None:
                self.last_task = self.current_task
                self.current_task = task_id
                self.zkvm_metrics.tasks_fetched += 1
                self.step2_start_time = self.clock()

        if _is_completion_event(event):
            self.fetching_state = FetchingState()
        elif (
            _is_fetching_start_event(event)
            and self.fetching_state.status is not FetchingStatus.ACTIVE
        ):
            self.fetching_state = FetchingState.active(self.clock())

        if "ready for next task" in event.msg:
            seconds = extract_wait_seconds(event.msg)
            if seconds is not None:
                same = (
                    self.waiting_start_info is not None
                    and self.waiting_start_info[1] == seconds
                )
                if not same:
                    self.waiting_start_info = (self.clock(), seconds)

    def _handle_prover_event(self, event: WorkerEvent) -> None:
        if event.event_type is EventType.SUCCESS:
            if "Step 3 of 4: Proof generated for task" in event.msg:
                if self.step2_start_time is not None:
                    self.zkvm_metrics.zkvm_runtime_secs += self._elapsed_secs(
                        self.step2_start_time
                    )
                    self.zkvm_metrics.last_task_status = "Proved"
                    self.step2_start_time = None
        elif event.event_type is EventType.ERROR:
            self.zkvm_metrics.last_task_status = "Proof Failed"
            self.step2_start_time = None

    def _handle_proof_submitter_event(self, event: WorkerEvent) -> None:
        metrics = self.zkvm_metrics
        if (
            event.event_type is EventType.SUCCESS
            and "Step 4 of 4: Proof submitted successfully" in event.msg
        ):
            metrics.tasks_submitted += 1
            metrics.tasks_fetched = max(metrics.tasks_fetched, metrics.tasks_submitted)
            metrics.last_task_status = "Success"
            self.last_submission_timestamp = event.timestamp
            metrics.total_points = metrics.tasks_submitted * POINTS_PER_PROOF
        elif event.event_type is EventType.ERROR:
            metrics.last_task_status = "Submit Failed"

    def _update_task_fetch_countdown(self) -> None:
        if self.waiting_start_info is None:
            self.task_fetch_info = TaskFetchInfo(0, 0, True)
            return
        started, original = self.waiting_start_info
        elapsed = self._elapsed_secs(started)
        remaining = max(0, original - elapsed)
        self.task_fetch_info = TaskFetchInfo(
            backoff_duration_secs=original,
            time_since_last_fetch_secs=elapsed,
            can_fetch_now=remaining == 0,
        )
        if remaining == 0:
            self.waiting_start_info = None

    def _check_fetching_timeout(self) -> None:
        state = self.fetching_state
        if state.status is FetchingStatus.ACTIVE and state.started_at is not None:
            if self._elapsed_secs(state.started_at) > FETCHING_TIMEOUT_SECS:
                self.fetching_state = FetchingState(FetchingStatus.TIMEOUT)