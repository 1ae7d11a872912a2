# nexusprover

Building blocks for a proving node. The package models proof tasks and picks
the task difficulty to request. It checks the running version against
published requirements, measures the machine, and keeps the state a node
dashboard shows.

## Modules

- `nexusprover.task` holds `Task`, `TaskType` and `TaskDifficulty`.
  `combine_proof_hashes` merges proof hash strings into one Keccak-256 hex
  digest. `Task.from_input` builds a task with a single public input.
- `nexusprover.difficulty` handles adaptive difficulty.
  - `next_difficulty` steps one level up. The hardest level stays where it is.
  - `desired_difficulty` chooses the level to request. A manual maximum always
    wins. Without one, the first request is `SMALL_MEDIUM`. After a success
    the level goes up one step, unless that task took 420 seconds or more.
  - `DifficultyTracker` keeps this state for one worker.
- `nexusprover.system` reports the system.
  - `num_cores` and `cpu_stats` give the core count and CPU frequency.
  - `estimate_peak_gflops` estimates peak GFLOP/s.
  - `measure_gflops` runs a benchmark once and caches the result.
  - `get_memory_info`, `total_memory_gb`, `process_memory_gb` and
    `bytes_to_mb_i32` report memory.
- `nexusprover.metrics` holds display metrics.
  - `SystemMetrics.update` samples CPU and RAM for this process and for
    child processes whose names contain "nexus". It also tracks peak RAM.
  - `ZkVMMetrics` counts tasks and gives the success rate, points and runtime
    as text.
  - `TaskFetchInfo` holds the fetch backoff state.
  - `Color` is the set of display colours used by the thresholds.
- `nexusprover.checker`: `VersionInfo`, `parse_version` (a leading `v` is
  allowed), `VersionChecker` and `check_for_new_version`. They query the
  latest published release over HTTP and return a notice if it is newer.
- `nexusprover.requirements`: `VersionRequirements` with its `fetch` and
  `from_dict` methods, and `check_version_constraints`. It also defines
  `ConstraintType`, `VersionConstraint`, `VersionCheckResult` and
  `VersionRequirementsError`.
- `nexusprover.manager` validates the version at startup.
  - `validate_version_requirements` raises `SystemExit(1)` in three cases:
    the requirements cannot be fetched, the region is restricted, or a
    blocking constraint is violated.
  - `fetch_error_advice` builds the troubleshooting text printed on failure.
  - `handle_version_violation` prints the message for a violated constraint.
- `nexusprover.dashboard` holds dashboard state.
  - `DashboardState` is driven by `WorkerEvent`s. It counts fetched and
    submitted tasks, accumulates proving time, tracks the waiting countdown
    and keeps the last 50 activity-log entries.
  - `extract_task_id` and `extract_wait_seconds` parse worker messages.
- `nexusprover.messages` provides `SessionMessage` and the coloured session
  start, shutdown and exit messages.
- `nexusprover.fib` is the Fibonacci program that tasks run.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The Fibonacci program

`nexusprover-fib` reads up to three lines from standard input:

1. the number of steps `n` (required, an unsigned 32-bit number)
2. the first initial value (default 1)
3. the second initial value (default 1)

It prints the final value. Arithmetic wraps at 2**32. If the first line is
missing or invalid, the program prints the error and exits with status 1.

```
printf '10\n' | nexusprover-fib
144
```

## Combining proof hashes

```python
from nexusprover.task import combine_proof_hashes

combine_proof_hashes(["a1b2c3d4e5f6"])
# '966f43edb4fb988490ec112be0d646d119651650d74e4244ec3d291a1c073cf2'
combine_proof_hashes([])
# ''
```

## Checking version constraints

```python
from nexusprover.requirements import VersionRequirements

requirements = VersionRequirements.from_dict({
    "version_constraints": [
        {"version": "0.9.0", "type": "warning", "message": "{current} < {version}"},
        {"version": "0.8.0", "type": "blocking", "message": "{current} < {version}"},
    ]
})
result = requirements.check_version_constraints("0.7.9", None, None)
result.constraint_type   # ConstraintType.BLOCKING
result.message           # '0.7.9 < 0.8.0'
```

When more than one constraint is violated, the most severe one is returned.
Blocking beats warning, and warning beats notice. A constraint whose
`start_date` lies in the future is ignored. Message templates may use
`{current}`, `{version}`, `{latest}` and `{release_url}`.

## What this package does not do

- It has no command that runs a proving node. Nothing here connects to an
  orchestrator to fetch tasks, generates proofs or submits them.
  `DifficultyTracker` only decides which difficulty to ask for.
- It has no interactive terminal screen. `DashboardState` holds the data a
  dashboard would display, but nothing here draws it.