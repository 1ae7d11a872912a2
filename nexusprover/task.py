"""Prover tasks handed out by the orchestrator, and proof-hash combination."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

from Crypto.Hash import keccak


class TaskType(IntEnum):
    """What the orchestrator expects back for a task."""

    PROOF_REQUIRED = 0
    PROOF_HASH = 1
    ALL_PROOF_HASHES = 2


class TaskDifficulty(IntEnum):
    """Difficulty levels, ordered from easiest to hardest."""

    SMALL = 0
    SMALL_MEDIUM = 1
    MEDIUM = 2
    LARGE = 3
    EXTRA_LARGE = 4
    EXTRA_LARGE_2 = 5
    EXTRA_LARGE_3 = 6
    EXTRA_LARGE_4 = 7
    EXTRA_LARGE_5 = 8


def combine_proof_hashes(hashes: Iterable[str]) -> str:
    """Keccak-256 of the concatenated hash strings, as lower-case hex.

    An empty input gives an empty string.
    """
    hashes = list(hashes)
    if not hashes:
        return ""
    digest = keccak.new(digest_bits=256)
    digest.update("".join(hashes).encode("utf-8"))
    return digest.hexdigest()


@dataclass
class Task:
    """A task to prove: its program, its inputs and its requirements."""

    task_id: str
    program_id: str
    public_inputs: bytes
    public_inputs_list: list[bytes]
    task_type: TaskType
    difficulty: TaskDifficulty = field(default=TaskDifficulty.SMALL)

    @classmethod
    def from_input(
        cls,
        task_id: str,
        program_id: str,
        public_inputs: bytes,
        task_type: TaskType,
        difficulty: TaskDifficulty,
    ) -> "Task":
        """Build a task that carries a single public input."""
        data = bytes(public_inputs)
        return cls(
            task_id=task_id,
            program_id=program_id,
            public_inputs=data,
            public_inputs_list=[data],
            task_type=task_type,
            difficulty=difficulty,
        )

    def all_inputs(self) -> list[bytes]:
        """Every public input of the task, in order."""
        return self.public_inputs_list

    def __str__(self) -> str:
        return (
            f"Task ID: {self.task_id}, Program ID: {self.program_id}, "
            f"Inputs: {len(self.public_inputs_list)}"
        )