"""Job registry — the shell's list of background processes.

When you run ``sleep 60 &``, the shell forks a child, prints its pid,
and hands the pid to the registry.  From then on the registry owns it:
the reaper polls every registered job once per prompt and removes the
ones that have finished.  Foreground commands never enter the
registry; the spawner waits for them directly.

Key ideas:
    - **A job is just a pid.**  No job numbers, no stopped state; the
      shell only needs to know which children it still has to collect.
    - **Capacity is explicit.**  The registry starts with room for ten
      jobs and doubles whenever it is full.  It never shrinks.  A
      Python list would grow on its own; tracking ``capacity`` keeps the
      growth policy visible and testable.
    - **Removal compacts.**  Removing a job shifts the later entries
      down, so enumeration never sees a gap and relative order holds.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from smallsh.config import DEFAULT_JOB_CAPACITY


@dataclass(frozen=True)
class Job:
    """A background process the shell has not yet collected."""

    pid: int

    def __str__(self) -> str:
        """Format as ``pid N``."""
        return f"pid {self.pid}"


class JobRegistry:
    """Growable collection of background jobs.

    Invariant: ``len(self) <= self.capacity``.
    """

    def __init__(self, initial_capacity: int = DEFAULT_JOB_CAPACITY) -> None:
        """Create an empty registry.

        Args:
            initial_capacity: Number of jobs that fit before the first growth.

        Raises:
            ValueError: If *initial_capacity* is less than one.

        """
        if initial_capacity < 1:
            msg = f"initial_capacity must be positive, got {initial_capacity}"
            raise ValueError(msg)
        self._capacity = initial_capacity
        self._jobs: list[Job] = []

    @property
    def capacity(self) -> int:
        """Return how many jobs fit before the next growth."""
        return self._capacity

    def add(self, pid: int) -> Job:
        """Register a background pid, doubling capacity first if full.

        Args:
            pid: Process id reported by the spawner.

        Returns:
            The newly registered job.

        """
        if len(self._jobs) == self._capacity:
            self._capacity *= 2
        job = Job(pid=pid)
        self._jobs.append(job)
        return job

    def remove(self, pid: int) -> None:
        """Remove the first job with *pid*; unknown pids are ignored."""
        for index, job in enumerate(self._jobs):
            if job.pid == pid:
                del self._jobs[index]
                return

    def for_each(self, action: Callable[[Job], object]) -> None:
        """Call *action* on every live job.

        Iterates over a snapshot, so *action* may remove the job it was
        given.
        """
        for job in list(self._jobs):
            action(job)

    def pids(self) -> list[int]:
        """Return the pids of all live jobs in registration order."""
        return [job.pid for job in self._jobs]

    def clear(self) -> None:
        """Forget every job.  Capacity is kept."""
        self._jobs.clear()

    def __iter__(self) -> Iterator[Job]:
        """Iterate over a snapshot of the live jobs."""
        return iter(list(self._jobs))

    def __len__(self) -> int:
        """Return the number of live jobs."""
        return len(self._jobs)

    def __contains__(self, pid: object) -> bool:
        """Return True if a job with *pid* is registered."""
        return any(job.pid == pid for job in self._jobs)
