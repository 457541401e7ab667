from typing import Callable, Dict, Generic, Optional, TypeVar
import threading, time

from .errors import InvalidJobState, JobNotFound
from .models import Job, JobStatus, utc_now

# in-memory only; everything here is lost on restart
# TODO: jobs are never evicted, add a retention window once terminal jobs stop being polled


class JobRegistry:
    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, payload: dict) -> Job:
        job = Job(request=dict(payload))
        with self._lock:
            self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def update(self, job_id: str, **fields) -> Optional[Job]:
        """Merge fields into the job. Raises InvalidJobState once it is completed or failed."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            self._apply(job, fields)
            return job

    def transition(self, job_id: str, expected: JobStatus, **fields) -> Job:
        """Compare-and-set on status; the check and the write share one lock."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFound(job_id)
            if job.status != expected:
                raise InvalidJobState(job_id, JobStatus(job.status).value)
            self._apply(job, fields)
            return job

    def __len__(self) -> int:
        return len(self._jobs)

    @staticmethod
    def _apply(job: Job, fields: dict) -> None:
        # completed and failed are final
        if JobStatus(job.status).terminal:
            raise InvalidJobState(job.id, JobStatus(job.status).value)
        for name, value in fields.items():
            if name in ("id", "created_at", "updated_at") or not hasattr(job, name):
                raise AttributeError(f"cannot update job field {name!r}")
            setattr(job, name, value)
        job.updated_at = utc_now()


T = TypeVar("T")


class ExpiringRegistry(Generic[T]):
    """id -> record map whose entries expire ``ttl_seconds`` after ``created_at``."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()

    def put(self, item: T) -> T:
        with self._lock:
            self._items[item.id] = item
        return item

    def get(self, key: str) -> Optional[T]:
        item = self._items.get(key)
        if item is None:
            return None
        if self._expired(item, self._clock()):
            self.delete(key)
            return None
        return item

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def sweep(self, now: Optional[float] = None) -> int:
        now = self._clock() if now is None else now
        removed = 0
        # snapshot so request handlers are never blocked for the whole pass
        for key, item in list(self._items.items()):
            if self._expired(item, now):
                with self._lock:
                    current = self._items.get(key)
                    if current is not None and self._expired(current, now):
                        del self._items[key]
                        removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def _expired(self, item: T, now: float) -> bool:
        return now - item.created_at > self.ttl_seconds
