import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .context import ReportContext

logger = logging.getLogger(__name__)

ReportBuilder = Callable[[ReportContext], Path]

ACTIVE_STATUSES = ("queued", "running")


@dataclass
class ReportJob:
    id: str
    context: ReportContext
    cache_key: str
    status: str = "queued"
    result_path: Optional[str] = None
    error: Optional[str] = None
    future: Optional[Future] = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self.status not in ACTIVE_STATUSES


class ReportQueue:
    """
    Background generation of company reports.

    A report is identified by its context's cache key (company, numbering,
    renderer). Submitting a report that is already queued or running returns
    the existing job instead of rendering the same PDF twice. A failed job
    keeps its error text; nothing is raised to the caller.
    """

    def __init__(self, max_workers: int = 2):
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ihcs-report")
        self.jobs: Dict[str, ReportJob] = {}
        self.lock = threading.Lock()

    def submit(self, ctx: ReportContext, builder: ReportBuilder) -> str:
        key = ctx.cache_key()
        with self.lock:
            for job in self.jobs.values():
                if job.cache_key == key and not job.done:
                    logger.info("Report for company %s already %s as job %s", ctx.company_id, job.status, job.id)
                    return job.id
            job = ReportJob(id=uuid.uuid4().hex[:12], context=ctx, cache_key=key)
            self.jobs[job.id] = job
            job.future = self.executor.submit(self._run_job, job, builder)
        return job.id

    def _run_job(self, job: ReportJob, builder: ReportBuilder) -> None:
        with self.lock:
            job.status = "running"
        try:
            path = builder(job.context)
        except Exception as exc:
            logger.exception("Report job %s for company %s failed", job.id, job.context.company_id)
            with self.lock:
                job.status = "failed"
                job.error = str(exc)
            return
        with self.lock:
            job.status = "completed"
            job.result_path = str(path)
        logger.info("Report job %s written to %s", job.id, path)

    def get(self, job_id: str) -> Optional[ReportJob]:
        with self.lock:
            return self.jobs.get(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[ReportJob]:
        """Block until the job finishes; raises TimeoutError from the future on timeout."""
        job = self.get(job_id)
        if job is not None and job.future is not None:
            job.future.result(timeout=timeout)
        return job

    def for_company(self, company_id: str) -> List[ReportJob]:
        with self.lock:
            return [job for job in self.jobs.values() if job.context.company_id == company_id]

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
