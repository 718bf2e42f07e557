#!/usr/bin/env python3
"""
Job Manager for the anagram MapReduce pipeline
Runs the map, shuffle and reduce stages for a configured job and tracks
job state, per-bucket failures and metrics
"""

import os
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from common.config import PipelineConfig
from common.errors import BucketUnavailable, PipelineError
from common.records import GroupEntry
from coordinator.metrics import JobMetrics, MetricsCollector
from worker.map_executor import MapExecutor
from worker.reduce_executor import ReduceExecutor, reduce_records
from worker.shuffle_executor import ShuffleExecutor, shuffle_in_memory
from worker.tokenizer import load_stop_words

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Status of a pipeline job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    SHUFFLE_PHASE = "shuffle_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


@dataclass
class Job:
    """Represents one run of the pipeline"""
    job_id: str
    config: PipelineConfig
    status: JobStatus = JobStatus.PENDING
    failed_stage: Optional[str] = None
    error_message: str = ''
    reports: Dict[int, List[GroupEntry]] = field(default_factory=dict)
    failed_buckets: Dict[int, str] = field(default_factory=dict)
    metrics: Optional[JobMetrics] = None

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED


class JobManager:
    """Runs pipeline jobs and keeps their state"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.metrics = MetricsCollector()

    def create_job(self, config: PipelineConfig, job_id: Optional[str] = None) -> Job:
        job = Job(job_id=job_id or uuid.uuid4().hex[:12], config=config)
        self.jobs[job.job_id] = job
        return job

    def load_stop_words(self, config: PipelineConfig) -> FrozenSet[str]:
        """Stop words for a run; empty only when the config allows it"""
        if config.stop_words_path:
            return load_stop_words(config.stop_words_path)
        logger.info("Running with an empty stop-word set")
        return frozenset()

    def _fail(self, job: Job, stage: str, error: Exception) -> Job:
        job.status = JobStatus.FAILED
        job.failed_stage = stage
        job.error_message = str(error)
        logger.error(f"Job {job.job_id}: {stage} stage failed: {error}")
        self.metrics.end_job(job.job_id)
        return job

    def run_map(self, job: Job, stop_words: FrozenSet[str]) -> dict:
        config = job.config
        job.status = JobStatus.MAP_PHASE
        executor = MapExecutor(
            task_id=0,
            input_path=config.input_path,
            output_path=config.map_output_path,
            stop_words=stop_words
        )
        result = executor.execute()
        self.metrics.end_map_phase(job.job_id, result['records'], config.map_output_path)
        return result

    def run_shuffle(self, job: Job) -> List[int]:
        config = job.config
        job.status = JobStatus.SHUFFLE_PHASE
        self.metrics.start_shuffle_phase(job.job_id)
        bucket_paths = [config.bucket_path(i) for i in range(config.num_partitions)]
        executor = ShuffleExecutor(config.num_partitions, bucket_paths)
        counts = executor.execute_from_file(config.map_output_path)
        self.metrics.end_shuffle_phase(job.job_id, counts, bucket_paths)
        return counts

    def run_reduce_task(self, job: Job, partition_id: int) -> List[GroupEntry]:
        """Reduce one bucket; raises BucketUnavailable on a missing bucket"""
        config = job.config
        executor = ReduceExecutor(
            partition_id=partition_id,
            bucket_path=config.bucket_path(partition_id),
            output_path=config.report_path(partition_id)
        )
        return executor.execute()

    def run_reduce(self, job: Job, partitions: Optional[Iterable[int]] = None):
        """
        Reduce every bucket on a thread pool.

        A failed bucket is recorded in job.failed_buckets and does not stop
        the others.
        """
        config = job.config
        job.status = JobStatus.REDUCE_PHASE
        self.metrics.start_reduce_phase(job.job_id)
        partitions = list(range(config.num_partitions)) if partitions is None else list(partitions)

        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            futures = {
                partition_id: pool.submit(self.run_reduce_task, job, partition_id)
                for partition_id in partitions
            }
            for partition_id, future in sorted(futures.items()):
                try:
                    entries = future.result()
                except BucketUnavailable as e:
                    job.failed_buckets[partition_id] = str(e)
                    continue
                job.reports[partition_id] = entries
                self.metrics.record_bucket_groups(job.job_id, partition_id, len(entries))

    def cleanup_intermediate(self, job: Job):
        """Remove the mapper output and bucket files of a finished job"""
        config = job.config
        paths = [config.map_output_path]
        paths += [config.bucket_path(i) for i in range(config.num_partitions)]
        for path in paths:
            if os.path.exists(path):
                os.remove(path)
                logger.info(f"Cleaned up intermediate file: {path}")

    def run_job(self, config: PipelineConfig, job_id: Optional[str] = None) -> Job:
        """
        Run map, shuffle and reduce for one configuration

        Returns:
            The finished Job. Map and shuffle failures leave it FAILED with
            failed_stage set; reducer failures leave it PARTIALLY_COMPLETED
            with the failed bucket indices in failed_buckets.
        """
        job = self.create_job(config, job_id)
        job.metrics = self.metrics.start_job(job.job_id, config.num_partitions, config.input_path)
        logger.info(f"Job {job.job_id}: input={config.input_path} output={config.output_dir} "
                    f"partitions={config.num_partitions}")

        try:
            stop_words = self.load_stop_words(config)
            self.run_map(job, stop_words)
        except PipelineError as e:
            return self._fail(job, 'map', e)

        try:
            self.run_shuffle(job)
        except PipelineError as e:
            return self._fail(job, 'shuffle', e)

        self.run_reduce(job)

        report_paths = [config.report_path(i) for i in sorted(job.reports)]
        self.metrics.end_job(job.job_id, report_paths)

        if job.failed_buckets:
            job.status = JobStatus.PARTIALLY_COMPLETED
            logger.warning(f"Job {job.job_id}: reduce failed for buckets "
                           f"{sorted(job.failed_buckets)}")
        else:
            job.status = JobStatus.COMPLETED
            if not config.keep_intermediate:
                self.cleanup_intermediate(job)

        os.makedirs(config.output_dir, exist_ok=True)
        job.metrics.save_to_file(config.metrics_path)
        logger.info(f"Job {job.job_id}: {job.status.value} in {job.metrics.total_time_seconds:.2f}s")
        return job

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status summary"""
        job = self.jobs.get(job_id)
        if not job:
            return None

        return {
            'status': job.status.value,
            'failed_stage': job.failed_stage,
            'error_message': job.error_message,
            'reduce_completed': len(job.reports),
            'reduce_failed': sorted(job.failed_buckets),
            'reduce_total': job.config.num_partitions,
            'groups': sum(len(entries) for entries in job.reports.values())
        }


def run_in_memory(lines: Iterable[str], stop_words: FrozenSet[str] = frozenset(),
                  num_partitions: int = 5) -> Dict[int, List[GroupEntry]]:
    """
    Run the three stages over in-memory streams

    Returns:
        Bucket index to report entries, for every bucket
    """
    mapper = MapExecutor(task_id=0, input_path='', output_path='', stop_words=stop_words)
    buckets = shuffle_in_memory(mapper.map_lines(lines), num_partitions)
    return {partition_id: reduce_records(records)
            for partition_id, records in enumerate(buckets)}
