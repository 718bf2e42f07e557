"""
Performance metrics collection for anagram MapReduce jobs.
"""

import os
import time
import json
import psutil
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional

from worker.map_executor import source_files


def _file_size(path: str) -> int:
    return os.path.getsize(path) if os.path.exists(path) else 0


@dataclass
class JobMetrics:
    """Metrics for a single pipeline run."""

    job_id: str
    num_partitions: int
    start_time: float
    end_time: float = 0.0
    map_phase_start: float = 0.0
    map_phase_end: float = 0.0
    shuffle_phase_start: float = 0.0
    shuffle_phase_end: float = 0.0
    reduce_phase_start: float = 0.0
    reduce_phase_end: float = 0.0
    records_mapped: int = 0
    records_per_bucket: List[int] = field(default_factory=list)
    groups_per_bucket: Dict[int, int] = field(default_factory=dict)
    input_size_bytes: int = 0
    intermediate_size_bytes: int = 0
    output_size_bytes: int = 0
    peak_memory_bytes: int = 0

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        return self.map_phase_end - self.map_phase_start

    @property
    def shuffle_phase_time_seconds(self) -> float:
        return self.shuffle_phase_end - self.shuffle_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        return self.reduce_phase_end - self.reduce_phase_start

    def to_dict(self) -> dict:
        """Convert metrics to dictionary, including derived timings."""
        data = asdict(self)
        data['groups_per_bucket'] = {str(k): v for k, v in self.groups_per_bucket.items()}
        data['total_time_seconds'] = self.total_time_seconds
        data['map_phase_time_seconds'] = self.map_phase_time_seconds
        data['shuffle_phase_time_seconds'] = self.shuffle_phase_time_seconds
        data['reduce_phase_time_seconds'] = self.reduce_phase_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for pipeline jobs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}
        self.process = psutil.Process()

    def _sample_memory(self, job_id: str):
        rss = self.process.memory_info().rss
        metrics = self.job_metrics[job_id]
        metrics.peak_memory_bytes = max(metrics.peak_memory_bytes, rss)

    def start_job(self, job_id: str, num_partitions: int, input_path: str) -> JobMetrics:
        """Initialize metrics tracking for a new job."""
        now = time.time()
        self.job_metrics[job_id] = JobMetrics(
            job_id=job_id,
            num_partitions=num_partitions,
            start_time=now,
            map_phase_start=now,
            input_size_bytes=sum(_file_size(p) for p in source_files(input_path))
        )
        self._sample_memory(job_id)
        return self.job_metrics[job_id]

    def end_map_phase(self, job_id: str, records_mapped: int, map_output_path: str):
        """Mark the end of the map phase."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.map_phase_end = time.time()
            metrics.records_mapped = records_mapped
            metrics.intermediate_size_bytes = _file_size(map_output_path)
            self._sample_memory(job_id)

    def start_shuffle_phase(self, job_id: str):
        if job_id in self.job_metrics:
            self.job_metrics[job_id].shuffle_phase_start = time.time()

    def end_shuffle_phase(self, job_id: str, records_per_bucket: List[int], bucket_paths: List[str]):
        """Mark the end of the shuffle phase and add bucket file sizes."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            metrics.shuffle_phase_end = time.time()
            metrics.records_per_bucket = list(records_per_bucket)
            metrics.intermediate_size_bytes += sum(_file_size(p) for p in bucket_paths)
            self._sample_memory(job_id)

    def start_reduce_phase(self, job_id: str):
        if job_id in self.job_metrics:
            self.job_metrics[job_id].reduce_phase_start = time.time()

    def record_bucket_groups(self, job_id: str, partition_id: int, num_groups: int):
        if job_id in self.job_metrics:
            self.job_metrics[job_id].groups_per_bucket[partition_id] = num_groups

    def end_job(self, job_id: str, report_paths: Optional[List[str]] = None):
        """Mark job completion and calculate output size."""
        if job_id in self.job_metrics:
            metrics = self.job_metrics[job_id]
            now = time.time()
            if metrics.reduce_phase_start:
                metrics.reduce_phase_end = now
            metrics.end_time = now
            metrics.output_size_bytes = sum(_file_size(p) for p in report_paths or [])
            self._sample_memory(job_id)

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
