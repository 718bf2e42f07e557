#!/usr/bin/env python3
"""
Shuffle Task Executor
Routes mapper records into N bucket files by a stable hash of the
record's signature, so every record of one anagram class lands in
the same bucket
"""

import os
import time
import hashlib
import logging
from contextlib import ExitStack
from typing import Iterable, Iterator, List

from common.errors import MalformedRecord, SourceUnavailable
from common.records import Record

logger = logging.getLogger(__name__)


def partition(signature: str, num_partitions: int) -> int:
    """
    Bucket index for a signature, in [0, num_partitions).

    Only the signature is hashed; the token never influences the bucket.
    """
    if num_partitions < 1:
        raise ValueError(f"num_partitions must be at least 1, got {num_partitions}")
    return int(hashlib.md5(signature.encode('utf-8')).hexdigest(), 16) % num_partitions


def shuffle_in_memory(records: Iterable[Record], num_partitions: int) -> List[List[Record]]:
    """Partition records into num_partitions in-memory buckets"""
    buckets = [[] for _ in range(num_partitions)]
    for record in records:
        buckets[partition(record.signature, num_partitions)].append(record)
    return buckets


def read_records(path: str) -> Iterator[Record]:
    """Yield records from a mapper output file, skipping malformed lines"""
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        for line in f:
            if not line.strip():
                continue
            try:
                yield Record.from_line(line)
            except MalformedRecord as e:
                logger.warning(f"Skipping malformed line in {path}: {e.line!r}")


class ShuffleExecutor:
    """Executes the shuffle stage: one writer per bucket file"""

    def __init__(self, num_partitions: int, bucket_paths: List[str]):
        """
        Initialize the shuffle executor

        Args:
            num_partitions: Number of buckets
            bucket_paths: Output file for each bucket, indexed by partition id
        """
        if len(bucket_paths) != num_partitions:
            raise ValueError(
                f"Expected {num_partitions} bucket paths, got {len(bucket_paths)}")
        self.num_partitions = num_partitions
        self.bucket_paths = bucket_paths

    def execute(self, records: Iterable[Record]) -> List[int]:
        """
        Append each record to exactly one bucket file

        Returns:
            Number of records written to each bucket
        """
        start_time = time.time()
        counts = [0] * self.num_partitions

        for path in self.bucket_paths:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)

        # Every sink is opened once for the whole pass
        with ExitStack() as stack:
            sinks = [stack.enter_context(open(path, 'w', encoding='utf-8'))
                     for path in self.bucket_paths]
            for record in records:
                partition_id = partition(record.signature, self.num_partitions)
                sinks[partition_id].write(record.to_line() + '\n')
                counts[partition_id] += 1

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(f"Shuffle: Routed {sum(counts)} records into {self.num_partitions} "
                    f"buckets in {execution_time}ms {counts}")
        return counts

    def execute_from_file(self, map_output_path: str) -> List[int]:
        """
        Shuffle the records of a mapper output file

        Raises:
            SourceUnavailable: If the mapper output cannot be opened
        """
        if not os.path.isfile(map_output_path):
            logger.error(f"Shuffle failed: mapper output not found: {map_output_path}")
            raise SourceUnavailable(map_output_path, "mapper output not found")
        try:
            return self.execute(read_records(map_output_path))
        except OSError as e:
            logger.error(f"Shuffle failed reading {map_output_path}: {e}")
            raise SourceUnavailable(map_output_path, str(e)) from e
