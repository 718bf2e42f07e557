#!/usr/bin/env python3
"""
Reduce Task Executor
Reads one bucket file, groups tokens by signature and writes the
anagram groups that have more than one distinct member
"""

import os
import time
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Set

from common.errors import BucketUnavailable, MalformedRecord
from common.records import GroupEntry, Record, write_report

logger = logging.getLogger(__name__)


def group_records(records: Iterable[Record]) -> Dict[str, Set[str]]:
    """Map each signature to its set of distinct tokens"""
    groups = defaultdict(set)
    for record in records:
        groups[record.signature].add(record.token)
    return groups


def build_report(groups: Dict[str, Set[str]]) -> List[GroupEntry]:
    """
    Keep signatures with at least two distinct tokens.

    Entries are sorted by signature and members lexicographically, so the
    report does not depend on record arrival order.
    """
    return [
        GroupEntry(signature=key, members=tuple(sorted(members)))
        for key, members in sorted(groups.items())
        if len(members) > 1
    ]


def reduce_records(records: Iterable[Record]) -> List[GroupEntry]:
    return build_report(group_records(records))


class ReduceExecutor:
    """Executes the reduce stage for a single bucket"""

    def __init__(self, partition_id: int, bucket_path: str, output_path: str):
        """
        Initialize the reduce executor

        Args:
            partition_id: Bucket index this reducer is responsible for
            bucket_path: Intermediate file holding the bucket's records
            output_path: Report file to write
        """
        self.partition_id = partition_id
        self.bucket_path = bucket_path
        self.output_path = output_path
        self.lines_skipped = 0

    def _read_bucket(self) -> List[Record]:
        """
        Read and parse the bucket file

        Returns:
            Records of the bucket; malformed lines are skipped with a warning

        Raises:
            BucketUnavailable: If the file is missing or unreadable
        """
        if not os.path.isfile(self.bucket_path):
            raise BucketUnavailable(self.partition_id, self.bucket_path, "file not found")

        records = []
        self.lines_skipped = 0
        try:
            with open(self.bucket_path, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        records.append(Record.from_line(line))
                    except MalformedRecord as e:
                        self.lines_skipped += 1
                        logger.warning(f"Reduce task {self.partition_id}: Skipping malformed "
                                       f"line in {self.bucket_path}: {e.line!r}")
        except (OSError, UnicodeDecodeError) as e:
            raise BucketUnavailable(self.partition_id, self.bucket_path, str(e)) from e

        return records

    def execute(self) -> List[GroupEntry]:
        """
        Execute the reduce task

        Returns:
            The report entries written to output_path

        Raises:
            BucketUnavailable: If the bucket cannot be read or the report cannot be written
        """
        start_time = time.time()

        try:
            records = self._read_bucket()
        except BucketUnavailable as e:
            logger.error(f"Reduce task {self.partition_id} failed: {e}")
            raise

        entries = reduce_records(records)
        try:
            write_report(entries, self.output_path)
        except OSError as e:
            logger.error(f"Reduce task {self.partition_id} failed: cannot write {self.output_path}: {e}")
            raise BucketUnavailable(self.partition_id, self.output_path, str(e)) from e

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(f"Reduce task {self.partition_id}: {len(records)} records, "
                    f"{self.lines_skipped} skipped, {len(entries)} anagram groups "
                    f"written to {self.output_path} in {execution_time}ms")
        return entries
