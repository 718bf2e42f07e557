"""
Unit tests for signature partitioning and the shuffle stage
"""

import os
import hashlib
import pytest

from common.errors import SourceUnavailable
from common.records import Record
from worker.shuffle_executor import ShuffleExecutor, partition, shuffle_in_memory, read_records


ANAGRAM_RECORDS = [
    Record('eilnst', 'listen'), Record('eilnst', 'silent'), Record('eilnst', 'enlist'),
    Record('eilnst', 'tinsel'), Record('abt', 'bat'), Record('abt', 'tab'),
    Record('opst', 'pots'), Record('opst', 'stop'), Record('opst', 'tops'),
    Record('act', 'cat'), Record('dgo', 'dog'),
]


class TestPartition:
    """Tests for the partition function"""

    @pytest.mark.parametrize('num_partitions', [1, 2, 3, 5, 7, 16])
    def test_index_in_range(self, num_partitions):
        for record in ANAGRAM_RECORDS:
            assert 0 <= partition(record.signature, num_partitions) < num_partitions

    @pytest.mark.parametrize('num_partitions', [1, 2, 5, 13])
    def test_same_signature_same_bucket(self, num_partitions):
        by_signature = {}
        for record in ANAGRAM_RECORDS:
            index = partition(record.signature, num_partitions)
            assert by_signature.setdefault(record.signature, index) == index

    def test_matches_md5_of_signature(self):
        # Independent of PYTHONHASHSEED
        expected = int(hashlib.md5(b'eilnst').hexdigest(), 16) % 5
        assert partition('eilnst', 5) == expected

    def test_single_partition(self):
        assert {partition(r.signature, 1) for r in ANAGRAM_RECORDS} == {0}

    def test_rejects_zero_partitions(self):
        with pytest.raises(ValueError):
            partition('abc', 0)

    def test_spreads_signatures(self):
        signatures = [f"{chr(97 + i)}{chr(97 + j)}" for i in range(26) for j in range(26)]
        used = {partition(key, 5) for key in signatures}
        assert used == set(range(5))


class TestShuffleInMemory:

    def test_every_record_lands_in_exactly_one_bucket(self):
        buckets = shuffle_in_memory(ANAGRAM_RECORDS, 5)
        assert len(buckets) == 5
        key = lambda r: (r.signature, r.token)
        assert sorted((r for bucket in buckets for r in bucket), key=key) == sorted(ANAGRAM_RECORDS, key=key)

    def test_no_signature_split_across_buckets(self):
        buckets = shuffle_in_memory(ANAGRAM_RECORDS, 3)
        owners = {}
        for index, bucket in enumerate(buckets):
            for record in bucket:
                assert owners.setdefault(record.signature, index) == index


class TestShuffleExecutor:
    """Tests for the file-backed shuffle stage"""

    def _bucket_paths(self, temp_dir, n):
        return [os.path.join(temp_dir, 'out', f'input.shuf{i}') for i in range(n)]

    def test_writes_all_bucket_files(self, temp_dir):
        paths = self._bucket_paths(temp_dir, 5)
        counts = ShuffleExecutor(5, paths).execute(ANAGRAM_RECORDS)

        assert sum(counts) == len(ANAGRAM_RECORDS)
        for path, count in zip(paths, counts):
            assert os.path.exists(path)
            with open(path) as f:
                lines = f.read().splitlines()
            assert len(lines) == count
            for line in lines:
                record = Record.from_line(line)
                assert paths.index(path) == partition(record.signature, 5)

    def test_execute_from_file(self, temp_dir):
        map_path = os.path.join(temp_dir, 'input.map')
        with open(map_path, 'w') as f:
            for record in ANAGRAM_RECORDS:
                f.write(record.to_line() + '\n')
            f.write('not a record\n')

        paths = self._bucket_paths(temp_dir, 2)
        counts = ShuffleExecutor(2, paths).execute_from_file(map_path)

        assert sum(counts) == len(ANAGRAM_RECORDS)

    def test_missing_map_output_raises(self, temp_dir):
        executor = ShuffleExecutor(2, self._bucket_paths(temp_dir, 2))
        with pytest.raises(SourceUnavailable):
            executor.execute_from_file(os.path.join(temp_dir, 'missing.map'))

    def test_path_count_must_match(self, temp_dir):
        with pytest.raises(ValueError):
            ShuffleExecutor(3, self._bucket_paths(temp_dir, 2))

    def test_read_records_skips_malformed(self, temp_dir):
        path = os.path.join(temp_dir, 'input.map')
        with open(path, 'w') as f:
            f.write('abt: bat\n\nbroken\nabt: tab\n')
        assert list(read_records(path)) == [Record('abt', 'bat'), Record('abt', 'tab')]
