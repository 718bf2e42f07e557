"""
Tests for job metrics collection
"""

import os
import json
from unittest.mock import patch

from coordinator.metrics import JobMetrics, MetricsCollector


class TestJobMetrics:

    def test_phase_durations(self):
        metrics = JobMetrics(job_id='j', num_partitions=5, start_time=10.0, end_time=20.0,
                             map_phase_start=10.0, map_phase_end=12.0,
                             shuffle_phase_start=12.0, shuffle_phase_end=13.5,
                             reduce_phase_start=13.5, reduce_phase_end=20.0)

        assert metrics.total_time_seconds == 10.0
        assert metrics.map_phase_time_seconds == 2.0
        assert metrics.shuffle_phase_time_seconds == 1.5
        assert metrics.reduce_phase_time_seconds == 6.5

    def test_save_to_file(self, temp_dir):
        metrics = JobMetrics(job_id='j', num_partitions=2, start_time=1.0, end_time=2.0,
                             records_per_bucket=[3, 4], groups_per_bucket={0: 1, 1: 0})
        path = os.path.join(temp_dir, 'metrics.json')

        metrics.save_to_file(path)

        with open(path) as f:
            data = json.load(f)
        assert data['records_per_bucket'] == [3, 4]
        assert data['groups_per_bucket'] == {'0': 1, '1': 0}
        assert data['total_time_seconds'] == 1.0


class TestMetricsCollector:

    def test_tracks_phases(self, temp_dir, sample_input_file):
        map_path = os.path.join(temp_dir, 'input.map')
        bucket_path = os.path.join(temp_dir, 'input.shuf0')
        report_path = os.path.join(temp_dir, 'input.red0')
        for path, content in ((map_path, 'abt: bat\n'), (bucket_path, 'abt: bat\n'),
                              (report_path, 'abt: { bat, tab }\n')):
            with open(path, 'w') as f:
                f.write(content)

        collector = MetricsCollector()
        with patch('coordinator.metrics.time') as mock_time:
            mock_time.time.side_effect = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
            collector.start_job('job', 1, sample_input_file)
            collector.end_map_phase('job', 1, map_path)
            collector.start_shuffle_phase('job')
            collector.end_shuffle_phase('job', [1], [bucket_path])
            collector.start_reduce_phase('job')
            collector.record_bucket_groups('job', 0, 1)
            collector.end_job('job', [report_path])

        metrics = collector.get_metrics('job')
        assert metrics.map_phase_time_seconds == 1.0
        assert metrics.shuffle_phase_time_seconds == 1.0
        assert metrics.reduce_phase_time_seconds == 1.0
        assert metrics.total_time_seconds == 5.0
        assert metrics.input_size_bytes == os.path.getsize(sample_input_file)
        assert metrics.intermediate_size_bytes == 18
        assert metrics.output_size_bytes == len('abt: { bat, tab }\n')
        assert metrics.groups_per_bucket == {0: 1}
        assert metrics.peak_memory_bytes > 0

    def test_unknown_job_is_ignored(self):
        collector = MetricsCollector()
        collector.end_map_phase('missing', 0, 'x')
        collector.end_job('missing')
        assert collector.get_metrics('missing') is None

    def test_input_size_sums_source_directory(self, temp_dir):
        source = os.path.join(temp_dir, 'books')
        os.makedirs(source)
        for name, content in (('a.txt', 'listen\n'), ('b.txt', 'silent tinsel\n'), ('c.md', 'enlist\n')):
            with open(os.path.join(source, name), 'w') as f:
                f.write(content)

        metrics = MetricsCollector().start_job('job', 2, source)

        assert metrics.input_size_bytes == len('listen\n') + len('silent tinsel\n')
