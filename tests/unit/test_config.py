"""
Unit tests for PipelineConfig
"""

import os
import pytest

from common.config import PipelineConfig, DEFAULT_NUM_PARTITIONS
from common.errors import ConfigurationError


class TestPipelineConfig:

    def test_defaults(self):
        config = PipelineConfig(input_path='in/10001.txt', output_dir='out',
                                stop_words_path='stop.txt')
        assert config.num_partitions == DEFAULT_NUM_PARTITIONS == 5
        assert config.keep_intermediate is True

    def test_derived_paths(self):
        config = PipelineConfig(input_path='in/10001.txt', output_dir='out',
                                allow_empty_stop_words=True)
        assert config.map_output_path == os.path.join('out', '10001.map')
        assert config.bucket_path(3) == os.path.join('out', '10001.shuf3')
        assert config.report_path(0) == os.path.join('out', '10001.red0')
        assert config.metrics_path == os.path.join('out', '10001.metrics.json')

    @pytest.mark.parametrize('num_partitions', [0, -1, True, 2.5])
    def test_rejects_bad_partition_count(self, num_partitions):
        with pytest.raises(ConfigurationError):
            PipelineConfig(input_path='a.txt', output_dir='out',
                           num_partitions=num_partitions, allow_empty_stop_words=True)

    def test_empty_stop_words_must_be_explicit(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(input_path='a.txt', output_dir='out')

        config = PipelineConfig(input_path='a.txt', output_dir='out', allow_empty_stop_words=True)
        assert config.stop_words_path is None

    def test_requires_paths(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(input_path='', output_dir='out', allow_empty_stop_words=True)
        with pytest.raises(ConfigurationError):
            PipelineConfig(input_path='a.txt', output_dir='', allow_empty_stop_words=True)


class TestConfigFromEnv:

    def test_reads_environment(self):
        environ = {
            'ANAGRAM_INPUT_PATH': 'books/10001.txt',
            'ANAGRAM_OUTPUT_DIR': 'out',
            'ANAGRAM_STOP_WORDS': 'stop.txt',
            'ANAGRAM_NUM_PARTITIONS': '7',
        }
        config = PipelineConfig.from_env(environ)

        assert config.input_path == 'books/10001.txt'
        assert config.output_dir == 'out'
        assert config.stop_words_path == 'stop.txt'
        assert config.num_partitions == 7

    def test_overrides_take_precedence(self):
        environ = {'ANAGRAM_INPUT_PATH': 'a.txt', 'ANAGRAM_OUTPUT_DIR': 'out',
                   'ANAGRAM_NUM_PARTITIONS': '7'}
        config = PipelineConfig.from_env(environ, num_partitions=2, output_dir=None,
                                         allow_empty_stop_words=True)
        assert config.num_partitions == 2
        assert config.output_dir == 'out'

    def test_non_integer_partitions(self):
        environ = {'ANAGRAM_INPUT_PATH': 'a.txt', 'ANAGRAM_OUTPUT_DIR': 'out',
                   'ANAGRAM_NUM_PARTITIONS': 'five'}
        with pytest.raises(ConfigurationError):
            PipelineConfig.from_env(environ, allow_empty_stop_words=True)
