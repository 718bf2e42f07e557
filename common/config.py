"""
Pipeline configuration
Holds the input path, output directory, partition count and stop-word
resource for one run, built from CLI arguments or the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from common.errors import ConfigurationError

DEFAULT_NUM_PARTITIONS = 5
DEFAULT_MAX_WORKERS = 4

# Environment variable names
ENV_INPUT_PATH = 'ANAGRAM_INPUT_PATH'
ENV_OUTPUT_DIR = 'ANAGRAM_OUTPUT_DIR'
ENV_STOP_WORDS = 'ANAGRAM_STOP_WORDS'
ENV_NUM_PARTITIONS = 'ANAGRAM_NUM_PARTITIONS'


@dataclass
class PipelineConfig:
    """Configuration for one anagram MapReduce run"""
    # A text file, or a directory whose .txt files are mapped in sorted order
    input_path: str
    output_dir: str
    num_partitions: int = DEFAULT_NUM_PARTITIONS
    stop_words_path: Optional[str] = None
    allow_empty_stop_words: bool = False
    keep_intermediate: bool = True
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check the configuration is usable

        Raises:
            ConfigurationError: On a missing path, a partition count below one,
                or a run with no stop-word list that was not explicitly allowed
        """
        if not self.input_path:
            raise ConfigurationError("Input path is required")
        if not self.output_dir:
            raise ConfigurationError("Output directory is required")
        if (not isinstance(self.num_partitions, int) or isinstance(self.num_partitions, bool)
                or self.num_partitions < 1):
            raise ConfigurationError(
                f"Partition count must be a positive integer, got {self.num_partitions!r}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        if not self.stop_words_path and not self.allow_empty_stop_words:
            raise ConfigurationError(
                "No stop-word list configured; pass a stop-word path or "
                "allow an empty stop-word set explicitly")

    @property
    def stem(self) -> str:
        """Base name shared by every file this run produces"""
        return Path(self.input_path).stem

    @property
    def map_output_path(self) -> str:
        return os.path.join(self.output_dir, f"{self.stem}.map")

    def bucket_path(self, partition_id: int) -> str:
        return os.path.join(self.output_dir, f"{self.stem}.shuf{partition_id}")

    def report_path(self, partition_id: int) -> str:
        return os.path.join(self.output_dir, f"{self.stem}.red{partition_id}")

    @property
    def metrics_path(self) -> str:
        return os.path.join(self.output_dir, f"{self.stem}.metrics.json")

    @classmethod
    def from_env(cls, environ=None, **overrides) -> 'PipelineConfig':
        """
        Build a configuration from ANAGRAM_* environment variables.

        Keyword overrides that are not None take precedence over the environment.
        """
        environ = os.environ if environ is None else environ

        raw_partitions = environ.get(ENV_NUM_PARTITIONS, str(DEFAULT_NUM_PARTITIONS))
        try:
            num_partitions = int(raw_partitions)
        except ValueError:
            raise ConfigurationError(f"{ENV_NUM_PARTITIONS} must be an integer, got {raw_partitions!r}")

        values = {
            'input_path': environ.get(ENV_INPUT_PATH, ''),
            'output_dir': environ.get(ENV_OUTPUT_DIR, ''),
            'num_partitions': num_partitions,
            'stop_words_path': environ.get(ENV_STOP_WORDS) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
