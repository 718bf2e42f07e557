#!/usr/bin/env python3
"""
Map Task Executor
Reads the source text, tokenizes each line, derives anagram signatures
and streams '<signature>: <token>' records to the mapper output file
"""

import os
import time
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List

from common.errors import SourceUnavailable
from common.records import Record
from worker.tokenizer import tokenize, signature

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = '.txt'


def source_files(input_path: str) -> List[str]:
    """
    Resolve the input path to the text files to map

    A directory expands to every .txt file beneath it in sorted path order;
    any other path is returned as the single source.
    """
    if os.path.isdir(input_path):
        return sorted(str(p) for p in Path(input_path).rglob(f'*{SOURCE_SUFFIX}') if p.is_file())
    return [input_path]


class MapExecutor:
    """Executes the map stage over one source text or a directory of them"""

    def __init__(self, task_id: int, input_path: str, output_path: str,
                 stop_words: FrozenSet[str] = frozenset()):
        """
        Initialize the map executor

        Args:
            task_id: ID used in log messages
            input_path: Path to the source text file, or a directory of .txt files
            output_path: Path of the mapper output file to write
            stop_words: Words discarded before they become records
        """
        self.task_id = task_id
        self.input_path = input_path
        self.output_path = output_path
        self.stop_words = stop_words

    def map_lines(self, lines: Iterable[str]) -> Iterator[Record]:
        """Yield one Record per token, in source order"""
        for line in lines:
            for token in tokenize(line, self.stop_words):
                yield Record(signature(token), token)

    def read_source(self) -> Iterator[str]:
        """
        Yield the lines of every source file, file by file

        Raises:
            SourceUnavailable: If a source cannot be opened or read, or a
                source directory holds no .txt files
        """
        paths = source_files(self.input_path)
        if not paths:
            raise SourceUnavailable(self.input_path, f"no {SOURCE_SUFFIX} files found")

        for path in paths:
            logger.debug(f"Map task {self.task_id}: Reading {path}")
            try:
                with open(path, 'r', encoding='utf-8', errors='ignore') as f:
                    for line in f:
                        yield line
            except OSError as e:
                raise SourceUnavailable(path, str(e)) from e

    def _remove_partial_output(self):
        if os.path.isfile(self.output_path):
            os.remove(self.output_path)

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'records', 'output_path' and 'execution_time_ms'

        Raises:
            SourceUnavailable: If the source cannot be read or the mapper
                output cannot be written; no partial mapper output is left behind
        """
        start_time = time.time()
        logger.info(f"Map task {self.task_id}: Reading {self.input_path}")

        record_count = 0
        try:
            directory = os.path.dirname(self.output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.output_path, 'w', encoding='utf-8') as out:
                for record in self.map_lines(self.read_source()):
                    out.write(record.to_line() + '\n')
                    record_count += 1
        except SourceUnavailable as e:
            logger.error(f"Map task {self.task_id} failed: {e}")
            self._remove_partial_output()
            raise
        except OSError as e:
            logger.error(f"Map task {self.task_id} failed: cannot write {self.output_path}: {e}")
            self._remove_partial_output()
            raise SourceUnavailable(self.output_path, str(e)) from e

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(f"Map task {self.task_id}: Wrote {record_count} records to "
                    f"{self.output_path} in {execution_time}ms")

        return {
            'records': record_count,
            'output_path': self.output_path,
            'execution_time_ms': execution_time
        }
