#!/usr/bin/env python3
"""
Anagram MapReduce CLI
Runs the whole pipeline or a single stage, and prints bucket reports
"""

import argparse
import logging
import os
import sys

from common.config import PipelineConfig
from common.errors import PipelineError
from common.records import read_report
from coordinator.job_manager import JobManager, JobStatus
from worker.map_executor import MapExecutor
from worker.reduce_executor import ReduceExecutor
from worker.shuffle_executor import ShuffleExecutor
from worker.tokenizer import load_stop_words


def build_config(args, needs_stop_words: bool = True) -> PipelineConfig:
    """Merge CLI arguments over ANAGRAM_* environment defaults"""
    no_stop_words = getattr(args, 'no_stop_words', False)
    return PipelineConfig.from_env(
        input_path=args.input,
        output_dir=args.output_dir,
        num_partitions=args.partitions,
        # An empty path overrides ANAGRAM_STOP_WORDS
        stop_words_path='' if no_stop_words else getattr(args, 'stop_words', None),
        allow_empty_stop_words=no_stop_words or not needs_stop_words,
        keep_intermediate=not getattr(args, 'cleanup', False),
        max_workers=getattr(args, 'workers', None),
    )


def run_pipeline(args):
    """Run map, shuffle and reduce"""
    config = build_config(args)
    manager = JobManager()
    job = manager.run_job(config, job_id=args.job_id)

    print(f"Job ID: {job.job_id}")
    print(f"Status: {job.status.value}")

    if job.status == JobStatus.FAILED:
        print(f"Error: {job.failed_stage} stage failed: {job.error_message}")
        return 1

    for partition_id in sorted(job.reports):
        print(f"  Bucket {partition_id}: {len(job.reports[partition_id])} anagram groups "
              f"-> {config.report_path(partition_id)}")
    for partition_id, message in sorted(job.failed_buckets.items()):
        print(f"  Bucket {partition_id}: FAILED ({message})")

    if job.failed_buckets:
        print(f"Error: reduce failed for buckets {sorted(job.failed_buckets)}")
        return 1

    print(f"✓ Metrics written to {config.metrics_path}")
    return 0


def run_map(args):
    """Run only the map stage"""
    config = build_config(args)
    stop_words = load_stop_words(config.stop_words_path) if config.stop_words_path else frozenset()
    result = MapExecutor(0, config.input_path, config.map_output_path, stop_words).execute()
    print(f"✓ Mapped {result['records']} records to {result['output_path']}")
    return 0


def run_shuffle(args):
    """Run only the shuffle stage over an existing mapper output"""
    config = build_config(args, needs_stop_words=False)
    bucket_paths = [config.bucket_path(i) for i in range(config.num_partitions)]
    counts = ShuffleExecutor(config.num_partitions, bucket_paths).execute_from_file(
        config.map_output_path)
    for partition_id, count in enumerate(counts):
        print(f"  Bucket {partition_id}: {count} records -> {bucket_paths[partition_id]}")
    return 0


def run_reduce(args):
    """Run the reduce stage for one bucket"""
    config = build_config(args, needs_stop_words=False)
    if not 0 <= args.partition < config.num_partitions:
        print(f"Error: partition must be in [0, {config.num_partitions})")
        return 1
    executor = ReduceExecutor(args.partition, config.bucket_path(args.partition),
                              config.report_path(args.partition))
    entries = executor.execute()
    print(f"✓ Bucket {args.partition}: {len(entries)} anagram groups -> "
          f"{config.report_path(args.partition)}")
    return 0


def show_report(args):
    """Print the reports of one or all buckets"""
    config = build_config(args, needs_stop_words=False)
    partitions = [args.partition] if args.partition is not None else range(config.num_partitions)

    missing = []
    for partition_id in partitions:
        path = config.report_path(partition_id)
        if not os.path.exists(path):
            missing.append(partition_id)
            continue
        if args.partition is None:
            print(f"# bucket {partition_id}")
        for entry in read_report(path):
            print(entry.format())

    if missing:
        print(f"Warning: no report found for buckets {missing}", file=sys.stderr)
        return 1
    return 0


def add_common_arguments(parser):
    parser.add_argument('--input', help='Source text file or directory of .txt files (env: ANAGRAM_INPUT_PATH)')
    parser.add_argument('--output-dir', help='Output directory (env: ANAGRAM_OUTPUT_DIR)')
    parser.add_argument('--partitions', type=int,
                        help='Number of buckets (env: ANAGRAM_NUM_PARTITIONS, default: 5)')


def add_stop_word_arguments(parser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--stop-words', help='Comma-separated stop-word file (env: ANAGRAM_STOP_WORDS)')
    group.add_argument('--no-stop-words', action='store_true',
                       help='Run explicitly with an empty stop-word set')


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Anagram MapReduce CLI',
        epilog='Example: %(prog)s run --input book.txt --output-dir out --stop-words stop_words.txt'
    )
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser(
        'run',
        help='Run the full pipeline',
        description='Map, shuffle and reduce a source text into per-bucket anagram reports'
    )
    add_common_arguments(run_parser)
    add_stop_word_arguments(run_parser)
    run_parser.add_argument('--workers', type=int, help='Reducer threads (default: 4)')
    run_parser.add_argument('--cleanup', action='store_true',
                            help='Remove intermediate files after a successful run')
    run_parser.add_argument('--job-id', help='Custom job ID (auto-generated if not provided)')
    run_parser.set_defaults(func=run_pipeline)

    map_parser = subparsers.add_parser('map', help='Run only the map stage')
    add_common_arguments(map_parser)
    add_stop_word_arguments(map_parser)
    map_parser.set_defaults(func=run_map)

    shuffle_parser = subparsers.add_parser('shuffle', help='Partition mapper output into buckets')
    add_common_arguments(shuffle_parser)
    shuffle_parser.set_defaults(func=run_shuffle)

    reduce_parser = subparsers.add_parser('reduce', help='Reduce a single bucket')
    add_common_arguments(reduce_parser)
    reduce_parser.add_argument('--partition', type=int, required=True, help='Bucket index')
    reduce_parser.set_defaults(func=run_reduce)

    report_parser = subparsers.add_parser('show-report', help='Print bucket reports')
    add_common_arguments(report_parser)
    report_parser.add_argument('--partition', type=int, help='Only this bucket')
    report_parser.set_defaults(func=show_report)

    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        return args.func(args)
    except PipelineError as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
