#!/usr/bin/env python3
"""
Quick utility script to inspect the bucket files written by the shuffle stage
and confirm that no signature was split across buckets.

Usage:
    python3 scripts/check_bucket_output.py --output-dir out --stem 10001 [--partitions 5]
"""

import os
import sys
import argparse
from collections import defaultdict
from typing import Dict, List, Set

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.errors import MalformedRecord
from common.records import Record


def scan_buckets(output_dir: str, stem: str, num_partitions: int) -> Dict[int, dict]:
    """
    Read every bucket file of a run.

    Returns:
        Partition id to {'path', 'exists', 'records', 'malformed', 'signatures'}
    """
    buckets = {}
    for partition_id in range(num_partitions):
        path = os.path.join(output_dir, f"{stem}.shuf{partition_id}")
        info = {'path': path, 'exists': os.path.isfile(path), 'records': 0,
                'malformed': 0, 'signatures': set()}
        if info['exists']:
            with open(path, 'r', encoding='utf-8') as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        record = Record.from_line(line)
                    except MalformedRecord:
                        info['malformed'] += 1
                        continue
                    info['records'] += 1
                    info['signatures'].add(record.signature)
        buckets[partition_id] = info
    return buckets


def find_split_signatures(buckets: Dict[int, dict]) -> Dict[str, List[int]]:
    """Signatures that appear in more than one bucket, with their buckets"""
    seen: Dict[str, Set[int]] = defaultdict(set)
    for partition_id, info in buckets.items():
        for key in info['signatures']:
            seen[key].add(partition_id)
    return {key: sorted(ids) for key, ids in seen.items() if len(ids) > 1}


def check_buckets(output_dir: str, stem: str, num_partitions: int) -> bool:
    """Print a per-bucket summary; True when every bucket exists and none overlap"""
    buckets = scan_buckets(output_dir, stem, num_partitions)
    ok = True

    for partition_id, info in sorted(buckets.items()):
        if not info['exists']:
            print(f"❌ Bucket {partition_id}: missing ({info['path']})")
            ok = False
            continue
        print(f"✅ Bucket {partition_id}: {info['records']} records, "
              f"{len(info['signatures'])} signatures, {info['malformed']} malformed")

    split = find_split_signatures(buckets)
    if split:
        ok = False
        print(f"\n❌ {len(split)} signature(s) split across buckets:")
        for key, ids in sorted(split.items())[:10]:
            print(f"   {key}: buckets {ids}")
    else:
        print("\n✅ Every signature is confined to a single bucket")

    return ok


if __name__ == '__main__':
    parser = argparse.ArgumentParser(
        description='Check shuffle output for missing buckets and split signatures'
    )
    parser.add_argument('--output-dir', required=True, help='Directory holding the bucket files')
    parser.add_argument('--stem', required=True, help='Base name of the source text (e.g. 10001)')
    parser.add_argument('--partitions', type=int, default=5, help='Number of buckets (default: 5)')

    args = parser.parse_args()

    print(f"Checking bucket output in: {os.path.abspath(args.output_dir)}")
    print(f"{'='*60}\n")

    sys.exit(0 if check_buckets(args.output_dir, args.stem, args.partitions) else 1)
