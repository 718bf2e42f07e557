#!/usr/bin/env python3
"""
Cleanup script for anagram MapReduce intermediate and report files.
Removes mapper output (.map) and bucket files (.shufN), and optionally the
reports (.redN) and metrics, from an output directory.
"""

import re
import sys
import argparse
from pathlib import Path

INTERMEDIATE_PATTERN = re.compile(r'.+\.(map|shuf\d+)$')
OUTPUT_PATTERN = re.compile(r'.+\.(red\d+|metrics\.json)$')


def cleanup_directory(directory: Path, pattern, dry_run: bool = False):
    """
    Remove files in a directory whose names match a pattern.

    Args:
        directory: Path to the directory to clean
        pattern: Compiled regex matched against file names
        dry_run: If True, only show what would be deleted without actually deleting

    Returns:
        tuple: (files_deleted, bytes_freed)
    """
    if not directory.exists():
        print(f"  ⚠️  Directory does not exist: {directory}")
        return 0, 0

    files_deleted = 0
    bytes_freed = 0

    for item in sorted(directory.iterdir()):
        if not item.is_file() or not pattern.match(item.name):
            continue

        file_size = item.stat().st_size
        if dry_run:
            print(f"    Would delete: {item.name} ({file_size} bytes)")
        else:
            item.unlink()
        files_deleted += 1
        bytes_freed += file_size

    return files_deleted, bytes_freed


def format_size(size_bytes: int) -> str:
    """Format bytes into human-readable size."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"


def main(argv=None):
    """Main cleanup function."""
    parser = argparse.ArgumentParser(
        description="Clean up anagram MapReduce intermediate and report files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s out                  # Remove intermediate files only
  %(prog)s out --all            # Remove intermediate files, reports and metrics
  %(prog)s out --dry-run        # Show what would be deleted without deleting
        """
    )
    parser.add_argument('output_dir', help='Pipeline output directory')
    parser.add_argument('--all', '-a', action='store_true',
                        help='Also remove reports and metrics')
    parser.add_argument('--dry-run', '-n', action='store_true',
                        help='Show what would be deleted without actually deleting')

    args = parser.parse_args(argv)
    directory = Path(args.output_dir)

    if args.dry_run:
        print("🔍 DRY RUN MODE - No files will be deleted")

    total_files, total_bytes = cleanup_directory(directory, INTERMEDIATE_PATTERN, args.dry_run)
    if args.all:
        files, bytes_freed = cleanup_directory(directory, OUTPUT_PATTERN, args.dry_run)
        total_files += files
        total_bytes += bytes_freed

    if args.dry_run:
        print(f"DRY RUN: Would delete {total_files} files ({format_size(total_bytes)})")
    else:
        print(f"✓ Cleanup complete: {total_files} files deleted ({format_size(total_bytes)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
