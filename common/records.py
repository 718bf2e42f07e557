"""
Record and report types shared by the map, shuffle and reduce stages,
together with their text line formats.
"""

import os
from dataclasses import dataclass
from typing import List, Tuple

from common.errors import MalformedRecord

RECORD_SEPARATOR = ': '


@dataclass(frozen=True)
class Record:
    """A (signature, token) pair emitted by the mapper"""
    signature: str
    token: str

    def to_line(self) -> str:
        """Serialize as '<signature>: <token>'"""
        return f"{self.signature}{RECORD_SEPARATOR}{self.token}"

    @classmethod
    def from_line(cls, line: str) -> 'Record':
        """
        Parse a mapper/bucket line.

        Raises:
            MalformedRecord: If the separator is missing or either side is empty
        """
        stripped = line.strip()
        signature, sep, token = stripped.partition(RECORD_SEPARATOR)
        if not sep or not signature or not token:
            raise MalformedRecord(stripped)
        return cls(signature=signature.strip(), token=token.strip())


@dataclass(frozen=True)
class GroupEntry:
    """An anagram group: one signature and its distinct member tokens"""
    signature: str
    members: Tuple[str, ...]

    def format(self) -> str:
        return f"{self.signature}: {{ {', '.join(self.members)} }}"

    @classmethod
    def parse(cls, line: str) -> 'GroupEntry':
        """Parse a report line back into a GroupEntry"""
        stripped = line.strip()
        signature, sep, rest = stripped.partition(RECORD_SEPARATOR)
        if not sep or not rest.startswith('{ ') or not rest.endswith(' }'):
            raise MalformedRecord(stripped)
        members = tuple(m.strip() for m in rest[2:-2].split(','))
        return cls(signature=signature, members=members)


def write_report(entries: List[GroupEntry], path: str):
    """Write report entries one per line"""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        for entry in entries:
            f.write(entry.format() + '\n')


def read_report(path: str) -> List[GroupEntry]:
    """Read a report file written by a reducer"""
    entries = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            if line.strip():
                entries.append(GroupEntry.parse(line))
    return entries
