# Student records are kept in memory as plain lists of StudentRecord and
# persisted to a flat text file by RecordStore (see record_store.py).
from dataclasses import dataclass, asdict
from typing import Dict, List


@dataclass
class StudentRecord:
    roll_no: int
    name: str
    marks: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class LoadResult:
    """Records read from a data file plus the line numbers that were skipped."""
    students: List[StudentRecord]
    skipped_lines: List[int]

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_lines)


class StudentRecordError(Exception):
    pass


class EmptyCollectionError(StudentRecordError):
    """Raised when an aggregate (topper, average) is asked of no students."""


class StorageIOError(StudentRecordError):
    """Reading or writing a student data file failed."""
