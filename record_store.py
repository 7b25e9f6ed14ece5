import os
import re
import math
import logging
from typing import Iterator, List, Optional

import config
from models import StudentRecord, LoadResult, EmptyCollectionError, StorageIOError


# "<roll_no> <name>,<marks>"; the name runs up to the first comma.
# Plain ASCII decimal numbers only: no "1_5", "nan" or "inf".
RECORD_LINE = re.compile(
    r'^\s*([+-]?\d+)\s+([^,]*),\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*$',
    re.ASCII
)

CSV_HEADER = 'Roll No,Name,Marks'


def format_marks(marks) -> str:
    """Marks as written to the data file and CSV export, e.g. 92.0"""
    return str(float(marks))


class StudentRows:
    """
    Lazy view of a student list as formatted table rows.
    Each iteration formats the list as it is at that moment.
    """

    def __init__(self, students: List[StudentRecord], store: 'RecordStore'):
        self._students = students
        self._store = store

    def __iter__(self) -> Iterator[str]:
        for student in self._students:
            yield self._store.format_row(student)

    def __len__(self) -> int:
        return len(self._students)

    def header_lines(self) -> List[str]:
        return self._store.format_header()


class RecordStore:
    def __init__(self, data_file: Optional[str] = None, export_file: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.data_file = data_file or config.STUDENT_DATA_FILE
        self.export_file = export_file or config.STUDENT_EXPORT_FILE

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def parse_line(self, line: str) -> Optional[StudentRecord]:
        """
        Parse one data file line into a StudentRecord.
        Returns None when the line does not have the "<roll> <name>,<marks>" shape.
        """
        match = RECORD_LINE.match(line.rstrip('\r\n'))
        if not match:
            return None

        roll, name, marks = match.groups()
        try:
            student = StudentRecord(roll_no=int(roll), name=name, marks=float(marks))
        except ValueError:
            return None
        # "1e999" overflows to inf
        if not self.is_valid_marks(student.marks):
            return None
        return student

    def load_with_report(self, source: Optional[str] = None) -> LoadResult:
        """
        Read student records from a data file, keeping file order.

        Malformed lines are skipped and their 1-based line numbers reported
        in the result. Blank lines are ignored. A missing file gives an
        empty collection.
        """
        source = source or self.data_file
        students = []
        skipped = []

        if not os.path.exists(source):
            self.logger.info(f"Data file {source} not found, starting with no students")
            return LoadResult(students, skipped)

        try:
            with open(source, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    student = self.parse_line(line)
                    if student is None:
                        self.logger.warning(f"Skipping malformed line {line_number} in {source}: {line.rstrip()!r}")
                        skipped.append(line_number)
                        continue
                    students.append(student)
        except OSError as e:
            self.logger.error(f"Error reading student data from {source}: {str(e)}")
            raise StorageIOError(f"Could not read {source}: {e}") from e

        self.logger.info(f"Loaded {len(students)} students from {source}")
        return LoadResult(students, skipped)

    def load(self, source: Optional[str] = None) -> List[StudentRecord]:
        return self.load_with_report(source).students

    def save(self, students: List[StudentRecord], destination: Optional[str] = None) -> str:
        """Overwrite the data file with one "<roll> <name>,<marks>" line per student."""
        destination = destination or self.data_file
        try:
            self._ensure_parent(destination)
            with open(destination, 'w', encoding='utf-8', newline='') as f:
                for s in students:
                    f.write(f"{s.roll_no} {s.name},{format_marks(s.marks)}\n")
        except OSError as e:
            self.logger.error(f"Error saving student data to {destination}: {str(e)}")
            raise StorageIOError(f"Could not write {destination}: {e}") from e

        self.logger.info(f"Saved {len(students)} students to {destination}")
        return destination

    def export_csv(self, students: List[StudentRecord], destination: Optional[str] = None) -> str:
        """
        Export students as CSV with a "Roll No,Name,Marks" header.
        Fields are not quoted, so a comma inside a name shifts the columns.
        """
        destination = destination or self.export_file
        try:
            self._ensure_parent(destination)
            with open(destination, 'w', encoding='utf-8', newline='') as out:
                out.write(CSV_HEADER + '\n')
                for s in students:
                    out.write(f"{s.roll_no},{s.name},{format_marks(s.marks)}\n")
        except OSError as e:
            self.logger.error(f"Error exporting students to {destination}: {str(e)}")
            raise StorageIOError(f"Could not write {destination}: {e}") from e

        self.logger.info(f"Data exported to {destination}")
        return destination

    def _ensure_parent(self, path: str):
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)

    # ------------------------------------------------------------------
    # Presentation hooks
    # ------------------------------------------------------------------

    def format_header(self) -> List[str]:
        return [f"{'Roll No':>10}{'Name':>20}{'Marks':>9}", '-' * 40]

    def format_row(self, student: StudentRecord) -> str:
        return f"{student.roll_no:>10}{student.name:>20}{student.marks:>10g}"

    def display_all(self, students: List[StudentRecord]) -> StudentRows:
        return StudentRows(students, self)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def topper(self, students: List[StudentRecord]) -> StudentRecord:
        """Student with the highest marks; the first one wins a tie."""
        if not students:
            raise EmptyCollectionError("No students to find a topper among")
        return max(students, key=lambda s: s.marks)

    def average(self, students: List[StudentRecord]) -> float:
        if not students:
            raise EmptyCollectionError("No students to average")
        return sum(s.marks for s in students) / len(students)

    def search_by_name(self, students: List[StudentRecord], query: str) -> List[StudentRecord]:
        # Case-sensitive substring match
        return [s for s in students if query in s.name]

    # ------------------------------------------------------------------
    # Mutations (callers decide when to save)
    # ------------------------------------------------------------------

    def sort_by_marks_descending(self, students: List[StudentRecord]) -> List[StudentRecord]:
        students.sort(key=lambda s: s.marks, reverse=True)
        return students

    def add(self, students: List[StudentRecord], roll_no: int, name: str, marks: float) -> StudentRecord:
        student = StudentRecord(roll_no=int(roll_no), name=str(name), marks=float(marks))
        students.append(student)
        self.logger.debug(f"Added student {student.roll_no} - {student.name}")
        return student

    def remove(self, students: List[StudentRecord], roll_no: int) -> int:
        """Remove every student with this roll number and return how many went."""
        original_count = len(students)
        students[:] = [s for s in students if s.roll_no != roll_no]
        removed = original_count - len(students)
        self.logger.debug(f"Removed {removed} students with roll number {roll_no}")
        return removed

    @staticmethod
    def is_valid_name(name: str) -> bool:
        """Names must be non-blank and free of the comma delimiter and line breaks."""
        if not name or not name.strip():
            return False
        return not any(ch in name for ch in (',', '\n', '\r'))

    @staticmethod
    def is_valid_marks(marks: float) -> bool:
        """Marks must be a finite number (no nan or inf)."""
        return math.isfinite(marks)
