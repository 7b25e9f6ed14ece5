"""RecordStore tests: data file parsing, aggregates, sorting, search, CSV export and edits."""
import pytest

from models import StudentRecord, EmptyCollectionError, StorageIOError
from record_store import RecordStore, format_marks


@pytest.fixture
def store(tmp_path):
    return RecordStore(
        data_file=str(tmp_path / 'students.txt'),
        export_file=str(tmp_path / 'exported_students.csv'),
    )


@pytest.fixture
def students():
    return [
        StudentRecord(1, 'Alice', 88.5),
        StudentRecord(2, 'Bob', 92.0),
        StudentRecord(3, 'Cara', 92.0),
    ]


# ---------------------------------------------------------------------------
# Parsing and loading
# ---------------------------------------------------------------------------

def test_parse_line_reads_roll_name_and_marks(store):
    student = store.parse_line('12 Alice Smith,88.5\n')
    assert student == StudentRecord(12, 'Alice Smith', 88.5)


def test_parse_line_keeps_trailing_space_in_name(store):
    assert store.parse_line('1 Alice ,70').name == 'Alice '


@pytest.mark.parametrize('line', [
    'abc Alice,88.5',
    '1 Alice 88.5',
    '1 Alice,abc',
    '1 A,B,3',
    '1Alice,88.5',
    '',
    '1 A,1_5',
    '1 A,nan',
    '1 A,inf',
    '1 A,-Infinity',
    '1 A,1e999',
    '\u0661 A,50',
    '1 A,0x10',
])
def test_parse_line_rejects_malformed_lines(store, line):
    assert store.parse_line(line) is None


@pytest.mark.parametrize('line,marks', [
    ('1 A,.5', 0.5),
    ('1 A, 7.', 7.0),
    ('1 A,-3e1', -30.0),
    ('1 A,+1.25E2 ', 125.0),
])
def test_parse_line_accepts_decimal_and_exponent_marks(store, line, marks):
    assert store.parse_line(line).marks == marks


def test_load_skips_non_finite_marks_so_topper_holds(store, tmp_path):
    path = tmp_path / 'odd.txt'
    path.write_text('1 A,nan\n2 B,90\n3 C,1_5\n4 D,inf\n')

    result = store.load_with_report(str(path))
    top = store.topper(result.students)

    assert result.students == [StudentRecord(2, 'B', 90.0)]
    assert result.skipped_lines == [1, 3, 4]
    assert all(top.marks >= s.marks for s in result.students)


def test_load_missing_file_gives_empty_list(store):
    assert store.load() == []


def test_load_skips_malformed_lines_and_reports_them(store, tmp_path):
    path = tmp_path / 'mixed.txt'
    path.write_text('1 Alice,88.5\ngarbage line\n\n2 Bob,92\n3 Cara;91\n')

    result = store.load_with_report(str(path))

    assert [s.roll_no for s in result.students] == [1, 2]
    assert result.students[1].marks == 92.0
    assert result.skipped_lines == [2, 5]
    assert result.skipped_count == 2
    assert store.load(str(path)) == result.students


def test_load_directory_raises_storage_error(store, tmp_path):
    with pytest.raises(StorageIOError):
        store.load(str(tmp_path))


def test_save_then_load_round_trips_file_content(store, tmp_path):
    original = '1 Alice,88.5\n2 Bob Smith,92.0\n3 Cara,70.25\n'
    source = tmp_path / 'source.txt'
    source.write_text(original)

    destination = tmp_path / 'copy.txt'
    store.save(store.load(str(source)), str(destination))

    assert destination.read_text() == original


def test_save_overwrites_existing_file(store, students, tmp_path):
    store.save(students)
    store.save(students[:1])
    assert (tmp_path / 'students.txt').read_text() == '1 Alice,88.5\n'


def test_save_to_directory_raises_storage_error(store, students, tmp_path):
    with pytest.raises(StorageIOError):
        store.save(students, str(tmp_path))


def test_format_marks_always_has_decimal_point():
    assert format_marks(92) == '92.0'
    assert format_marks(88.5) == '88.5'


# ---------------------------------------------------------------------------
# Display rows
# ---------------------------------------------------------------------------

def test_display_all_rows_are_fixed_width(store, students):
    rows = store.display_all(students)

    assert rows.header_lines() == ['Roll No'.rjust(10) + 'Name'.rjust(20) + 'Marks'.rjust(9), '-' * 40]
    assert list(rows)[0] == '1'.rjust(10) + 'Alice'.rjust(20) + '88.5'.rjust(10)
    assert list(rows)[1] == '2'.rjust(10) + 'Bob'.rjust(20) + '92'.rjust(10)


def test_display_all_is_restartable_and_follows_the_list(store, students):
    rows = store.display_all(students)
    assert list(rows) == list(rows)
    assert len(rows) == 3

    store.add(students, 4, 'Dan', 50)
    assert len(list(rows)) == 4


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def test_topper_takes_first_of_tied_students(store, students):
    assert store.topper(students).roll_no == 2


def test_topper_is_member_with_highest_marks(store, students):
    top = store.topper(students)
    assert top in students
    assert all(top.marks >= s.marks for s in students)


def test_average_of_scenario(store, students):
    assert store.average(students) == pytest.approx(90.8333333)


@pytest.mark.parametrize('count', [1, 2, 7])
def test_average_of_identical_marks_is_that_mark(store, count):
    same = [StudentRecord(i, f'Student {i}', 64.25) for i in range(count)]
    assert store.average(same) == pytest.approx(64.25)


def test_aggregates_on_empty_list_raise(store):
    with pytest.raises(EmptyCollectionError):
        store.topper([])
    with pytest.raises(EmptyCollectionError):
        store.average([])


# ---------------------------------------------------------------------------
# Sorting and search
# ---------------------------------------------------------------------------

def test_sort_by_marks_descending_puts_alice_last(store, students):
    store.sort_by_marks_descending(students)
    assert [s.roll_no for s in students] == [2, 3, 1]


def test_sort_is_idempotent_for_distinct_marks(store):
    students = [StudentRecord(1, 'A', 50), StudentRecord(2, 'B', 75), StudentRecord(3, 'C', 60)]
    store.sort_by_marks_descending(students)
    first = list(students)
    store.sort_by_marks_descending(students)
    assert students == first
    assert [s.marks for s in students] == [75, 60, 50]


def test_search_is_case_sensitive_substring(store, students):
    matches = store.search_by_name(students, 'a')
    assert [s.name for s in matches] == ['Alice', 'Cara']


def test_search_without_match_is_empty(store, students):
    assert store.search_by_name(students, 'zed') == []


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

def test_export_csv_keeps_list_order(store, students, tmp_path):
    path = store.export_csv(students)

    assert path == str(tmp_path / 'exported_students.csv')
    assert (tmp_path / 'exported_students.csv').read_text() == (
        'Roll No,Name,Marks\n'
        '1,Alice,88.5\n'
        '2,Bob,92.0\n'
        '3,Cara,92.0\n'
    )


def test_export_csv_creates_missing_folder(store, students, tmp_path):
    destination = tmp_path / 'exports' / 'out.csv'
    store.export_csv(students, str(destination))
    assert destination.read_text().startswith('Roll No,Name,Marks\n')


def test_export_csv_does_not_quote_commas(store, tmp_path):
    store.export_csv([StudentRecord(5, 'Doe, Jane', 40.0)])
    lines = (tmp_path / 'exported_students.csv').read_text().splitlines()
    assert lines[1] == '5,Doe, Jane,40.0'


# ---------------------------------------------------------------------------
# Add and remove
# ---------------------------------------------------------------------------

def test_add_appends_and_coerces_types(store, students):
    student = store.add(students, '4', 'Dan', '75')
    assert students[-1] is student
    assert student == StudentRecord(4, 'Dan', 75.0)


def test_remove_returns_count_then_zero(store, students):
    assert store.remove(students, 2) == 1
    assert [s.roll_no for s in students] == [1, 3]
    assert store.remove(students, 2) == 0


def test_remove_takes_all_duplicates(store, students):
    store.add(students, 1, 'Alice Again', 10)
    assert store.remove(students, 1) == 2
    assert [s.roll_no for s in students] == [2, 3]


def test_remove_absent_roll_is_idempotent(store, students):
    assert store.remove(students, 99) == 0
    assert store.remove(students, 99) == 0
    assert len(students) == 3


@pytest.mark.parametrize('name,valid', [
    ('Alice', True),
    ('Mary Ann', True),
    ('Doe, Jane', False),
    ('line\nbreak', False),
    ('   ', False),
    ('', False),
])
def test_is_valid_name(name, valid):
    assert RecordStore.is_valid_name(name) is valid


@pytest.mark.parametrize('marks,valid', [
    (88.5, True),
    (-4.0, True),
    (float('nan'), False),
    (float('inf'), False),
    (float('-inf'), False),
])
def test_is_valid_marks(marks, valid):
    assert RecordStore.is_valid_marks(marks) is valid
