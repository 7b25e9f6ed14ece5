import pandas as pd

from create_test_data import create_test_students, write_test_data
from record_store import RecordStore


def test_create_test_students_has_sequential_rolls_and_valid_marks():
    students = create_test_students(count=25, seed=7)

    assert [s.roll_no for s in students] == list(range(1, 26))
    assert all(0.0 <= s.marks <= 100.0 for s in students)
    assert all(RecordStore.is_valid_name(s.name) for s in students)


def test_write_test_data_round_trips(tmp_path):
    students = create_test_students(count=10, seed=3)

    data_file, excel_file, df = write_test_data(
        students,
        data_file=str(tmp_path / 'students.txt'),
        excel_file=str(tmp_path / 'students.xlsx'),
    )

    assert RecordStore().load(data_file) == students
    assert list(pd.read_excel(excel_file).columns) == ['Roll No', 'Name', 'Marks']
    assert len(df) == 10
