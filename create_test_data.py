#!/usr/bin/env python3
"""
Create test data for the student record analyzer.
Writes a students.txt data file and an Excel copy suitable for upload.
"""
import random
import logging

import pandas as pd
from faker import Faker

import config
from record_store import RecordStore


def create_test_students(count=60, seed=None):
    """Create realistic student records with random marks."""
    fake = Faker('en_IN')  # Indian locale for better names
    if seed is not None:
        Faker.seed(seed)
        random.seed(seed)

    store = RecordStore()
    students = []

    for roll_no in range(1, count + 1):
        if random.choice(['Male', 'Female']) == 'Male':
            first_name = fake.first_name_male()
        else:
            first_name = fake.first_name_female()
        full_name = f"{first_name} {fake.last_name()}"

        # Marks out of 100, clustered around 70
        marks = round(min(100.0, max(0.0, random.gauss(70, 15))), 1)

        store.add(students, roll_no, full_name, marks)

    return students


def write_test_data(students, data_file=None, excel_file='students_test_data.xlsx'):
    store = RecordStore()
    data_file = store.save(students, data_file or config.STUDENT_DATA_FILE)

    df = pd.DataFrame([s.to_dict() for s in students])
    df.columns = ['Roll No', 'Name', 'Marks']
    df.to_excel(excel_file, index=False, engine='openpyxl')

    return data_file, excel_file, df


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    students = create_test_students()
    data_file, excel_file, df = write_test_data(students)

    store = RecordStore()
    top = store.topper(students)

    print(f"Test data created: '{data_file}' and '{excel_file}'")
    print(f"Total Students: {len(df)}")
    print(f"Average Marks: {store.average(students):.2f}")
    print(f"Topper: {top.roll_no} - {top.name} ({top.marks:g})")
    print(f"Marks range: {df['Marks'].min():g} - {df['Marks'].max():g}")
