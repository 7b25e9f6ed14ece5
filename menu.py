#!/usr/bin/env python3
"""
Console menu for the student record analyzer.

Reads choices and values from the user, hands them to RecordStore and
prints what comes back. Adding and removing students saves the data file.
"""
import logging

import config
from models import EmptyCollectionError, StorageIOError
from record_store import RecordStore

MENU = """
--- Student Record Analyzer ---
1. Display All Records
2. Display Topper
3. Display Average Marks
4. Sort by Marks (Descending)
5. Search by Name
6. Export to CSV
7. Add New Record
8. Remove Record by Roll No
0. Exit"""


class StudentMenu:
    def __init__(self, store=None, input_func=input, output_func=print):
        self.store = store or RecordStore()
        self.input = input_func
        self.output = output_func

    def print_rows(self, students):
        rows = self.store.display_all(students)
        for line in rows.header_lines():
            self.output(line)
        for row in rows:
            self.output(row)

    def show_topper(self, students):
        try:
            top = self.store.topper(students)
        except EmptyCollectionError:
            self.output("No student records available.")
            return
        self.output("\nTopper:")
        self.print_rows([top])

    def show_average(self, students):
        try:
            avg = self.store.average(students)
        except EmptyCollectionError:
            self.output("No student records available.")
            return
        self.output(f"\nAverage Marks: {avg:g}")

    def search(self, students):
        query = self.input("Enter name to search: ")
        matches = self.store.search_by_name(students, query)
        if matches:
            self.print_rows(matches)
        else:
            self.output("No matching student found.")

    def add(self, students):
        try:
            roll_no = int(self.input("Enter Roll No: ").strip())
            name = self.input("Enter Name: ").strip()
            marks = float(self.input("Enter Marks: ").strip())
        except ValueError:
            self.output("Invalid number entered. Student not added.")
            return

        if not RecordStore.is_valid_name(name):
            self.output("Name must not be empty or contain commas. Student not added.")
            return

        if not RecordStore.is_valid_marks(marks):
            self.output("Marks must be a finite number. Student not added.")
            return

        self.store.add(students, roll_no, name, marks)
        self.store.save(students)
        self.output("Student added.")

    def remove(self, students):
        try:
            roll_no = int(self.input("Enter Roll No to remove: ").strip())
        except ValueError:
            self.output("Invalid roll number.")
            return

        if self.store.remove(students, roll_no):
            self.store.save(students)
            self.output("Student removed.")
        else:
            self.output("Roll No not found.")

    def export(self, students):
        path = self.store.export_csv(students)
        self.output(f"Data exported to {path}")

    def run(self, students=None):
        """Loop over menu choices until the user picks 0 or input runs out."""
        if students is None:
            students = self.store.load()

        actions = {
            '1': self.print_rows,
            '2': self.show_topper,
            '3': self.show_average,
            '4': lambda s: self.print_rows(self.store.sort_by_marks_descending(s)),
            '5': self.search,
            '6': self.export,
            '7': self.add,
            '8': self.remove,
        }

        while True:
            self.output(MENU)
            try:
                choice = self.input("Enter choice: ").strip()
            except EOFError:
                break

            if choice == '0':
                self.output("Exiting...")
                break

            action = actions.get(choice)
            if action is None:
                self.output("Invalid choice!")
                continue
            try:
                action(students)
            except StorageIOError as e:
                self.output(f"Error: {e}")
            except EOFError:
                break

        return students


if __name__ == '__main__':
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.WARNING))
    StudentMenu().run()
