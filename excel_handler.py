import pandas as pd
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.workbook import Workbook
import os
import logging
from datetime import datetime
from typing import Optional, List

import config
from models import StudentRecord, StorageIOError


class ExcelHandler:
    def __init__(self, export_folder: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.export_folder = export_folder or config.EXPORT_FOLDER

    def read_student_data(self, filepath: str) -> Optional[List[StudentRecord]]:
        """
        Read student records from an Excel (or CSV) file.
        Expected columns: Roll No, Name, Marks
        """
        try:
            if filepath.lower().endswith('.csv'):
                df = pd.read_csv(filepath)
            else:
                df = pd.read_excel(filepath)

            # Normalize column names (handle case variations and spaces)
            df.columns = df.columns.astype(str).str.strip().str.lower().str.replace(' ', '_')

            column_mappings = {
                'roll_no': ['roll_no', 'roll', 'rollno', 'roll_number', 'student_id'],
                'name': ['name', 'student_name', 'full_name'],
                'marks': ['marks', 'score', 'total', 'percentage']
            }

            mapped_columns = {}
            for expected_col, possible_names in column_mappings.items():
                for possible_name in possible_names:
                    if possible_name in df.columns:
                        mapped_columns[expected_col] = possible_name
                        break

            missing_columns = [col for col in column_mappings if col not in mapped_columns]
            if missing_columns:
                self.logger.error(f"Missing columns: {missing_columns}")
                return None

            result_df = pd.DataFrame()
            for standard_name, original_name in mapped_columns.items():
                result_df[standard_name] = df[original_name]

            result_df = self._clean_student_data(result_df)

            return [
                StudentRecord(roll_no=int(row.roll_no), name=row.name, marks=float(row.marks))
                for row in result_df.itertuples(index=False)
            ]

        except Exception as e:
            self.logger.error(f"Error reading student file: {str(e)}")
            return None

    def _clean_student_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Drop rows that cannot become a student record.
        """
        original_count = len(df)

        df = df.dropna(subset=['roll_no', 'name', 'marks']).copy()

        df['roll_no'] = pd.to_numeric(df['roll_no'], errors='coerce')
        df['marks'] = pd.to_numeric(df['marks'], errors='coerce')
        df = df.dropna(subset=['roll_no', 'marks'])
        df = df[~df['marks'].isin([float('inf'), float('-inf')])]

        # Roll numbers must be whole numbers
        df = df[df['roll_no'] == df['roll_no'].round()].copy()

        df['name'] = df['name'].astype(str).str.strip()
        # Names are written to a comma-delimited file
        df = df[(df['name'] != '') & ~df['name'].str.contains(r'[,\r\n]', regex=True)]

        dropped = original_count - len(df)
        if dropped:
            self.logger.warning(f"Dropped {dropped} rows with missing or invalid data")

        return df

    def export_students_workbook(self, students: List[StudentRecord], filename: Optional[str] = None) -> str:
        """
        Export student records to a formatted Excel report with a summary block.
        """
        try:
            wb = Workbook()
            ws = wb.active
            ws.title = "Student Records"

            header_font = Font(bold=True, size=12, color="FFFFFF")
            header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
            topper_fill = PatternFill(start_color="D9EAD3", end_color="D9EAD3", fill_type="solid")
            border = Border(
                left=Side(style='thin'),
                right=Side(style='thin'),
                top=Side(style='thin'),
                bottom=Side(style='thin')
            )
            center_alignment = Alignment(horizontal='center', vertical='center')

            ws['A1'] = "Student Record Report"
            ws['A1'].font = Font(bold=True, size=14)
            ws.merge_cells('A1:C1')

            ws['A2'] = f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
            ws['A2'].font = Font(size=10, italic=True)
            ws.merge_cells('A2:C2')

            headers = ['Roll No', 'Name', 'Marks']
            for col, header in enumerate(headers, 1):
                cell = ws.cell(row=4, column=col, value=header)
                cell.font = header_font
                cell.fill = header_fill
                cell.border = border
                cell.alignment = center_alignment

            topper = max(students, key=lambda s: s.marks) if students else None

            row_num = 5
            for student in students:
                row_data = [student.roll_no, student.name, student.marks]
                for col, value in enumerate(row_data, 1):
                    cell = ws.cell(row=row_num, column=col, value=value)
                    cell.border = border
                    if col != 2:
                        cell.alignment = center_alignment
                    if student is topper:
                        cell.fill = topper_fill
                row_num += 1

            # Summary
            summary_row = row_num + 1
            ws.cell(row=summary_row, column=1, value="Summary:").font = Font(bold=True)

            stats = [f"Total Students: {len(students)}"]
            if students:
                marks = [s.marks for s in students]
                stats += [
                    f"Average Marks: {round(sum(marks) / len(marks), 2)}",
                    f"Topper: {topper.roll_no} - {topper.name} ({topper.marks:g})",
                    f"Highest Marks: {max(marks):g}",
                    f"Lowest Marks: {min(marks):g}"
                ]

            for offset, stat in enumerate(stats, 1):
                ws.cell(row=summary_row + offset, column=1, value=stat)

            # Auto-adjust column widths (summary lines overflow, skip them)
            for col_idx in range(1, 4):
                max_length = 0
                column_letter = get_column_letter(col_idx)
                for row_idx in range(4, row_num):
                    cell = ws.cell(row=row_idx, column=col_idx)
                    if cell.value is not None:
                        max_length = max(max_length, len(str(cell.value)))
                ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

            if not filename:
                filename = f"students_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
            os.makedirs(self.export_folder, exist_ok=True)
            filepath = os.path.join(self.export_folder, filename)
            wb.save(filepath)

        except OSError as e:
            self.logger.error(f"Error exporting student workbook: {str(e)}")
            raise StorageIOError(f"Could not write student workbook: {e}") from e

        self.logger.info(f"Exported {len(students)} students to {filepath}")
        return filepath
