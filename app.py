import os
import logging
from flask import Flask, request, jsonify, send_file, Response
from werkzeug.utils import secure_filename

import config
from models import EmptyCollectionError, StorageIOError
from record_store import RecordStore
from excel_handler import ExcelHandler

# Set up logging
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.DEBUG))

app = Flask(__name__)
app.secret_key = config.SESSION_SECRET

app.config['DATA_FILE'] = config.STUDENT_DATA_FILE
app.config['UPLOAD_FOLDER'] = config.UPLOAD_FOLDER
app.config['EXPORT_FOLDER'] = config.EXPORT_FOLDER
app.config['EXPORT_FILE'] = config.STUDENT_EXPORT_FILE
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH

# Ensure directories exist
os.makedirs(config.UPLOAD_FOLDER, exist_ok=True)
os.makedirs(config.EXPORT_FOLDER, exist_ok=True)

record_store = RecordStore()


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in config.ALLOWED_EXTENSIONS


def get_students():
    """Student list for this process, loaded from the data file on first use."""
    if 'STUDENT_DATA' not in app.config:
        app.config['STUDENT_DATA'] = record_store.load(app.config['DATA_FILE'])
    return app.config['STUDENT_DATA']


def save_students(students):
    record_store.save(students, app.config['DATA_FILE'])


def error_response(message, status):
    return jsonify({'error': message}), status


@app.errorhandler(EmptyCollectionError)
def handle_empty_collection(e):
    logging.warning(f"Empty collection: {str(e)}")
    return error_response(str(e), 404)


@app.errorhandler(StorageIOError)
def handle_storage_error(e):
    logging.error(f"Storage error: {str(e)}")
    return error_response(str(e), 500)


@app.route('/get_student_data')
def get_student_data():
    return jsonify([s.to_dict() for s in get_students()])


@app.route('/students/table')
def students_table():
    """All students as a fixed-width text table"""
    rows = record_store.display_all(get_students())
    lines = rows.header_lines() + list(rows)
    return Response('\n'.join(lines) + '\n', mimetype='text/plain')


@app.route('/topper')
def topper():
    student = record_store.topper(get_students())
    return jsonify(student.to_dict())


@app.route('/average')
def average():
    students = get_students()
    return jsonify({'average': record_store.average(students), 'count': len(students)})


@app.route('/sort_students', methods=['POST'])
def sort_students():
    """Sort by marks, highest first. The new order is not written to disk."""
    students = record_store.sort_by_marks_descending(get_students())
    return jsonify([s.to_dict() for s in students])


@app.route('/search')
def search():
    query = request.args.get('name', '')
    matches = record_store.search_by_name(get_students(), query)
    return jsonify({
        'query': query,
        'found': bool(matches),
        'students': [s.to_dict() for s in matches]
    })


@app.route('/add_student', methods=['POST'])
def add_student():
    roll_no = request.form.get('roll_no', '').strip()
    name = request.form.get('name', '').strip()
    marks = request.form.get('marks', '').strip()

    if not all([roll_no, name, marks]):
        return error_response('All fields are required', 400)

    if not RecordStore.is_valid_name(name):
        return error_response('Name must not contain commas or line breaks', 400)

    try:
        roll_no = int(roll_no)
        marks = float(marks)
    except ValueError:
        return error_response('Invalid number format for roll number or marks', 400)

    if not RecordStore.is_valid_marks(marks):
        return error_response('Marks must be a finite number', 400)

    students = get_students()
    student = record_store.add(students, roll_no, name, marks)
    save_students(students)

    logging.info(f"Student added: {student.roll_no} - {student.name}")
    return jsonify(student.to_dict()), 201


@app.route('/delete_student', methods=['POST'])
def delete_student():
    try:
        roll_no = int(request.form.get('roll_no', '').strip())
    except ValueError:
        return error_response('Roll number is required', 400)

    students = get_students()
    removed = record_store.remove(students, roll_no)
    if not removed:
        return error_response('Roll No not found', 404)

    save_students(students)
    return jsonify({'removed': removed})


@app.route('/export_csv', methods=['POST'])
def export_csv():
    """Export students to CSV"""
    filepath = os.path.join(app.config['EXPORT_FOLDER'], app.config['EXPORT_FILE'])
    record_store.export_csv(get_students(), filepath)
    return send_file(os.path.abspath(filepath), as_attachment=True,
                     download_name=os.path.basename(filepath), mimetype='text/csv')


@app.route('/export_students', methods=['POST'])
def export_students():
    """Export students to a formatted Excel report"""
    excel_handler = ExcelHandler(app.config['EXPORT_FOLDER'])
    filepath = excel_handler.export_students_workbook(get_students())
    return send_file(os.path.abspath(filepath), as_attachment=True,
                     download_name=os.path.basename(filepath))


@app.route('/upload_students', methods=['POST'])
def upload_students():
    """Replace the student list with the contents of an uploaded Excel/CSV file"""
    if 'file' not in request.files:
        return error_response('No file selected', 400)

    file = request.files['file']
    if not file.filename:
        return error_response('No file selected', 400)

    if not allowed_file(file.filename):
        return error_response('Invalid file type. Please upload an Excel or CSV file', 400)

    filename = secure_filename(file.filename)
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    filepath = os.path.join(app.config['UPLOAD_FOLDER'], filename)
    file.save(filepath)

    students = ExcelHandler(app.config['EXPORT_FOLDER']).read_student_data(filepath)
    if students is None:
        return error_response('Error processing file. Please check the format.', 400)

    app.config['STUDENT_DATA'] = students
    save_students(students)

    logging.info(f"Uploaded {len(students)} students from {filename}")
    return jsonify({'count': len(students)})


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=True)
