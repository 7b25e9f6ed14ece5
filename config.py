import os

# Configuration
STUDENT_DATA_FILE = os.environ.get('STUDENT_DATA_FILE', 'students.txt')
STUDENT_EXPORT_FILE = os.environ.get('STUDENT_EXPORT_FILE', 'exported_students.csv')
UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads')
EXPORT_FOLDER = os.environ.get('EXPORT_FOLDER', 'exports')
ALLOWED_EXTENSIONS = {'xlsx', 'xls', 'csv'}
MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size

SESSION_SECRET = os.environ.get("SESSION_SECRET", "dev-secret-key-change-in-production")
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()
