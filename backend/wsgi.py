# backend/wsgi.py
# gunicorn: gunicorn wsgi:app --bind 0.0.0.0:$PORT --workers 1
# One worker only: the workbook has no cross-process locking.
from app import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["PORT"])
