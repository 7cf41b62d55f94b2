# Overview: Workbook store wiring; one store per Flask app, registered on app.extensions.

from flask import Flask, current_app

from .models import ALL_TABLES
from .storage import WorkbookStore


STORE_KEY = "workbook_store"


def init_store(app: Flask) -> WorkbookStore:
    """Build the app's WorkbookStore from WORKBOOK_PATH. Does not touch the file."""
    store = WorkbookStore(app.config["WORKBOOK_PATH"], ALL_TABLES)
    app.extensions[STORE_KEY] = store
    return store


def get_store() -> WorkbookStore:
    return current_app.extensions[STORE_KEY]
