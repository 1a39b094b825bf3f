# backend/wsgi.py
from stageops import create_app

app = create_app()
