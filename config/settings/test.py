"""
Test settings: in-memory SQLite, fast hashing.
An exported DATABASE_URL wins over the SQLite default; point it at PostgreSQL
to run the row-lock race tests in exams/test_attempts.py (skipped on SQLite).
"""
import os

os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')

from .base import *

DEBUG = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING['root']['level'] = 'WARNING'
