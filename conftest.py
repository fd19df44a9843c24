"""
Root pytest configuration.

Loaded before test collection so the settings module finds the
environment it needs when leadflow is first imported.
"""

import os

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")
