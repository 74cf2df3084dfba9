"""Pytest configuration for root-level integration tests.

Adds the advisor service src directory and the shared package to sys.path, and
points the snapshot store at a throwaway SQLite file.
"""

import os
import sys
import tempfile
from pathlib import Path

SERVICES_ROOT = Path(__file__).resolve().parents[1] / "services"

SERVICE_PATHS = [
    SERVICES_ROOT / "advisor-service" / "src",
    SERVICES_ROOT,
]

for path in SERVICE_PATHS:
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

if not os.getenv("ADVISOR_DB_URL"):
    _TEST_DB_DIR = tempfile.mkdtemp(prefix="advisor-integration-")
    os.environ["ADVISOR_DB_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'advisor-integration.db'}"
