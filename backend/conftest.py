# Ensure 'backend/' is on sys.path so 'import tutorbook.*' works
# even when pytest rootdir is the repository root.
import os
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent  # <repo>/backend
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

# Settings are read at import time; keep tests off any developer database or Redis
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)
