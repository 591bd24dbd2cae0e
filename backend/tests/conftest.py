from __future__ import annotations

import os

# Keep app startup (create_all) away from the on-disk default database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPIK_ENABLED", "false")
