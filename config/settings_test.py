"""Settings used by the test suite: in-memory SQLite, no .env required."""

import os

os.environ.setdefault("DJANGO_SECRET_KEY", "votebot-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")

from config.settings import *  # noqa: E402,F401,F403

VOTEBOT_MANAGER_URL = ""
VOTEBOT_MANAGER_KEY = "test-manager-key"
