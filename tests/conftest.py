"""Required settings for importing the app under test; real values from the environment win."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-not-for-production")
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("SESSION_SWEEP_ENABLED", "false")
