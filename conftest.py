"""Global pytest configuration."""

import os

# Point settings at a fake host before any imports
os.environ.setdefault("API_BASE_URL", "http://portal.test")
