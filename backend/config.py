"""
Forkboard Configuration Constants
"""

import os

# GitHub API
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "10"))

# Fork graph limits
FORKS_PER_PAGE = 20
MAX_FORK_DEPTH = int(os.environ.get("FORK_MAX_DEPTH", "2"))
MAX_CONCURRENT_REQUESTS = 10
RESOLUTION_DEADLINE = float(os.environ.get("RESOLUTION_DEADLINE", "25"))

# Repo listing
MAX_REPOS = 100


class ConfigError(Exception):
    """Raised when required configuration is missing."""


def get_github_token():
    """Read the GitHub token at call time so tests can patch the environment."""
    return os.environ.get("GITHUB_TOKEN", "")


def validate_config():
    """Check required settings once before the server accepts requests."""
    if not get_github_token():
        raise ConfigError("GitHub token not configured")
