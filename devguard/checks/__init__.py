"""Core check modules: secrets, env and git health."""

from .env import EnvCheck
from .git_health import GitHealthCheck
from .secrets import SecretsCheck

__all__ = [
    "SecretsCheck",
    "EnvCheck",
    "GitHealthCheck",
]
