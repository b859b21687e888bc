from envbind.utils.env import env_flag, parse_bool, resolve_environ
from envbind.utils.logging import setup_logging
from envbind.utils.text import expand_vars

__all__ = [
    "env_flag",
    "parse_bool",
    "resolve_environ",
    "setup_logging",
    "expand_vars",
]
