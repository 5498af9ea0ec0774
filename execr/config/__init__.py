"""Module de configuration."""

from execr.config.options_loader import ExecOptionsLoader, read_config_file

__all__ = [
    "ExecOptionsLoader",
    "read_config_file",
]
