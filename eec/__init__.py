"""Run programs with environment variables from a TOML config, with saved tags and temp-file cleanup."""

__version__ = "0.1.dev0"

__all__ = ["__version__"]