"""Application entrypoints for Sticky Notes."""

from .main import build_placement, parse_args, run, run_cli

__all__ = ["build_placement", "parse_args", "run", "run_cli"]
