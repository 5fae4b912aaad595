"""Report generation module."""

from taratree.output.json_report import JsonReporter

__all__ = ["JsonReporter"]
