"""Reporters for rendering resolution outcomes."""

from bottle_wrangler.reporters.base import BaseReporter
from bottle_wrangler.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "MarkdownReporter"]
