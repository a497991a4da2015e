"""Reporters: format finished sessions for humans."""

from easyprof.application.reporters.console import ConsoleConfig, ConsoleReporter, format_size

__all__ = ["ConsoleConfig", "ConsoleReporter", "format_size"]
