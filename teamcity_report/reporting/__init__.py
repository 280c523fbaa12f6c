"""TeamCity reporting: value escaping and service message formatting."""

from teamcity_report.reporting.escaper import escape
from teamcity_report.reporting.formatter import format_suite, format_test, service_message

__all__ = [
    "escape",
    "format_suite",
    "format_test",
    "service_message",
]
