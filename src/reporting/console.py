"""Console output: the line/row sink and the table and list reporters."""
from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

from constants import Constants, NotFoundTier
from versioning.models import CheckPolicy, CheckResult

_COLORS = {
    "red": "31",
    "green": "32",
    "yellow": "33",
}

NOT_FOUND_MESSAGES = {
    NotFoundTier.LOCAL: "package not found",
    NotFoundTier.GLOBAL_CONSTRAINED: "global package not found (constrained)",
    NotFoundTier.GLOBAL_UNCONSTRAINED: "global package not found (un-constrained)",
}


class OutputSink:
    """Where report lines go."""

    def write_line(self, text: str) -> None:
        raise NotImplementedError

    def write_row(self, cells: Sequence[str]) -> None:
        self.write_line(format_row(cells))

    def is_verbose(self) -> bool:
        return False


class ConsoleSink(OutputSink):
    """Writes to a text stream, stdout by default."""

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False, quiet: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.verbose = verbose
        self.quiet = quiet

    def write_line(self, text: str) -> None:
        if self.quiet:
            return
        self.stream.write(text + "\n")

    def is_verbose(self) -> bool:
        return self.verbose


def format_row(cells: Sequence[str]) -> str:
    """``%-30s | %-10s | %-10s | %-10s | %-10s`` with the name cut to 30 characters."""
    name, *versions = cells
    width = Constants.VERSION_COLUMN_WIDTH
    parts = [f"{name[:Constants.NAME_COLUMN_WIDTH]:<{Constants.NAME_COLUMN_WIDTH}}"]
    parts.extend(f"{v:<{width}}" for v in versions)
    return " | ".join(parts)


def colorize(text: str, color: str, enabled: bool, width: int = 0) -> str:
    padded = f"{text:<{width}}" if width else text
    if not enabled:
        return padded
    return f"\033[{_COLORS[color]}m{padded}\033[0m"


def should_report(result: CheckResult, policy: CheckPolicy, verbose: bool) -> bool:
    """Whether a result produces any output under ``policy``."""
    if result.error or result.not_found:
        return True
    c = result.classification
    if c.update_available or c.upgrade_available:
        return True
    if c.anomalous:
        return policy.report_anomalies
    return policy.always_report_up_to_date or verbose


class Reporter:
    """Base reporter: not-found and error lines are shared by both styles."""

    def __init__(self, sink: OutputSink, policy: CheckPolicy = CheckPolicy(), color: bool = False):
        self.sink = sink
        self.policy = policy
        self.color = color

    def start(self) -> None:
        self.sink.write_line("")
        self.sink.write_line("Checking for available updates")

    def finish(self) -> None:
        self.sink.write_line("")

    def _marker(self) -> str:
        return colorize("!!!", "red", self.color)

    def report(self, result: CheckResult) -> None:
        if not should_report(result, self.policy, self.sink.is_verbose()):
            return
        if result.error:
            self.sink.write_line(f'{self._marker()} {result.name} invalid constraint "{result.required}": {result.error}')
            return
        if result.not_found:
            self.sink.write_line(f"{self._marker()} {result.name} {NOT_FOUND_MESSAGES[result.not_found]}")
            return
        self.report_classified(result)

    def report_classified(self, result: CheckResult) -> None:
        raise NotImplementedError

    def _anomaly_line(self, result: CheckResult) -> str:
        return (
            f"{result.name}: installed {result.current_display} is newer than "
            f"{result.constrained_display} found in the configured repositories"
        )


class TableReporter(Reporter):
    """Fixed-width table, one row per reported requirement."""

    def start(self) -> None:
        super().start()
        rule = "-" * Constants.TABLE_WIDTH
        self.sink.write_line(rule)
        self.sink.write_row(["Package", "Require", "Current", "Update", "Latest"])
        self.sink.write_line(rule)

    def report_classified(self, result: CheckResult) -> None:
        c = result.classification
        width = Constants.VERSION_COLUMN_WIDTH
        # green when the cell shows the installed version
        same_as_current = not (c.update_available or c.anomalous)
        update = colorize(result.constrained_display, "green" if same_as_current else "red", self.color, width)
        latest = colorize(result.latest_display, "green" if c.up_to_date else "red", self.color, width)
        self.sink.write_row([result.name, result.required, result.current_display, update, latest])
        if c.anomalous and self.policy.report_anomalies:
            self.sink.write_line(colorize("(!) ", "yellow", self.color) + self._anomaly_line(result))


class ListReporter(Reporter):
    """Advisory lines, one per finding."""

    def report_classified(self, result: CheckResult) -> None:
        c = result.classification
        if c.update_available:
            self.sink.write_line(
                f"{result.name}: update available {result.current_display} => "
                f"{result.constrained_display} (within {result.required})"
            )
        if c.upgrade_available:
            self.sink.write_line(
                f"{result.name}: upgrade available {result.constrained_display} => "
                f"{result.latest_display} (requires changing {result.required})"
            )
        if c.anomalous and self.policy.report_anomalies:
            self.sink.write_line(self._anomaly_line(result))
        if c.up_to_date:
            self.sink.write_line(f"{result.name}: up to date ({result.current_display})")


def create_reporter(style: str, sink: OutputSink, policy: CheckPolicy, color: bool = False) -> Reporter:
    if style == "list":
        return ListReporter(sink, policy, color)
    return TableReporter(sink, policy, color)
