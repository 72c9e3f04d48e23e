from __future__ import annotations

import logging

from checkup.models.enums import Severity
from checkup.models.finding import Finding, Recommendation, RunSummary, Section

logger = logging.getLogger(__name__)


class FindingAggregator:
    """The run state: counters, recommendations and space totals for one run.

    Counters only ever increase.  Recommendations keep insertion order and are
    not deduplicated.  Owned by the session; not safe for concurrent use.
    """

    def __init__(self) -> None:
        self._problems = 0
        self._warnings = 0
        self._recommendations: list[Recommendation] = []
        self._findings: list[Finding] = []
        self._reclaimable = 0
        self._freed = 0

    def record(self, finding: Finding) -> None:
        self._findings.append(finding)
        if finding.severity is Severity.CRITICAL:
            self._problems += 1
        elif finding.severity is Severity.WARNING:
            self._warnings += 1
        else:
            return
        logger.debug("%s %s: %s", finding.severity.value, finding.subject, finding.message)
        if finding.recommendation:
            self._recommendations.append(Recommendation(finding.recommendation, finding.severity))

    def record_section(self, section: Section) -> None:
        for finding in section.findings:
            self.record(finding)

    def advise(self, text: str, severity: Severity = Severity.WARNING) -> None:
        """Append a recommendation without touching the counters."""
        self._recommendations.append(Recommendation(text, severity))

    def add_reclaimable(self, size_bytes: int) -> None:
        self._reclaimable += max(0, size_bytes)

    def add_freed(self, size_bytes: int) -> None:
        self._freed += max(0, size_bytes)

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(self._findings)

    def summary(self) -> RunSummary:
        return RunSummary(
            problems=self._problems,
            warnings=self._warnings,
            recommendations=tuple(self._recommendations),
            reclaimable_bytes=self._reclaimable,
            freed_bytes=self._freed,
        )
