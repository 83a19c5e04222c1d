"""Compliance validation for weekly service schedules.

This module evaluates a WeeklySummary against payer-style business rules and
produces advisory warnings. Validation never blocks a schedule mutation; it
only annotates the current state for display. Every rule runs on every
evaluation so callers always see the complete warning set.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from authscheduler.domain.models import ServiceCatalog
from authscheduler.domain.policies import CompliancePolicy
from authscheduler.scheduling.aggregation import WeeklySummary

logger = logging.getLogger(__name__)


class ComplianceSeverity(Enum):
    """Severity of a compliance finding."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ComplianceWarning:
    """A single compliance finding."""

    severity: ComplianceSeverity
    message: str
    rule: str = ""
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message}"


@dataclass
class ComplianceResult:
    """Result of evaluating a schedule's compliance rules."""

    warnings: list[ComplianceWarning] = field(default_factory=list)

    def add(self, warning: ComplianceWarning) -> None:
        self.warnings.append(warning)

    @property
    def errors(self) -> list[ComplianceWarning]:
        return self.by_severity(ComplianceSeverity.ERROR)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_all_clear(self) -> bool:
        return all(w.severity == ComplianceSeverity.INFO for w in self.warnings)

    def by_severity(self, severity: ComplianceSeverity) -> list[ComplianceWarning]:
        return [w for w in self.warnings if w.severity == severity]

    def for_rule(self, rule: str) -> list[ComplianceWarning]:
        return [w for w in self.warnings if w.rule == rule]


class ComplianceRule(ABC):
    """Abstract base class for a compliance rule."""

    name: str = ""

    @abstractmethod
    def evaluate(
        self,
        summary: WeeklySummary,
        catalog: ServiceCatalog,
    ) -> list[ComplianceWarning]:
        """Return findings for the summary (empty if the rule is satisfied)."""
        pass

    @staticmethod
    def _configured(catalog: ServiceCatalog, codes: Sequence[str]) -> bool:
        missing = [code for code in codes if not catalog.has_category(code)]
        if missing or not codes:
            logger.warning(
                "Compliance rule references unconfigured categories %s; skipping",
                missing or "(none given)",
            )
            return False
        return True


@dataclass
class TotalHoursCeilingRule(ComplianceRule):
    """Total weekly hours must not exceed the configured maximum."""

    max_weekly_hours: float = 40.0
    name: str = "total_hours_ceiling"

    def evaluate(self, summary, catalog):
        excess = summary.total_hours - self.max_weekly_hours
        if excess <= 0:
            return []
        return [
            ComplianceWarning(
                severity=ComplianceSeverity.ERROR,
                message=(
                    f"Total weekly hours ({summary.total_hours:.1f}) exceed "
                    f"{self.max_weekly_hours:g} by {excess:.1f} (insurance red flag)"
                ),
                rule=self.name,
                details={
                    "total_hours": summary.total_hours,
                    "max_weekly_hours": self.max_weekly_hours,
                    "excess_hours": excess,
                },
            )
        ]


@dataclass
class RequiredCompanionRule(ComplianceRule):
    """Primary service hours require some companion service hours."""

    primary_categories: tuple[str, ...] = ()
    companion_categories: tuple[str, ...] = ()
    companion_label: str = ""
    name: str = "required_companion"

    def evaluate(self, summary, catalog):
        if not self._configured(catalog, self.primary_categories + self.companion_categories):
            return []

        primary_hours = summary.hours_for(self.primary_categories)
        companion_hours = summary.hours_for(self.companion_categories)
        if primary_hours <= 0 or companion_hours > 0:
            return []

        codes = " / ".join(self.companion_categories)
        label = self.companion_label or "companion service"
        return [
            ComplianceWarning(
                severity=ComplianceSeverity.WARNING,
                message=f"No {label} hours - CPT {codes} typically required",
                rule=self.name,
                details={
                    "primary_hours": primary_hours,
                    "companion_categories": list(self.companion_categories),
                },
            )
        ]


@dataclass
class RatioRule(ComplianceRule):
    """Numerator hours must be at least a percentage of denominator hours."""

    numerator_categories: tuple[str, ...] = ()
    denominator_categories: tuple[str, ...] = ()
    min_ratio_percent: float = 0.0
    label: str = ""
    name: str = "minimum_ratio"

    def evaluate(self, summary, catalog):
        if not self._configured(
            catalog, self.numerator_categories + self.denominator_categories
        ):
            return []

        denominator = summary.hours_for(self.denominator_categories)
        if denominator <= 0:
            return []

        ratio = summary.hours_for(self.numerator_categories) / denominator * 100
        if ratio >= self.min_ratio_percent:
            return []

        label = self.label or "Service"
        return [
            ComplianceWarning(
                severity=ComplianceSeverity.WARNING,
                message=(
                    f"{label} ratio below {self.min_ratio_percent:g}% minimum "
                    f"(currently {ratio:.1f}%)"
                ),
                rule=self.name,
                details={"ratio_percent": ratio, "min_ratio_percent": self.min_ratio_percent},
            )
        ]


ALL_CLEAR_RULE = "all_clear"


class ComplianceValidator:
    """Evaluates weekly summaries against the configured compliance rules.

    Example:
        >>> validator = ComplianceValidator(catalog)
        >>> result = validator.validate(summary)
        >>> for warning in result.warnings:
        ...     print(warning)
    """

    def __init__(
        self,
        catalog: Optional[ServiceCatalog] = None,
        policy: Optional[CompliancePolicy] = None,
        rules: Optional[list[ComplianceRule]] = None,
    ):
        self.catalog = catalog or ServiceCatalog.create_default()
        self.policy = policy or CompliancePolicy()
        self.rules = rules if rules is not None else self.build_rules(self.policy)

    @staticmethod
    def build_rules(policy: CompliancePolicy) -> list[ComplianceRule]:
        """The standard ordered rule list for a policy."""
        return [
            TotalHoursCeilingRule(max_weekly_hours=policy.max_weekly_hours),
            RequiredCompanionRule(
                primary_categories=policy.primary_categories,
                companion_categories=policy.companion_categories,
                companion_label=policy.companion_label,
            ),
            RatioRule(
                numerator_categories=policy.ratio_numerator_categories,
                denominator_categories=policy.ratio_denominator_categories,
                min_ratio_percent=policy.min_ratio_percent,
                label=policy.ratio_label,
            ),
        ]

    def validate(self, summary: WeeklySummary) -> ComplianceResult:
        """Run every rule and return the complete, never-empty finding list."""
        result = ComplianceResult()

        for rule in self.rules:
            try:
                findings = rule.evaluate(summary, self.catalog)
            except (KeyError, TypeError, ValueError, ZeroDivisionError) as e:
                # A misconfigured rule does not apply; the others still run.
                logger.warning("Compliance rule %s could not be evaluated: %s", rule.name, e)
                continue
            for warning in findings:
                result.add(warning)

        if not result.warnings:
            result.add(
                ComplianceWarning(
                    severity=ComplianceSeverity.INFO,
                    message="Service mix looks appropriate",
                    rule=ALL_CLEAR_RULE,
                )
            )

        return result
