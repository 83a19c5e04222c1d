"""Compliance validation for weekly service schedules."""

from authscheduler.validation.validator import (
    ComplianceResult,
    ComplianceRule,
    ComplianceSeverity,
    ComplianceValidator,
    ComplianceWarning,
    RatioRule,
    RequiredCompanionRule,
    TotalHoursCeilingRule,
)

__all__ = [
    "ComplianceResult",
    "ComplianceRule",
    "ComplianceSeverity",
    "ComplianceValidator",
    "ComplianceWarning",
    "RatioRule",
    "RequiredCompanionRule",
    "TotalHoursCeilingRule",
]
