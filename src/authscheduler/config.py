"""Scheduler configuration.

Every option the engine recognises is listed on SchedulerConfig and validated
once when the config is constructed. A JSON file can override any subset of
the defaults::

    {
        "categories": [{"code": "97153", "label": "RBT", "description": "..."}],
        "locations": ["Home", "Community", "Telehealth"],
        "units_per_hour": 4,
        "weeks_in_period": 26,
        "compliance": {"max_weekly_hours": 40, "min_ratio_percent": 5}
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from authscheduler.domain.exceptions import ConfigurationError
from authscheduler.domain.models import Location, ServiceCatalog, ServiceCategory
from authscheduler.domain.policies import (
    DEFAULT_UNITS_PER_HOUR,
    DEFAULT_WEEKS_IN_PERIOD,
    CompliancePolicy,
    DefaultUnitPolicy,
)

logger = logging.getLogger(__name__)


@dataclass
class SchedulerConfig:
    """Complete configuration for a scheduling session.

    Attributes:
        catalog: Service categories and locations.
        compliance: Thresholds for the compliance rules.
        units_per_hour: Billing units per hour (15-minute units = 4).
        weeks_in_period: Authorization period length used for projections.
    """

    catalog: ServiceCatalog = field(default_factory=ServiceCatalog.create_default)
    compliance: CompliancePolicy = field(default_factory=CompliancePolicy)
    units_per_hour: int = DEFAULT_UNITS_PER_HOUR
    weeks_in_period: int = DEFAULT_WEEKS_IN_PERIOD

    def __post_init__(self):
        if not _positive_int(self.units_per_hour):
            raise ConfigurationError(
                f"units_per_hour must be a positive integer, got {self.units_per_hour!r}"
            )
        if not _positive_int(self.weeks_in_period):
            raise ConfigurationError(
                f"weeks_in_period must be a positive integer, got {self.weeks_in_period!r}"
            )

        referenced = (
            self.compliance.primary_categories
            + self.compliance.companion_categories
            + self.compliance.ratio_numerator_categories
            + self.compliance.ratio_denominator_categories
        )
        unknown = sorted({c for c in referenced if not self.catalog.has_category(c)})
        if unknown:
            # Not fatal: the affected rules simply do not apply.
            logger.warning("Compliance rules reference unconfigured categories: %s", unknown)

    @property
    def unit_policy(self) -> DefaultUnitPolicy:
        return DefaultUnitPolicy(units=self.units_per_hour)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchedulerConfig":
        """Build a config from plain data, falling back to defaults.

        Raises:
            ConfigurationError: If any section has the wrong shape or value.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        default_catalog = ServiceCatalog.create_default()
        categories = default_catalog.categories
        if "categories" in data:
            categories = tuple(
                _parse_category(c) for c in _section(data, "categories", list)
            )
        locations = default_catalog.locations
        if "locations" in data:
            locations = tuple(
                _parse_location(name) for name in _section(data, "locations", list)
            )

        compliance_data = _section(data, "compliance", dict) if "compliance" in data else {}
        known = {f.name for f in fields(CompliancePolicy)}
        extra = set(compliance_data) - known
        if extra:
            raise ConfigurationError(f"Unknown compliance options: {sorted(extra)}")

        return cls(
            catalog=ServiceCatalog(categories=categories, locations=locations),
            compliance=CompliancePolicy(**compliance_data),
            units_per_hour=data.get("units_per_hour", DEFAULT_UNITS_PER_HOUR),
            weeks_in_period=data.get("weeks_in_period", DEFAULT_WEEKS_IN_PERIOD),
        )


def _section(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data[key]
    if not isinstance(value, kind):
        expected = "a list" if kind is list else "an object"
        raise ConfigurationError(f"'{key}' must be {expected}, got {value!r}")
    return value


def _parse_location(entry: Any) -> Location:
    if not isinstance(entry, str) or not entry.strip():
        raise ConfigurationError(f"Invalid location entry: {entry!r}")
    return Location(entry)


def _parse_category(entry: Union[str, dict[str, Any]]) -> ServiceCategory:
    if isinstance(entry, str):
        return ServiceCategory(code=entry)
    if not isinstance(entry, dict) or "code" not in entry:
        raise ConfigurationError(f"Invalid category entry: {entry!r}")
    return ServiceCategory(
        code=str(entry["code"]),
        label=str(entry.get("label", "")),
        description=str(entry.get("description", "")),
    )


def load_config(path: Union[str, Path]) -> SchedulerConfig:
    """Load a SchedulerConfig from a JSON file.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or invalid.
    """
    try:
        data = json.loads(Path(path).read_text())
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
    return SchedulerConfig.from_dict(data)


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
