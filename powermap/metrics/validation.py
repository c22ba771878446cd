"""
powermap/metrics/validation.py — Data-quality validation of the contact store.

Audits the whole store, not one assembled graph, for problems that distort the
network view:

    missing_influence / missing_support   stakeholder without the rating (warning)
    orphaned_relationship                 endpoint is not a known stakeholder (error)
    duplicate_relationship                same unordered pair and type, both active (warning)
    missing_relationship_type             active relationships of a type that is
                                          inactive or unknown (error)

Quality score: max(0, 100 - 10·errors - 2·warnings), or 100 for an empty store.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.attributes import AttributeResolver, coerce_int
from powermap.store import AuditableContactStore

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    type: str
    message: str
    severity: str
    contact_id: int | None = None
    contact_name: str | None = None
    relationship_id: int | None = None
    duplicate_of: int | None = None
    relationship_type_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ValidationStats:
    total_contacts: int = 0
    contacts_without_influence: int = 0
    contacts_without_support: int = 0
    orphaned_relationships: int = 0
    duplicate_relationships: int = 0
    inactive_relationships: int = 0
    missing_relationship_types: int = 0


@dataclass
class ValidationReport:
    stats: ValidationStats = field(default_factory=ValidationStats)
    issues: list[ValidationIssue] = field(default_factory=list)
    error: str | None = None

    @property
    def critical_issues(self) -> int:
        return sum(1 for i in self.issues if i.severity == "error")

    @property
    def data_quality_score(self) -> float:
        if self.stats.total_contacts == 0:
            return 100.0
        warnings = len(self.issues) - self.critical_issues
        return round(max(0.0, 100.0 - (self.critical_issues * 10 + warnings * 2)), 1)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "validation_stats": asdict(self.stats),
            "issues": [i.to_dict() for i in self.issues],
            "total_issues": len(self.issues),
            "critical_issues": self.critical_issues,
            "data_quality_score": self.data_quality_score,
            "validation_date": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "recommendations": recommendations(self.stats),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


def validate_store(
    store: AuditableContactStore,
    resolver: AttributeResolver | None = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> ValidationReport:
    """
    Run every data-quality check against the store.

    A store failure is recorded on report.error with whatever stats had been
    gathered; it is never raised.
    """
    resolver = resolver or AttributeResolver(store)
    report = ValidationReport()

    try:
        known_ids = _check_stakeholders(store, resolver, config, report)
        _check_relationships(store, known_ids, report)
    except Exception as exc:
        logger.warning("Data validation aborted, store unavailable: %s", exc)
        report.issues = []
        report.error = str(exc)
        return report

    logger.info(
        "Validation complete: %d issues (%d critical), quality score %.1f.",
        len(report.issues),
        report.critical_issues,
        report.data_quality_score,
    )
    return report


def _check_stakeholders(
    store: AuditableContactStore,
    resolver: AttributeResolver,
    config: PowerMapConfig,
    report: ValidationReport,
) -> set[int | None]:
    """Missing-rating checks; returns the ids of every known stakeholder."""
    influence_loc = resolver.locator(config.influence_attribute)
    support_loc = resolver.locator(config.support_attribute)
    locators = [loc for loc in (influence_loc, support_loc) if loc is not None]

    entities = store.all_entities(locators)
    report.stats.total_contacts = len(entities)

    # Undefined attributes are a schema problem, not a per-contact one.
    checks = []
    if influence_loc is not None:
        checks.append((config.influence_attribute, "missing_influence",
                       "contacts_without_influence", "Missing influence level"))
    if support_loc is not None:
        checks.append((config.support_attribute, "missing_support",
                       "contacts_without_support", "Missing support level"))

    for entity in entities:
        for attribute, issue_type, counter, message in checks:
            if resolver.extract(entity, attribute) is not None:
                continue
            setattr(report.stats, counter, getattr(report.stats, counter) + 1)
            report.issues.append(
                ValidationIssue(
                    type=issue_type,
                    message=message,
                    severity="warning",
                    contact_id=coerce_int(entity.get("id")),
                    contact_name=entity.get("display_name"),
                )
            )
    return {coerce_int(e.get("id")) for e in entities}


def _check_relationships(
    store: AuditableContactStore,
    known_ids: set[int | None],
    report: ValidationReport,
) -> None:
    seen: dict[tuple, int] = {}
    active_types: list[int] = []

    for rel in store.all_relationships():
        rel_id = coerce_int(rel.get("id"))
        source = coerce_int(rel.get("source_id"))
        target = coerce_int(rel.get("target_id"))
        type_id = coerce_int(rel.get("type_id"))

        if source not in known_ids or target not in known_ids:
            report.stats.orphaned_relationships += 1
            report.issues.append(
                ValidationIssue(
                    type="orphaned_relationship",
                    message="Relationship references missing contact(s)",
                    severity="error",
                    relationship_id=rel_id,
                )
            )

        if rel.get("is_active") is False:
            report.stats.inactive_relationships += 1
            continue

        key = (frozenset((source, target)), type_id)
        if key in seen:
            report.stats.duplicate_relationships += 1
            report.issues.append(
                ValidationIssue(
                    type="duplicate_relationship",
                    message="Duplicate relationship found",
                    severity="warning",
                    relationship_id=rel_id,
                    duplicate_of=seen[key],
                )
            )
        else:
            seen[key] = rel_id
        if type_id is not None and type_id not in active_types:
            active_types.append(type_id)

    if not active_types:
        return

    defined = {coerce_int(t.get("id")) for t in store.list_relationship_types()}
    for type_id in active_types:
        if type_id in defined:
            continue
        report.stats.missing_relationship_types += 1
        report.issues.append(
            ValidationIssue(
                type="missing_relationship_type",
                message="Relationship type is inactive or not found",
                severity="error",
                relationship_type_id=type_id,
            )
        )


def recommendations(stats: ValidationStats) -> list[dict[str, str]]:
    """Follow-up actions derived from the validation counters."""
    recs: list[dict[str, str]] = []
    if stats.contacts_without_influence:
        recs.append({
            "type": "missing_data",
            "priority": "medium",
            "message": f"Set influence levels for {stats.contacts_without_influence} "
                       "contacts to improve network analysis accuracy",
        })
    if stats.contacts_without_support:
        recs.append({
            "type": "missing_data",
            "priority": "medium",
            "message": f"Set support levels for {stats.contacts_without_support} "
                       "contacts to improve stakeholder mapping",
        })
    if stats.orphaned_relationships:
        recs.append({
            "type": "data_cleanup",
            "priority": "high",
            "message": f"Clean up {stats.orphaned_relationships} orphaned relationships "
                       "to prevent visualization errors",
        })
    if stats.duplicate_relationships:
        recs.append({
            "type": "data_cleanup",
            "priority": "medium",
            "message": f"Remove {stats.duplicate_relationships} duplicate relationships "
                       "to avoid network distortion",
        })
    if stats.missing_relationship_types:
        recs.append({
            "type": "configuration",
            "priority": "high",
            "message": f"Fix {stats.missing_relationship_types} missing or inactive "
                       "relationship types",
        })
    return recs
