# File: entigen/creator.py
"""
Entigen - Entity Assembler (Orchestrator)
==========================================

Connects every phase of entity creation:

    Parsed model → Checks → Bare entities → Fields → Relationships → Output

Workflow::

    1. Check mandatory inputs and storage/relationship compatibility.
    2. Build a request-scoped ``CreationContext`` (nothing survives the call).
    3. Initialise one bare ``EntityDescriptor`` per class, in input order:
       changelog date, class options, per-entity option overrides.
    4. Mark the reserved ``User`` entity for suppression.
    5. Materialise the fields of every kept entity (fields.py).
    6. Resolve all associations into placements (associations.py) and
       apply them in production order.
    7. Drop suppressed entities and return a read-only mapping.

Error handling strategy:
    - Missing inputs, incompatible storage and invalid associations raise
      before any entity is returned.
    - Illegal required flags and the reserved ``User`` entity are corrected
      and reported through the ``DiagnosticReport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from entigen.associations import AssociationResolver, Placement
from entigen.fields import materialize_fields
from entigen.models import (
    ClassNode,
    DatabaseType,
    EntityDescriptor,
    EntityOptions,
    ParsedModel,
)
from entigen.utils import (
    Timer,
    changelog_date,
    format_comment,
    parse_changelog_date,
    to_snake_case,
)
from entigen.validators import (
    RESERVED_USER_ENTITY,
    DiagnosticReport,
    check_mandatory_inputs,
    check_storage_compatibility,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen.creator")

USER_ENTITY: str = "user"

OptionsInput = Union[EntityOptions, Mapping[str, Any], None]


# ---------------------------------------------------------------------------
# Context & report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CreationContext:
    """Working state of a single ``create`` call."""

    model: ParsedModel
    database_type: DatabaseType
    options: EntityOptions
    prior_state: Mapping[str, str]
    base_time: datetime
    diagnostics: DiagnosticReport = field(default_factory=DiagnosticReport)
    entities: Dict[str, EntityDescriptor] = field(default_factory=dict)
    suppressed: List[str] = field(default_factory=list)


@dataclass(frozen=False, slots=True)
class CreationStepMetric:
    """Timing for a single pipeline step."""

    step_name: str = ""
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class CreationReport:
    """Everything ``EntityCreator.create()`` produced."""

    entities: Mapping[str, EntityDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )
    diagnostics: DiagnosticReport = field(default_factory=DiagnosticReport)
    suppressed: List[str] = field(default_factory=list)
    step_metrics: List[CreationStepMetric] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = [
            f"{'='*60}",
            "  Entigen — Entity Creation Report",
            f"{'='*60}",
            f"  Entities:         {len(self.entities)}",
            f"  Relationships:    "
            f"{sum(len(e.relationships) for e in self.entities.values())}",
            f"  Suppressed:       {len(self.suppressed)}",
            f"  Warnings:         {self.diagnostics.warning_count}",
            f"  Total time:       {self.total_elapsed_seconds:.3f}s",
        ]
        if self.step_metrics:
            lines.append(f"{'─'*60}")
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                lines.append(
                    f"    ✓ {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )
        if self.diagnostics.warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Warnings ({self.diagnostics.warning_count}):")
            for warning in self.diagnostics.warnings:
                lines.append(f"    ⚠ {warning.message}")
        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Changelog dates
# ---------------------------------------------------------------------------


def changelog_base_time(now: datetime, prior_state: Mapping[str, str]) -> datetime:
    """
    Starting point for fresh changelog dates.

    ``now``, unless a prior-state date is not earlier than it, in which case
    one second after the latest prior date.
    """
    base: datetime = now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)
    for name, value in prior_state.items():
        try:
            recorded: datetime = parse_changelog_date(value)
        except ValueError:
            logger.warning(
                "Ignoring malformed changelog date '%s' of entity '%s'.", value, name
            )
            continue
        if recorded >= base:
            base = recorded + timedelta(seconds=1)
    return base


def entity_changelog_date(context: CreationContext, class_node: ClassNode, index: int) -> str:
    """Stored date for known entities, else base time + ``index`` seconds."""
    recorded: Optional[str] = context.prior_state.get(class_node.name)
    if recorded:
        return recorded
    return changelog_date(context.base_time, index)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def coerce_options(options: OptionsInput) -> EntityOptions:
    """Accept an ``EntityOptions``, a plain mapping, or nothing."""
    if options is None:
        return EntityOptions()
    if isinstance(options, EntityOptions):
        return options
    return EntityOptions.model_validate(dict(options))


def apply_options(
    entity: EntityDescriptor, name: str, options: EntityOptions
) -> EntityDescriptor:
    """Override entity settings for which ``name`` is a key or a member."""
    if name in options.list_dto:
        entity.dto = options.list_dto[name]
    if name in options.list_pagination:
        entity.pagination = options.list_pagination[name]
    if name in options.list_service:
        entity.service = options.list_service[name]
    if name in options.microservice_names:
        entity.microservice_name = options.microservice_names[name]
    if name in options.search_engines:
        entity.search_engine = options.search_engines[name]
    if name in options.fluent_methods:
        entity.fluent_methods = True
    if name in options.angular_suffixes:
        entity.angular_js_suffix = options.angular_suffixes[name]
    if name in options.jpa_metamodel_filtering:
        entity.jpa_metamodel_filtering = True
    return entity


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def initialize_entities(context: CreationContext) -> None:
    """One bare descriptor per class id, in input order."""
    for index, (class_id, class_node) in enumerate(context.model.classes.items()):
        entity = EntityDescriptor(
            changelog_date=entity_changelog_date(context, class_node, index),
            dto=class_node.dto,
            pagination=class_node.pagination,
            service=class_node.service,
            microservice_name=class_node.microservice_name,
            search_engine=class_node.search_engine,
            javadoc=format_comment(class_node.comment),
            entity_table_name=to_snake_case(class_node.table_name or class_node.name),
        )
        context.entities[class_id] = apply_options(entity, class_node.name, context.options)


def mark_suppressed_entities(context: CreationContext) -> None:
    """
    The reserved ``User`` entity is already provided by the generated
    application: its own fields and relationships are dropped, while
    relationships pointing at it are kept.
    """
    if context.options.no_user_management:
        return
    for class_id, class_node in context.model.classes.items():
        if class_node.name.lower() == USER_ENTITY:
            context.diagnostics.add_warning(
                RESERVED_USER_ENTITY,
                "An Entity called 'User' was defined: 'User' is an entity created "
                "by default. All relationships toward it will be kept but all "
                "attributes and relationships from it will be disregarded.",
                {"class_id": class_id},
            )
            context.suppressed.append(class_id)


def fill_fields(context: CreationContext) -> None:
    for class_id, entity in context.entities.items():
        if class_id in context.suppressed:
            continue
        entity.fields.extend(materialize_fields(context.model, class_id))


def apply_placements(context: CreationContext, placements: List[Placement]) -> None:
    for placement in placements:
        context.entities[placement.entity_id].relationships.append(placement.relationship)


def fill_relationships(context: CreationContext) -> None:
    resolver: AssociationResolver = AssociationResolver(context.model, context.diagnostics)
    placements: List[Placement] = resolver.resolve(list(context.model.classes))
    apply_placements(context, placements)


# ---------------------------------------------------------------------------
# EntityCreator — orchestrator
# ---------------------------------------------------------------------------


class EntityCreator:
    """
    Builds the entity descriptors of a parsed model.

    Usage::

        creator = EntityCreator(options={"listDTO": {"Blog": "mapstruct"}})
        report = creator.create(model, "postgresql")
        blog = report.entities["b1"]

    The creator is reusable: every ``create`` call starts from a fresh
    context.
    """

    def __init__(
        self,
        *,
        options: OptionsInput = None,
        prior_state: Optional[Mapping[str, str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._options: EntityOptions = coerce_options(options)
        self._prior_state: Mapping[str, str] = dict(prior_state or {})
        self._clock: Callable[[], datetime] = clock or (lambda: datetime.now(timezone.utc))

    def create(
        self,
        model: Optional[ParsedModel],
        database_type: Union[DatabaseType, str, None],
    ) -> CreationReport:
        """Run the full pipeline; raises ``EntityCreationError`` subclasses."""
        report: CreationReport = CreationReport()

        with Timer("entity creation") as total:
            resolved_type: DatabaseType = check_mandatory_inputs(model, database_type)
            check_storage_compatibility(model, resolved_type)

            context: CreationContext = CreationContext(
                model=model,
                database_type=resolved_type,
                options=self._options,
                prior_state=self._prior_state,
                base_time=changelog_base_time(self._clock(), self._prior_state),
                diagnostics=report.diagnostics,
            )

            steps = (
                ("Initialise entities", initialize_entities),
                ("Suppress reserved entities", mark_suppressed_entities),
                ("Materialise fields", fill_fields),
                ("Resolve relationships", fill_relationships),
            )
            for step_name, step in steps:
                with Timer(step_name) as timer:
                    step(context)
                report.step_metrics.append(
                    CreationStepMetric(step_name=step_name, elapsed_seconds=timer.elapsed)
                )

            kept: Dict[str, EntityDescriptor] = {
                class_id: entity
                for class_id, entity in context.entities.items()
                if class_id not in context.suppressed
            }
            report.entities = MappingProxyType(kept)
            report.suppressed = list(context.suppressed)

        report.total_elapsed_seconds = total.elapsed
        logger.info(
            "Created %d entity(ies) (%d suppressed) for %s storage.",
            len(report.entities),
            len(report.suppressed),
            resolved_type.value,
        )
        return report


def create_entities(
    parsed_model: Optional[ParsedModel],
    database_type: Union[DatabaseType, str, None],
    options: OptionsInput = None,
    *,
    prior_state: Optional[Mapping[str, str]] = None,
    now: Optional[datetime] = None,
) -> Mapping[str, EntityDescriptor]:
    """
    Entity descriptors of ``parsed_model`` keyed by class id.

    ``prior_state`` maps entity names to previously recorded changelog dates;
    ``now`` pins the clock used for fresh dates.
    """
    clock: Optional[Callable[[], datetime]] = (lambda: now) if now is not None else None
    creator: EntityCreator = EntityCreator(
        options=options, prior_state=prior_state, clock=clock
    )
    return creator.create(parsed_model, database_type).entities


__all__: List[str] = [
    "CreationContext",
    "CreationReport",
    "CreationStepMetric",
    "EntityCreator",
    "create_entities",
    "changelog_base_time",
    "coerce_options",
    "apply_options",
]
