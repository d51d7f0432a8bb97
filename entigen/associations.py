# File: entigen/associations.py
"""
Entigen - Association Resolver
===============================
Derives the relationship descriptors of every entity from the directional
associations of the parsed model.

An association is stored once but yields one or two descriptors:

* the "from" pass (run for the origin class) builds the origin's
  descriptor, and for a one-to-many without an inverse field it also
  synthesizes the many-to-one descriptor of the destination;
* the "to" pass (run for the destination class) only sees associations
  that inject a field on the destination side and builds the mirror.

Resolvers never touch entity lists.  They return ``Placement`` records
(target entity id + descriptor) together with a normalized copy of the
association; the assembler applies placements in production order once the
whole pass is done.  Input associations are never mutated.

Workflow::

    resolver = AssociationResolver(model, diagnostics)
    placements = resolver.resolve(class_ids)

Complexity: O(C × A) where C = classes, A = associations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from entigen.models import (
    AssociationNode,
    ParsedModel,
    RelationshipDescriptor,
    RelationshipType,
)
from entigen.utils import (
    entity_name,
    format_comment,
    lower_first,
    to_camel_case,
    to_field_reference,
)
from entigen.validators import (
    MANY_TO_MANY_REQUIRED,
    MANY_TO_ONE_REQUIRED_MANY_SIDE,
    ONE_TO_MANY_REQUIRED_MANY_SIDE,
    ONE_TO_MANY_UNIDIRECTIONAL,
    DiagnosticReport,
    check_association_validity,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen.associations")

REQUIRED_RULE: str = "required"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Placement:
    """A descriptor destined for the relationship list of ``entity_id``."""

    entity_id: str
    relationship: RelationshipDescriptor


@dataclass(frozen=True, slots=True)
class ResolvedAssociation:
    """Outcome of resolving one side of an association."""

    association: AssociationNode
    placements: Tuple[Placement, ...] = ()


@dataclass(slots=True)
class RelatedAssociations:
    """Association ids a class originates (``from_ids``) or receives (``to_ids``)."""

    from_ids: List[str] = field(default_factory=list)
    to_ids: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Partitioning
# ---------------------------------------------------------------------------


def related_associations(
    class_id: str, associations: Mapping[str, AssociationNode]
) -> RelatedAssociations:
    """
    Partition associations by the role ``class_id`` plays in them.

    Associations without an injected field on the destination side are
    invisible to the destination class.
    """
    related: RelatedAssociations = RelatedAssociations()
    for association_id, association in associations.items():
        if association.from_id == class_id:
            related.from_ids.append(association_id)
        if association.to_id == class_id and association.injected_field_in_to:
            related.to_ids.append(association_id)
    return related


# ---------------------------------------------------------------------------
# Required-flag normalization
# ---------------------------------------------------------------------------


def normalize_required_flags(
    association: AssociationNode,
    from_name: str,
    to_name: str,
    diagnostics: Optional[DiagnosticReport] = None,
) -> AssociationNode:
    """
    Return a copy of ``association`` with illegal required flags cleared.

    A "many" side can never be required: the "to" side of a one-to-many,
    the "from" side of a many-to-one, and both sides of a many-to-many.
    Each correction is reported as a warning; none is fatal.
    """
    report: DiagnosticReport = diagnostics if diagnostics is not None else DiagnosticReport()
    context: Dict[str, str] = {"from": from_name, "to": to_name}
    updates: Dict[str, bool] = {}
    kind: Optional[str] = association.type

    if kind == RelationshipType.ONE_TO_MANY and association.is_injected_field_in_to_required:
        report.add_warning(
            ONE_TO_MANY_REQUIRED_MANY_SIDE,
            f"From {from_name} to {to_name}, a One-to-Many exists and the Many "
            f"side can't be required. Removing the required flag.",
            context,
        )
        updates["is_injected_field_in_to_required"] = False
    elif kind == RelationshipType.MANY_TO_ONE and association.is_injected_field_in_from_required:
        report.add_warning(
            MANY_TO_ONE_REQUIRED_MANY_SIDE,
            f"From {from_name} to {to_name}, a Many-to-One exists and the Many "
            f"side can't be required. Removing the required flag.",
            context,
        )
        updates["is_injected_field_in_from_required"] = False
    elif kind == RelationshipType.MANY_TO_MANY and (
        association.is_injected_field_in_from_required
        or association.is_injected_field_in_to_required
    ):
        report.add_warning(
            MANY_TO_MANY_REQUIRED,
            f"From {from_name} to {to_name}, a Many-to-Many exists and none of "
            f"its sides can be required. Removing the required flag.",
            context,
        )
        updates["is_injected_field_in_from_required"] = False
        updates["is_injected_field_in_to_required"] = False

    return association.model_copy(update=updates)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _class_names(model: ParsedModel, association: AssociationNode) -> Tuple[str, str]:
    from_class = model.get_class(association.from_id)
    to_class = model.get_class(association.to_id)
    check_association_validity(
        association,
        from_class.name if from_class is not None else None,
        to_class.name if to_class is not None else None,
    )
    return from_class.name, to_class.name


def _required_rule(required: bool) -> Optional[str]:
    return REQUIRED_RULE if required else None


# ---------------------------------------------------------------------------
# "from" pass
# ---------------------------------------------------------------------------


def resolve_source_association(
    association: AssociationNode,
    model: ParsedModel,
    diagnostics: Optional[DiagnosticReport] = None,
) -> ResolvedAssociation:
    """
    Resolve ``association`` from its origin class.

    Expects required flags to be normalized already.  A many-to-one without
    a "from"-side field yields no placement.  A one-to-many without a
    "to"-side field yields the synthesized many-to-one of the destination
    first, and the returned association copy reads as many-to-one.
    """
    from_name, to_name = _class_names(model, association)
    kind: str = association.type
    own_ref = to_field_reference(association.injected_field_in_from)
    other_ref = to_field_reference(association.injected_field_in_to)
    rules: Optional[str] = _required_rule(association.is_injected_field_in_from_required)
    javadoc: Optional[str] = format_comment(association.comment_in_from)
    placements: List[Placement] = []
    resolved: AssociationNode = association

    if kind == RelationshipType.ONE_TO_ONE:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(to_name),
            other_entity_field=lower_first(own_ref.other_entity_field),
            other_entity_relationship_name=lower_first(
                other_ref.relationship_name or from_name
            ),
            owner_side=True,
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
    elif kind == RelationshipType.ONE_TO_MANY:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=entity_name(own_ref.relationship_name or to_name),
            other_entity_name=entity_name(to_name),
            other_entity_relationship_name=lower_first(other_ref.relationship_name),
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
        if not association.injected_field_in_to:
            relationship.other_entity_relationship_name = entity_name(from_name)
            inverse = RelationshipDescriptor(
                relationship_type=RelationshipType.MANY_TO_ONE,
                relationship_name=entity_name(from_name),
                other_entity_name=entity_name(from_name),
                other_entity_field=lower_first(other_ref.other_entity_field),
                javadoc=format_comment(association.comment_in_to),
            )
            placements.append(Placement(association.to_id, inverse))
            resolved = association.model_copy(
                update={"type": RelationshipType.MANY_TO_ONE.value}
            )
            if diagnostics is not None:
                diagnostics.add_info(
                    ONE_TO_MANY_UNIDIRECTIONAL,
                    f"In the One-to-Many relationship from {from_name} to "
                    f"{to_name}, only bidirectionality is supported. The other "
                    f"side was added as '{inverse.relationship_name}'.",
                    {"from": from_name, "to": to_name},
                )
    elif kind == RelationshipType.MANY_TO_ONE:
        if not association.injected_field_in_from:
            logger.debug(
                "Many-to-One from %s to %s declares no source field; "
                "left to the destination pass.",
                from_name,
                to_name,
            )
            return ResolvedAssociation(association)
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(to_name),
            other_entity_field=lower_first(own_ref.other_entity_field),
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
    else:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(to_name),
            other_entity_field=lower_first(own_ref.other_entity_field),
            other_entity_relationship_name=lower_first(other_ref.relationship_name),
            owner_side=True,
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )

    placements.append(Placement(association.from_id, relationship))
    return ResolvedAssociation(resolved, tuple(placements))


# ---------------------------------------------------------------------------
# "to" pass
# ---------------------------------------------------------------------------


def resolve_destination_association(
    association: AssociationNode,
    model: ParsedModel,
) -> ResolvedAssociation:
    """
    Resolve ``association`` from its destination class.

    Only called for associations that inject a field on the destination
    side.  The destination's own declaration always names its field.
    """
    from_name, _ = _class_names(model, association)
    kind: str = association.type
    own_ref = to_field_reference(association.injected_field_in_to)
    other_ref = to_field_reference(association.injected_field_in_from)
    rules: Optional[str] = _required_rule(association.is_injected_field_in_to_required)
    javadoc: Optional[str] = format_comment(association.comment_in_to)

    if kind == RelationshipType.ONE_TO_ONE:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(from_name),
            other_entity_relationship_name=lower_first(other_ref.relationship_name),
            owner_side=False,
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
    elif kind == RelationshipType.ONE_TO_MANY:
        own_ref = to_field_reference(
            association.injected_field_in_to or lower_first(from_name)
        )
        relationship = RelationshipDescriptor(
            relationship_type=RelationshipType.MANY_TO_ONE,
            relationship_name=entity_name(own_ref.relationship_name or from_name),
            other_entity_name=entity_name(from_name),
            other_entity_field=lower_first(own_ref.other_entity_field),
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
    elif kind == RelationshipType.MANY_TO_ONE:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(from_name),
            other_entity_field=lower_first(own_ref.other_entity_field),
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )
    else:
        relationship = RelationshipDescriptor(
            relationship_type=kind,
            relationship_name=to_camel_case(own_ref.relationship_name),
            other_entity_name=entity_name(from_name),
            other_entity_relationship_name=lower_first(other_ref.relationship_name),
            owner_side=False,
            relationship_validate_rules=rules,
            javadoc=javadoc,
        )

    return ResolvedAssociation(association, (Placement(association.to_id, relationship),))


# ---------------------------------------------------------------------------
# Whole-model resolution
# ---------------------------------------------------------------------------


class AssociationResolver:
    """
    Resolves every association of a model, class by class.

    Works on its own normalized copies of the associations; after
    :meth:`resolve`, :attr:`associations` holds the final state of each one
    (corrected required flags, rewritten cardinalities).
    """

    def __init__(
        self,
        model: ParsedModel,
        diagnostics: Optional[DiagnosticReport] = None,
    ) -> None:
        self._model: ParsedModel = model
        self._diagnostics: DiagnosticReport = (
            diagnostics if diagnostics is not None else DiagnosticReport()
        )
        self.associations: Dict[str, AssociationNode] = {}

    def _prepare(self) -> None:
        self.associations = {}
        for association_id, association in self._model.associations.items():
            from_name, to_name = _class_names(self._model, association)
            self.associations[association_id] = normalize_required_flags(
                association, from_name, to_name, self._diagnostics
            )

    def resolve_class(self, class_id: str) -> List[Placement]:
        """Placements produced by the "from" then the "to" pass of ``class_id``."""
        related: RelatedAssociations = related_associations(class_id, self.associations)
        placements: List[Placement] = []
        for association_id in related.from_ids:
            result = resolve_source_association(
                self.associations[association_id], self._model, self._diagnostics
            )
            self.associations[association_id] = result.association
            placements.extend(result.placements)
        for association_id in related.to_ids:
            result = resolve_destination_association(
                self.associations[association_id], self._model
            )
            placements.extend(result.placements)
        return placements

    def resolve(self, class_ids: List[str]) -> List[Placement]:
        """Placements for all ``class_ids``, in production order."""
        self._prepare()
        placements: List[Placement] = []
        for class_id in class_ids:
            placements.extend(self.resolve_class(class_id))
        logger.debug(
            "Resolved %d association(s) into %d placement(s).",
            len(self.associations),
            len(placements),
        )
        return placements


__all__: List[str] = [
    "Placement",
    "ResolvedAssociation",
    "RelatedAssociations",
    "related_associations",
    "normalize_required_flags",
    "resolve_source_association",
    "resolve_destination_association",
    "AssociationResolver",
]
