"""
Resolution of navigation properties against a schema's associations.
"""

from typing import NamedTuple

from .constants import MULTIPLICITY_OPTIONAL
from .errors import NavigationResolutionError
from .models import EntityType, NavigationProperty, Schema


class ResolvedNavigation(NamedTuple):
    target: str  # entity type name local to the schema
    multiplicity: str

    @property
    def is_collection(self) -> bool:
        # "1" and "*" share the collection shape
        return self.multiplicity != MULTIPLICITY_OPTIONAL


def resolve_navigation(schema: Schema, entity: EntityType, navigation: NavigationProperty) -> ResolvedNavigation:
    """
    Find the association end playing the navigation's target role.

    Associations are scanned in document order and the first end carrying
    both the role and an entity type wins.

    Raises:
        NavigationResolutionError: no end matches, or the matching end cannot
            be turned into a local target.
    """
    for association in schema.associations:
        for end in association.ends:
            if end.role != navigation.to_role or not end.entity_type:
                continue

            target = None
            for prefix in schema.qualifiers():
                if end.entity_type.startswith(prefix):
                    target = end.entity_type[len(prefix):]
                    break
            if not target:
                raise NavigationResolutionError(
                    entity.name, navigation.name, navigation.to_role,
                    f"association '{association.name}' targets '{end.entity_type}' outside namespace '{schema.namespace}'"
                )
            if end.multiplicity is None:
                raise NavigationResolutionError(
                    entity.name, navigation.name, navigation.to_role,
                    f"association '{association.name}' declares no multiplicity for this role"
                )
            return ResolvedNavigation(target, end.multiplicity)

    raise NavigationResolutionError(entity.name, navigation.name, navigation.to_role)
