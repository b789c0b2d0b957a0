"""
Run-time reflection descriptors derived from entity types.
"""

from typing import List, NamedTuple, Sequence, Tuple

from .models import EdmType, EntityType, NavigationProperty
from .navigation import ResolvedNavigation


class FieldDescriptor(NamedTuple):
    name: str
    kind: EdmType
    nullable: bool
    key: bool


class RelationDescriptor(NamedTuple):
    name: str
    target: str


def field_descriptors(entity: EntityType) -> List[FieldDescriptor]:
    """One descriptor per property, in declaration order."""
    key = entity.key_property()
    return [
        FieldDescriptor(prop.name, prop.type, prop.nullable, prop is key)
        for prop in entity.properties
    ]


def relation_descriptors(navigations: Sequence[Tuple[NavigationProperty, ResolvedNavigation]]) -> List[RelationDescriptor]:
    return [RelationDescriptor(navigation.name, resolved.target) for navigation, resolved in navigations]
