"""
Declarations synthesized from entity types, ready for emission.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .constants import OPTIONAL_TEXT, RESERVED_IDENTIFIERS
from .errors import NavigationResolutionError
from .models import EntityType, Schema
from .navigation import resolve_navigation
from .options import GeneratorOptions
from .reflection import FieldDescriptor, RelationDescriptor, field_descriptors, relation_descriptors
from .type_mapper import property_type


def escape_keyword(name: str) -> str:
    """Append an underscore to names Python reserves, keeping the case."""
    if name in RESERVED_IDENTIFIERS:
        return f"{name}_"
    return name


def escape_identifier(name: str) -> str:
    """Lower-case a CSDL name into a Python identifier, escaping reserved words."""
    return escape_keyword(name.lower())


def field_identifier(name: str, serde: bool) -> str:
    """
    Identifier for a generated field.

    pydantic treats underscore-prefixed attributes as private and drops them
    from the model, so serde fields get a `field_` prefix instead.
    """
    identifier = escape_identifier(name)
    if serde and identifier.startswith("_"):
        return f"field_{identifier.lstrip('_')}"
    return identifier


class FieldDefault(Enum):
    REQUIRED = "required"
    NONE = "none"
    EMPTY_LIST = "empty_list"


@dataclass
class FieldDeclaration:
    name: str
    annotation: str
    source_name: str
    serialized_name: Optional[str] = None
    empty_string_as_none: bool = False
    default: FieldDefault = FieldDefault.REQUIRED
    navigation: bool = False


@dataclass
class ReflectionDeclaration:
    entity_name: str
    fields: List[FieldDescriptor]
    relations: Optional[List[RelationDescriptor]] = None  # None without expansion


@dataclass
class EntityDeclaration:
    name: str
    fields: List[FieldDeclaration] = field(default_factory=list)
    serde: bool = True
    reflection: Optional[ReflectionDeclaration] = None

    @property
    def has_navigations(self) -> bool:
        return any(f.navigation for f in self.fields)


@dataclass
class EntityTypesFunction:
    """Schema-wide table of (entity name, field descriptors)."""
    entities: List[Tuple[str, List[FieldDescriptor]]] = field(default_factory=list)


@dataclass
class ReExport:
    alias: str
    target: str  # dotted path relative to the module root


@dataclass
class WildcardExport:
    """Expose every public name of a namespace at the module root."""
    path: str


def _serialized_name(name: str, identifier: str, serde: bool) -> Optional[str]:
    if not serde:
        return None
    if any(c.isupper() for c in name) or identifier != name.lower():
        return name
    return None


def synthesize_entity(schema: Schema, entity: EntityType, options: GeneratorOptions,
                      module_path: str) -> Tuple[EntityDeclaration, List[NavigationResolutionError]]:
    """
    Build the declaration for one entity type.

    Fields follow property order, then navigation order. Navigation failures
    are returned instead of raised so a whole run can report them together;
    unresolved navigations are left out of the declaration.

    Args:
        schema: The schema owning the entity (used to resolve associations)
        entity: The entity type to declare
        options: Active generation options
        module_path: Dotted Python path of the schema's namespace node

    Returns:
        The declaration and the navigation errors found while building it
    """
    declaration = EntityDeclaration(name=escape_keyword(entity.name), serde=options.serde)
    errors: List[NavigationResolutionError] = []

    for prop in entity.properties:
        annotation = property_type(prop)
        identifier = field_identifier(prop.name, options.serde)
        declaration.fields.append(FieldDeclaration(
            name=identifier,
            annotation=annotation,
            source_name=prop.name,
            serialized_name=_serialized_name(prop.name, identifier, options.serde),
            empty_string_as_none=(options.serde and options.empty_string_is_null and annotation == OPTIONAL_TEXT),
            default=FieldDefault.NONE if prop.nullable else FieldDefault.REQUIRED
        ))

    resolved = []
    if options.expand:
        for navigation in entity.navigations:
            try:
                target = resolve_navigation(schema, entity, navigation)
            except NavigationResolutionError as nav_err:
                errors.append(nav_err)
                continue
            resolved.append((navigation, target))

            qualified = f"{module_path}.{escape_keyword(target.target)}"
            identifier = field_identifier(navigation.name, options.serde)
            declaration.fields.append(FieldDeclaration(
                name=identifier,
                annotation=f"_typing.List[{qualified}]" if target.is_collection else f"_typing.Optional[{qualified}]",
                source_name=navigation.name,
                serialized_name=_serialized_name(navigation.name, identifier, options.serde),
                default=FieldDefault.EMPTY_LIST if target.is_collection else FieldDefault.NONE,
                navigation=True
            ))

    if options.reflection:
        declaration.reflection = ReflectionDeclaration(
            entity_name=entity.name,
            fields=field_descriptors(entity),
            relations=relation_descriptors(resolved) if options.expand else None
        )

    return declaration, errors

