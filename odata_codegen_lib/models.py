"""
Data models for the parsed OData conceptual schema (CSDL) graph.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class EdmType(str, Enum):
    """Closed set of EDM primitive types the generator understands."""
    BINARY = "Edm.Binary"
    BOOLEAN = "Edm.Boolean"
    BYTE = "Edm.Byte"
    DATETIME = "Edm.DateTime"
    DATETIME_OFFSET = "Edm.DateTimeOffset"
    DECIMAL = "Edm.Decimal"
    DOUBLE = "Edm.Double"
    INT16 = "Edm.Int16"
    INT32 = "Edm.Int32"
    STRING = "Edm.String"

    @property
    def tag(self) -> str:
        """The bare tag without the Edm. prefix (e.g. "Int32")."""
        return self.value.split('.', 1)[1]


class Property(BaseModel):
    name: str
    type: EdmType
    nullable: bool = True


class NavigationProperty(BaseModel):
    name: str
    relationship: Optional[str] = None
    from_role: Optional[str] = None
    to_role: str


class EntityType(BaseModel):
    name: str
    key: str  # name of the designated key property
    properties: List[Property] = []
    navigations: List[NavigationProperty] = []

    def key_property(self) -> Optional[Property]:
        return next((prop for prop in self.properties if prop.name == self.key), None)


class AssociationEnd(BaseModel):
    role: Optional[str] = None
    entity_type: Optional[str] = None  # qualified name, e.g. "Namespace.Type"
    multiplicity: Optional[str] = None


class Association(BaseModel):
    name: str
    ends: List[AssociationEnd] = []


class EntitySet(BaseModel):
    name: str
    entity_type: str  # qualified name


class EntityContainer(BaseModel):
    name: str
    is_default: bool = False
    entity_sets: List[EntitySet] = []


class Schema(BaseModel):
    namespace: str
    alias: Optional[str] = None
    entities: List[EntityType] = []
    associations: List[Association] = []
    entity_container: Optional[EntityContainer] = None

    def entity_sets(self) -> Optional[List[EntitySet]]:
        if self.entity_container is None:
            return None
        return self.entity_container.entity_sets

    def qualifiers(self) -> List[str]:
        """Prefixes that may qualify type names declared in this schema."""
        prefixes = [f"{self.namespace}."]
        if self.alias:
            prefixes.append(f"{self.alias}.")
        return prefixes


class MetadataDocument(BaseModel):
    version: Optional[str] = None
    schemas: List[Schema] = []
    source: Optional[str] = None

    def default_schema(self) -> Optional[Schema]:
        for schema in self.schemas:
            if schema.entity_container is not None and schema.entity_container.is_default:
                return schema
        return None
