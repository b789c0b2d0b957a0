"""
OData Codegen Library - generates typed Python declarations from OData (CSDL) metadata.
"""

from .models import (
    EdmType,
    Property,
    NavigationProperty,
    EntityType,
    Association,
    AssociationEnd,
    EntitySet,
    EntityContainer,
    Schema,
    MetadataDocument
)
from .errors import (
    CodegenError,
    InputError,
    ParseError,
    OutputError,
    NavigationResolutionError,
    UnresolvedNavigationError
)
from .options import GeneratorOptions
from .metadata_parser import MetadataParser
from .generator import CodeGenerator, GenerationResult
from .emitter import PythonEmitter

__all__ = [
    'EdmType',
    'Property',
    'NavigationProperty',
    'EntityType',
    'Association',
    'AssociationEnd',
    'EntitySet',
    'EntityContainer',
    'Schema',
    'MetadataDocument',
    'CodegenError',
    'InputError',
    'ParseError',
    'OutputError',
    'NavigationResolutionError',
    'UnresolvedNavigationError',
    'GeneratorOptions',
    'MetadataParser',
    'CodeGenerator',
    'GenerationResult',
    'PythonEmitter'
]
