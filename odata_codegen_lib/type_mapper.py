"""
Mapping of EDM primitive properties onto Python type annotations.
"""

from .constants import PYTHON_TYPE_MAP
from .models import EdmType, Property


def edm_type_to_python_type(edm_type: EdmType, nullable: bool) -> str:
    """Return the annotation for a primitive EDM type, wrapped in _typing.Optional when nullable."""
    inner = PYTHON_TYPE_MAP[edm_type]
    if nullable:
        return f"_typing.Optional[{inner}]"
    return inner


def property_type(prop: Property) -> str:
    return edm_type_to_python_type(prop.type, prop.nullable)
