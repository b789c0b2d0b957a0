"""
Constants used throughout the OData code generator.
"""

import keyword

from .models import EdmType

# EDM primitive types mapped to the Python annotation emitted for them
PYTHON_TYPE_MAP = {
    EdmType.BINARY: "bytes",
    EdmType.BOOLEAN: "bool",
    EdmType.BYTE: "_UInt8",
    EdmType.DATETIME: "_datetime.datetime",
    EdmType.DATETIME_OFFSET: "_datetime.timedelta",
    EdmType.DECIMAL: "float",
    EdmType.DOUBLE: "float",
    EdmType.INT16: "_Int16",
    EdmType.INT32: "_Int32",
    EdmType.STRING: "str",
}

# Inclusive ranges for the integer width aliases in the generated preamble
INTEGER_ALIASES = {
    "_UInt8": (0, 255),
    "_Int16": (-32768, 32767),
    "_Int32": (-2147483648, 2147483647),
}

# Member names of the generated OpenDataKind enum
REFLECTION_KIND_NAMES = {
    EdmType.BINARY: "BINARY",
    EdmType.BOOLEAN: "BOOLEAN",
    EdmType.BYTE: "BYTE",
    EdmType.DATETIME: "DATETIME",
    EdmType.DATETIME_OFFSET: "DATETIME_OFFSET",
    EdmType.DECIMAL: "DECIMAL",
    EdmType.DOUBLE: "DOUBLE",
    EdmType.INT16: "INT16",
    EdmType.INT32: "INT32",
    EdmType.STRING: "STRING",
}

# Identifiers that cannot be emitted verbatim as field or namespace names
RESERVED_IDENTIFIERS = frozenset(keyword.kwlist) | {"type"}

OPTIONAL_TEXT = "_typing.Optional[str]"

MULTIPLICITY_OPTIONAL = "0..1"
MULTIPLICITIES = ("0..1", "1", "*")

GENERATED_HEADER = (
    "# Code automatically generated by odata-codegen from an OData metadata document\n"
    "# Any changes made to this file may be overwritten by future code generation runs!\n"
)

# Metadata namespace carrying IsDefaultEntityContainer and friends
METADATA_NAMESPACE = "http://schemas.microsoft.com/ado/2007/08/dataservices/metadata"

# EDM namespaces across CSDL versions, for reference in diagnostics
EDM_NAMESPACES = (
    "http://schemas.microsoft.com/ado/2006/04/edm",
    "http://schemas.microsoft.com/ado/2007/05/edm",
    "http://schemas.microsoft.com/ado/2008/01/edm",
    "http://schemas.microsoft.com/ado/2008/09/edm",
    "http://schemas.microsoft.com/ado/2009/11/edm",
)
