"""
entigen Intermediate Representation (IR) types.

Declaration nodes produced by the parser and the resolved semantic model
produced by the linker. All types are re-exported from this package.
"""

from .declarations import (
    FLAG_NAMES,
    SCALAR_TYPE_NAMES,
    Declarations,
    EntityDeclaration,
    EntityField,
    EnumDeclaration,
    FieldFlags,
    TypeCategory,
    TypeDeclaration,
)
from .model import (
    EXPORT_TYPES,
    ID_FIELD,
    ID_TYPE,
    Entity,
    EnumMember,
    Enumerate,
    Field,
    FieldDecl,
    Model,
    Reference,
    export_type,
)

__all__ = [
    # Declarations
    "FLAG_NAMES",
    "SCALAR_TYPE_NAMES",
    "Declarations",
    "EntityDeclaration",
    "EntityField",
    "EnumDeclaration",
    "FieldFlags",
    "TypeCategory",
    "TypeDeclaration",
    # Semantic model
    "EXPORT_TYPES",
    "ID_FIELD",
    "ID_TYPE",
    "Entity",
    "EnumMember",
    "Enumerate",
    "Field",
    "FieldDecl",
    "Model",
    "Reference",
    "export_type",
]
