from enum import Enum


class TypeKind(Enum):
    "Classifies how a value of a declared type may be stored."

    # Copyable data without ownership concerns (numbers, flags, plain structs).
    VALUE = "value"
    # Owns or shares an external resource.
    REFERENCE = "reference"
    # Unknown until instantiation, see Value.constraint.
    TYPE_PARAMETER = "type_parameter"
    # Zero-size marker.
    SINGLETON = "singleton"
    # Composite whose fields are inlined into the case.
    DECOMPOSABLE = "decomposable"


class Storage(Enum):
    "Where the layout planner puts a single leaf value."

    VALUE = "value"
    BUCKET = "bucket"
    NONE = "none"


TYPE_PARAMETER_CONSTRAINTS = (None, "value", "reference")


def storage_for(kind, constraint=None):
    "Returns the storage used for a leaf of the given kind."

    if kind == TypeKind.VALUE:
        return Storage.VALUE
    if kind == TypeKind.SINGLETON:
        return Storage.NONE
    if kind == TypeKind.TYPE_PARAMETER and constraint == "value":
        return Storage.VALUE
    # References, unconstrained type parameters and composites that are not
    # decomposed all go through the overlay bucket.
    return Storage.BUCKET