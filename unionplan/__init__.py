"""unionplan: storage layouts and operation contracts for tagged unions."""

from .descriptors import Alias, Case, Composite, CompositeRegistry, Value
from .errors import (
    CyclicDecompositionError,
    DescriptorError,
    DuplicateCaseNameError,
    DuplicateFactoryNameError,
    DuplicateTagError,
    DuplicateValueNameError,
    InvalidCaseAccess,
    InvalidOptionError,
    InvalidTagError,
    LayoutError,
    ModelError,
    NonExhaustiveMatchError,
    UnionError,
    UnknownCaseError,
    UnknownCompositeError,
)
from .kinds import Storage, TypeKind
from .layout import SlotPlan, plan_layout
from .loader import load_union
from .model import UnionModel, build_model
from .operations import Family, Operation, OperationSet, check_exhaustive, synthesize
from .options import TypeBindings, TypeDefaults, UnionOptions
from .report import render_model
from .runtime import UnionValue, realize

__all__ = [
    "Alias",
    "Case",
    "Composite",
    "CompositeRegistry",
    "Value",
    "TypeKind",
    "Storage",
    "UnionOptions",
    "TypeDefaults",
    "TypeBindings",
    "SlotPlan",
    "plan_layout",
    "UnionModel",
    "build_model",
    "load_union",
    "Family",
    "Operation",
    "OperationSet",
    "check_exhaustive",
    "synthesize",
    "UnionValue",
    "realize",
    "render_model",
    "UnionError",
    "ModelError",
    "DuplicateTagError",
    "DuplicateCaseNameError",
    "DuplicateFactoryNameError",
    "DuplicateValueNameError",
    "CyclicDecompositionError",
    "UnknownCompositeError",
    "InvalidTagError",
    "NonExhaustiveMatchError",
    "UnknownCaseError",
    "InvalidOptionError",
    "DescriptorError",
    "LayoutError",
    "InvalidCaseAccess",
]
