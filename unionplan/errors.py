class UnionError(RuntimeError):
    "Base class of all errors raised by unionplan."


class ModelError(UnionError):
    """Raised when a union description is invalid.

    Model errors are detected once, from the static description, before any
    instance exists. They are never fixed by retrying: the description itself
    has to change."""


class DuplicateTagError(ModelError):
    def __init__(self, tag, first, second):
        super().__init__(
            f"Tag {tag} is used by both {repr(first)} and {repr(second)}."
        )
        self.tag = tag
        self.cases = (first, second)


class DuplicateCaseNameError(ModelError):
    def __init__(self, name):
        super().__init__(f"Case {repr(name)} was already defined.")
        self.name = name


class DuplicateFactoryNameError(ModelError):
    def __init__(self, factory_name, first, second):
        super().__init__(
            f"Factory {repr(factory_name)} is used by both {repr(first)} and {repr(second)}."
        )
        self.factory_name = factory_name
        self.cases = (first, second)


class DuplicateValueNameError(ModelError):
    def __init__(self, case_name, value_name):
        super().__init__(
            f"Value {repr(value_name)} was already defined in case {repr(case_name)}."
        )
        self.case_name = case_name
        self.value_name = value_name


class CyclicDecompositionError(ModelError):
    def __init__(self, cycle):
        path = " -> ".join(cycle)
        super().__init__(f"Decomposition does not terminate: {path}.")
        self.cycle = tuple(cycle)


class UnknownCompositeError(ModelError):
    def __init__(self, type_name):
        super().__init__(
            f"Decomposable type {repr(type_name)} has no registered composite."
        )
        self.type_name = type_name


class InvalidTagError(ModelError):
    def __init__(self, case_name, tag):
        super().__init__(
            f"Invalid tag for case {repr(case_name)}: {repr(tag)} (expected a non-negative integer)."
        )
        self.case_name = case_name
        self.tag = tag


class NonExhaustiveMatchError(ModelError):
    def __init__(self, union_name, missing):
        names = ", ".join(repr(name) for name in missing)
        super().__init__(f"Match over {repr(union_name)} does not handle: {names}.")
        self.union_name = union_name
        self.missing = tuple(missing)


class UnknownCaseError(ModelError):
    def __init__(self, union_name, name):
        super().__init__(f"Union {repr(union_name)} has no case {repr(name)}.")
        self.union_name = union_name
        self.name = name


class InvalidOptionError(ModelError):
    def __init__(self, option, value):
        super().__init__(f"Invalid value for {repr(option)}: {repr(value)}.")
        self.option = option
        self.value = value


class DescriptorError(ModelError):
    "Raised for malformed descriptions, e.g. when loading from a mapping."


class LayoutError(UnionError):
    """The layout planner assigned two values of the same case to one slot.

    This is a defect of the planner itself and cannot be caused by a valid
    description."""

    def __init__(self, case_name, message):
        super().__init__(f"Invalid layout for case {repr(case_name)}: {message}")
        self.case_name = case_name


class InvalidCaseAccess(UnionError):
    "A non-try accessor was called on an instance of a different case."

    def __init__(self, union_name, expected, actual):
        super().__init__(
            f"{union_name} holds case {repr(actual)}, not {repr(expected)}."
        )
        self.union_name = union_name
        self.expected = expected
        self.actual = actual
