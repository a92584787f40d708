# Derives the operations of a union from its model.
#
# Operations are descriptors only: a name, its parameters and what it returns or
# how it fails. unionplan.runtime turns them into methods of a python class and
# unionplan.report lists them.

from enum import Enum

from .errors import NonExhaustiveMatchError, UnknownCaseError


class Family(Enum):
    CONSTRUCTION = "construction"
    TESTING = "testing"
    EXTRACTION = "extraction"
    DISPATCH = "dispatch"
    EQUALITY = "equality"
    HASHING = "hashing"
    RENDERING = "rendering"
    CONVERSION = "conversion"


class Parameter:
    def __init__(self, name, declared_type, kind=None, optional=False):
        self.name = name
        self.declared_type = declared_type
        self.kind = kind
        self.optional = optional

    def __str__(self):
        text = f"{self.name}: {self.declared_type}"
        return text + " = None" if self.optional else text


class Operation:
    """The contract of a single operation.

    'failure' names what happens when the operation's precondition does not
    hold: an error type, or None for total operations."""

    def __init__(
        self,
        family,
        name,
        parameters=None,
        returns="None",
        failure=None,
        case=None,
        variant=None,
        doc=None,
    ):
        self.family = family
        self.name = name
        self.parameters = tuple(parameters or ())
        self.returns = returns
        self.failure = failure
        self.case = case
        # Distinguishes operations of one family for the same case (e.g. the
        # three extraction accessors).
        self.variant = variant
        self.doc = doc

    @property
    def signature(self):
        params = ", ".join(str(param) for param in self.parameters)
        return f"{self.name}({params}) -> {self.returns}"

    def __repr__(self):
        return f"Operation({self.family.value}, {self.signature})"


class OperationSet:
    "All operations synthesized for one model, in a deterministic order."

    def __init__(self, model, operations):
        self.model = model
        self.operations = list(operations)
        self._by_name = {op.name: op for op in self.operations}

    def __iter__(self):
        return iter(self.operations)

    def __len__(self):
        return len(self.operations)

    def __contains__(self, name):
        return name in self._by_name

    def get(self, name):
        return self._by_name[name]

    def by_family(self, family):
        return [op for op in self.operations if op.family == family]

    def for_case(self, case):
        name = case if isinstance(case, str) else case.name
        return [op for op in self.operations if op.case is not None and op.case.name == name]

    @property
    def families(self):
        result = []
        for op in self.operations:
            if op.family not in result:
                result.append(op.family)
        return result


def synthesize(model):
    """Returns the OperationSet for a model.

    Construction, testing and extraction are always present. The remaining
    families are included as enabled by the model's options."""

    ops = []
    for case in model.cases:
        ops.append(_factory(model, case))
    for case in model.cases:
        ops.append(_predicate(model, case))
    for case in model.cases:
        if not case.is_singleton:
            ops.extend(_accessors(model, case))

    options = model.options
    if options.generate_exhaustive_match:
        ops.extend(_dispatch(model))
    if options.generate_equality:
        ops.append(
            Operation(
                Family.EQUALITY,
                "equals",
                [Parameter("other", model.name)],
                returns="bool",
                doc="Same tag and, for the active case, pairwise equal values.",
            )
        )
    if options.generate_hashing:
        ops.append(
            Operation(
                Family.HASHING,
                "hash",
                returns="int",
                doc="Combines the tag with the active case's values.",
            )
        )
    if options.generate_to_string:
        ops.append(
            Operation(
                Family.RENDERING,
                "to_string",
                returns="str",
                doc="'<Case>(<v1>, <v2>, ...)', or '<Case>' for singletons.",
            )
        )
    if options.generate_type_conversions:
        ops.extend(_conversions(model))
    return OperationSet(model, ops)


def _factory(model, case):
    params = [
        Parameter(value.argument_name, value.declared_type, value.kind)
        for value in case.payload_values
    ]
    return Operation(
        Family.CONSTRUCTION,
        case.factory_name,
        params,
        returns=model.name,
        case=case,
        doc=f"Creates a {model.name} holding case {case.name}.",
    )


def _predicate(model, case):
    return Operation(
        Family.TESTING,
        case.predicate_name,
        returns="bool",
        case=case,
        doc=f"True iff the tag is {model.tag_of(case)}.",
    )


def payload_type(case):
    types = [value.declared_type for value in case.payload_values]
    if len(types) == 1:
        return types[0]
    return "tuple[" + ", ".join(types) + "]"


def _accessors(model, case):
    types = ", ".join(value.declared_type for value in case.payload_values)
    payload = payload_type(case)
    return [
        Operation(
            Family.EXTRACTION,
            case.try_accessor_name,
            returns=f"tuple[bool, {types}]",
            case=case,
            variant="try",
            doc="(True, values...) for this case, (False, defaults...) otherwise.",
        ),
        Operation(
            Family.EXTRACTION,
            case.accessor_name,
            returns=payload,
            failure="InvalidCaseAccess",
            case=case,
            variant="get",
        ),
        Operation(
            Family.EXTRACTION,
            case.default_accessor_name,
            returns=payload,
            case=case,
            variant="or_default",
        ),
    ]


def convertible_cases(model):
    """Returns (case, python type) for every case selectable by type, in
    declaration order.

    These are the cases carrying exactly one value whose declared type has a
    python type binding."""

    result = []
    for case in model.cases:
        values = case.payload_values
        if len(values) != 1:
            continue
        python_type = model.types.python_type(values[0].declared_type)
        if python_type is not None:
            result.append((case, python_type))
    return result


def _conversions(model):
    return [
        Operation(
            Family.CONVERSION,
            "try_create_from",
            [Parameter("value", "object")],
            returns=f"tuple[bool, {model.name}]",
            doc="Creates the first case whose value type accepts 'value'.",
        ),
        Operation(
            Family.CONVERSION,
            "try_get",
            [Parameter("value_type", "type | str")],
            returns="tuple[bool, object]",
            doc="(True, value) if the active case holds a value of 'value_type'.",
        ),
    ]


def handler_type(case):
    args = ", ".join(value.declared_type for value in case.payload_values)
    return f"Callable[[{args}], T]"


def _dispatch(model):
    handlers = [
        Parameter(case.argument_name, handler_type(case), optional=True)
        for case in model.cases
    ]
    handlers.append(Parameter("otherwise", "Callable[[], T]", optional=True))
    return [
        Operation(
            Family.DISPATCH,
            "match",
            handlers,
            returns="T",
            failure="NonExhaustiveMatchError",
            doc="Calls the handler of the active case, or 'otherwise'.",
        ),
        Operation(
            Family.DISPATCH,
            "visit",
            [Parameter("visitor", "Visitor[T]")],
            returns="T",
            failure="NonExhaustiveMatchError",
            doc="Calls visitor.visit_<case>(values...) for the active case.",
        ),
    ]


def check_exhaustive(model, handled, has_fallback=False):
    """Verifies that a set of handlers covers the union.

    'handled' contains argument names of cases (as used by match). Names that
    do not belong to any case are always an error; missing cases are an error
    unless there is a fallback."""

    known = {case.argument_name for case in model.cases}
    for name in handled:
        if name not in known:
            raise UnknownCaseError(model.name, name)

    if has_fallback:
        return
    missing = [case.name for case in model.cases if case.argument_name not in handled]
    if missing:
        raise NonExhaustiveMatchError(model.name, missing)

