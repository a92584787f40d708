"""Realizes a UnionModel as a python class.

The class follows the model's slot plan literally: an instance stores its tag,
one tuple with the shared value slots and one tuple for the overlay bucket.
Every slot that does not belong to the active case holds the default of its
type. All accessors check the tag before reading a slot, so the content of a
shared slot is only ever interpreted through the case that wrote it.

Instances are immutable and can only be created through the factories."""

import inspect
from enum import IntEnum

from .errors import InvalidCaseAccess, NonExhaustiveMatchError
from .kinds import Storage, TypeKind
from .operations import Family, check_exhaustive, convertible_cases, synthesize

_CLS = inspect.Parameter("cls", inspect.Parameter.POSITIONAL_ONLY)


class UnionValue:
    "Base class of all realized unions."

    __slots__ = ()

    model = None

    def __init__(self, *args, **kwargs):
        raise TypeError(
            f"{type(self).__name__} instances are created through their case factories."
        )

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} instances are immutable.")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} instances are immutable.")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    @property
    def case_name(self):
        return self._runtime_case().case.name

    def _runtime_case(self):
        return type(self)._cases_by_tag[self._tag]


class _CaseRuntime:
    "Precomputed layout information for one case of a realized union."

    def __init__(self, model, case):
        self.case = case
        self.tag = model.tag_of(case)
        self.layout = model.layout_of(case)
        self.roots = self.layout.roots
        self.payload_roots = [
            root for root in self.roots if root.value.kind != TypeKind.SINGLETON
        ]
        self.leaves = self.layout.leaves
        self.stored = [leaf for leaf in self.leaves if leaf.storage != Storage.NONE]
        self.defaults = model.defaults
        self.signature = inspect.Signature(
            [
                inspect.Parameter(
                    value.argument_name, inspect.Parameter.POSITIONAL_OR_KEYWORD
                )
                for value in case.payload_values
            ]
        )

    def default_payload(self):
        return [
            self.defaults.default_for(value.declared_type)
            for value in self.case.payload_values
        ]

    def read_leaf(self, instance, leaf):
        if leaf.storage == Storage.VALUE:
            return instance._values[leaf.index]
        if leaf.storage == Storage.BUCKET:
            return instance._bucket[leaf.index]
        # Zero-size leaves store nothing, their only value is the type's default.
        return self.defaults.default_for(leaf.declared_type)

    def payload(self, instance):
        "Re-composes the values the factory was called with from the slots."

        leaf_values = iter([self.read_leaf(instance, leaf) for leaf in self.leaves])
        composed = [root.compose(leaf_values) for root in self.roots]
        # Zero-size markers are not part of the payload.
        return [
            value
            for root, value in zip(self.roots, composed)
            if root.value.kind != TypeKind.SINGLETON
        ]

    def stored_values(self, instance):
        return [self.read_leaf(instance, leaf) for leaf in self.stored]


def realize(model, operations=None, module=None):
    """Creates the python class for a model.

    'operations' defaults to synthesize(model). Only the operations it contains
    are installed, so disabled families fall back to python's defaults (identity
    equality and hashing, the default repr) or are absent (match, visit)."""

    if operations is None:
        operations = synthesize(model)

    options = model.options
    plan = model.plan
    cases = {case.name: _CaseRuntime(model, case) for case in model.cases}
    tag_type = IntEnum(
        options.tag_type_name,
        [(case.name, model.tag_of(case)) for case in model.cases_by_tag()],
    )

    value_defaults = [slot.storage_type for slot in plan.value_slots]
    bucket_defaults = [position.storage_type for position in plan.bucket.positions]

    def construct(cls, runtime, leaf_values):
        values = [model.defaults.default_for(t) for t in value_defaults]
        bucket = [model.defaults.default_for(t) for t in bucket_defaults]
        for leaf, value in leaf_values:
            if leaf.storage == Storage.VALUE:
                values[leaf.index] = value
            elif leaf.storage == Storage.BUCKET:
                bucket[leaf.index] = value

        instance = object.__new__(cls)
        object.__setattr__(instance, "_tag", runtime.tag)
        object.__setattr__(instance, "_values", tuple(values))
        object.__setattr__(instance, "_bucket", tuple(bucket))
        return instance

    namespace = {
        "__slots__": ("_tag", "_values", "_bucket"),
        "__module__": module or __name__,
        "__qualname__": model.name,
        "__doc__": f"Tagged union with cases {', '.join(cases)}.",
        "model": model,
        "operations": operations,
        "_cases_by_tag": {runtime.tag: runtime for runtime in cases.values()},
        options.tag_type_name: tag_type,
        options.tag_name: property(lambda self: tag_type(self._tag)),
    }

    for op in operations:
        builder = _BUILDERS[op.family]
        for name, member in builder(op, model, cases, construct):
            namespace[name] = member

    if options.generate_equality and not options.generate_hashing:
        namespace["__hash__"] = None

    return type(model.name, (UnionValue,), namespace)


def _build_factory(op, model, cases, construct):
    runtime = cases[op.case.name]

    def factory(cls, *args, **kwargs):
        bound = runtime.signature.bind(*args, **kwargs)
        leaf_values = []
        for root, argument in zip(runtime.payload_roots, bound.args):
            leaf_values.extend(zip(root.leaves(), root.decompose(argument)))
        return construct(cls, runtime, leaf_values)

    factory.__name__ = op.name
    factory.__doc__ = op.doc
    factory.__signature__ = runtime.signature.replace(
        parameters=[_CLS, *runtime.signature.parameters.values()]
    )
    yield op.name, classmethod(factory)


def _build_predicate(op, model, cases, construct):
    tag = cases[op.case.name].tag

    def predicate(self):
        return self._tag == tag

    predicate.__name__ = op.name
    yield op.name, property(predicate, doc=op.doc)


def _build_accessor(op, model, cases, construct):
    runtime = cases[op.case.name]
    single = len(runtime.case.payload_values) == 1

    def unpack(payload):
        return payload[0] if single else tuple(payload)

    if op.variant == "try":

        def accessor(self):
            if self._tag == runtime.tag:
                return (True, *runtime.payload(self))
            return (False, *runtime.default_payload())

    elif op.variant == "get":

        def accessor(self):
            if self._tag != runtime.tag:
                raise InvalidCaseAccess(model.name, runtime.case.name, self.case_name)
            return unpack(runtime.payload(self))

    else:

        def accessor(self):
            if self._tag != runtime.tag:
                return unpack(runtime.default_payload())
            return unpack(runtime.payload(self))

    accessor.__name__ = op.name
    accessor.__doc__ = op.doc
    yield op.name, accessor


def _build_dispatch(op, model, cases, construct):
    if op.name == "match":
        # Handler name sets that passed check_exhaustive().
        validated = set()

        def matcher(cls, **handlers):
            """Validates the handlers and returns a reusable dispatch function."""

            fallback = handlers.pop("otherwise", None)
            handlers = {name: h for name, h in handlers.items() if h is not None}
            key = (frozenset(handlers), fallback is not None)
            if key not in validated:
                check_exhaustive(model, handlers, fallback is not None)
                validated.add(key)
            table = {}
            for runtime in cases.values():
                table[runtime.tag] = (runtime, handlers.get(runtime.case.argument_name))

            def dispatch(instance):
                runtime, handler = table[instance._tag]
                if handler is None:
                    return fallback()
                return handler(*runtime.payload(instance))

            return dispatch

        def match(self, **handlers):
            return type(self).matcher(**handlers)(self)

        match.__doc__ = (
            f"{op.doc} Prefer matcher() when the same handlers are applied to many values."
        )
        yield "matcher", classmethod(matcher)
        yield "match", match

    elif op.name == "visit":

        def visit(self, visitor):
            fallback = getattr(visitor, "visit_otherwise", None)
            if fallback is None:
                missing = [
                    runtime.case.name
                    for runtime in cases.values()
                    if not hasattr(visitor, runtime.case.visit_name)
                ]
                if missing:
                    raise NonExhaustiveMatchError(model.name, missing)

            runtime = self._runtime_case()
            method = getattr(visitor, runtime.case.visit_name, None)
            if method is None:
                return fallback(self)
            return method(*runtime.payload(self))

        visit.__doc__ = op.doc
        yield "visit", visit


def _same(left, right):
    # Identity first, so that values unequal to themselves (nan) still make
    # equality reflexive.
    return left is right or left == right


def _present_and_equal(left, right):
    # An absent reference only equals another absent reference.
    if left is None or right is None:
        return left is None and right is None
    return _same(left, right)


def _build_equality(op, model, cases, construct):
    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        if self._tag != other._tag:
            return False

        runtime = self._runtime_case()
        for leaf in runtime.stored:
            left = runtime.read_leaf(self, leaf)
            right = runtime.read_leaf(other, leaf)
            if leaf.storage == Storage.BUCKET:
                if not _present_and_equal(left, right):
                    return False
            elif not _same(left, right):
                return False
        return True

    yield "__eq__", __eq__


def _build_hashing(op, model, cases, construct):
    def __hash__(self):
        runtime = self._runtime_case()
        return hash((self._tag, *runtime.stored_values(self)))

    yield "__hash__", __hash__


def _build_rendering(op, model, cases, construct):
    def __str__(self):
        runtime = self._runtime_case()
        if runtime.case.is_singleton:
            return runtime.case.name
        values = ", ".join(str(value) for value in runtime.payload(self))
        return f"{runtime.case.name}({values})"

    def __repr__(self):
        runtime = self._runtime_case()
        values = ", ".join(repr(value) for value in runtime.payload(self))
        return f"{model.name}.{runtime.case.factory_name}({values})"

    yield "__str__", __str__
    yield "__repr__", __repr__


def _build_conversion(op, model, cases, construct):
    typed = [(cases[case.name], python_type) for case, python_type in convertible_cases(model)]

    if op.name == "try_create_from":

        def try_create_from(cls, value):
            # An exact type match wins over a subclass match, so that
            # True selects a bool case even if an int case comes first.
            for accepts in (lambda t: type(value) is t, lambda t: isinstance(value, t)):
                for runtime, python_type in typed:
                    if accepts(python_type):
                        factory = getattr(cls, runtime.case.factory_name)
                        return (True, factory(value))
            return (False, None)

        try_create_from.__name__ = op.name
        try_create_from.__doc__ = op.doc
        yield op.name, classmethod(try_create_from)

    elif op.name == "try_get":

        single = [runtime for runtime in cases.values() if len(runtime.case.payload_values) == 1]

        def candidates(value_type):
            if isinstance(value_type, str):
                return [
                    runtime
                    for runtime in single
                    if runtime.case.payload_values[0].declared_type == value_type
                ]
            return [runtime for runtime, python_type in typed if issubclass(python_type, value_type)]

        def try_get(self, value_type):
            """Returns (True, value) if the active case holds a value of 'value_type'.

            'value_type' is a python type or the name of a declared type.
            Otherwise returns (False, d), where d is the default of the first
            matching case."""

            active = self._runtime_case()
            matching = candidates(value_type)
            if active in matching:
                return (True, active.payload(self)[0])
            if matching:
                return (False, matching[0].default_payload()[0])
            if isinstance(value_type, str):
                return (False, model.defaults.default_for(value_type))
            return (False, None)

        try_get.__name__ = op.name
        yield op.name, try_get


_BUILDERS = {
    Family.CONSTRUCTION: _build_factory,
    Family.TESTING: _build_predicate,
    Family.EXTRACTION: _build_accessor,
    Family.DISPATCH: _build_dispatch,
    Family.EQUALITY: _build_equality,
    Family.HASHING: _build_hashing,
    Family.RENDERING: _build_rendering,
    Family.CONVERSION: _build_conversion,
}
