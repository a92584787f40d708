from .errors import InvalidOptionError
from .names import is_identifier

FLAGS = (
    "generate_equality",
    "generate_hashing",
    "generate_to_string",
    "generate_exhaustive_match",
    "share_reference_slots",
    "decompose_values",
    "generate_type_conversions",
)


class UnionOptions:
    """Configuration of a single union.

    Every generate_* flag toggles one family of operations. share_reference_slots
    controls whether reference values of different cases may occupy the same
    overlay position. decompose_values controls whether decomposable values are
    inlined at all. generate_type_conversions adds try_create_from() and
    try_get(), which pick a case by the python type of its single value."""

    def __init__(
        self,
        generate_equality=True,
        generate_hashing=True,
        generate_to_string=True,
        generate_exhaustive_match=True,
        share_reference_slots=True,
        decompose_values=True,
        generate_type_conversions=False,
        tag_name="tag",
        tag_type_name="Case",
    ):
        self.generate_equality = _flag("generate_equality", generate_equality)
        self.generate_hashing = _flag("generate_hashing", generate_hashing)
        self.generate_to_string = _flag("generate_to_string", generate_to_string)
        self.generate_exhaustive_match = _flag(
            "generate_exhaustive_match", generate_exhaustive_match
        )
        self.share_reference_slots = _flag(
            "share_reference_slots", share_reference_slots
        )
        self.decompose_values = _flag("decompose_values", decompose_values)
        self.generate_type_conversions = _flag(
            "generate_type_conversions", generate_type_conversions
        )
        self.tag_name = _name("tag_name", tag_name)
        self.tag_type_name = _name("tag_type_name", tag_type_name)

    def set_equality(self, which):
        self.generate_equality = _flag("generate_equality", which)
        return self

    def set_hashing(self, which):
        self.generate_hashing = _flag("generate_hashing", which)
        return self

    def set_to_string(self, which):
        self.generate_to_string = _flag("generate_to_string", which)
        return self

    def set_exhaustive_match(self, which):
        self.generate_exhaustive_match = _flag("generate_exhaustive_match", which)
        return self

    def set_share_reference_slots(self, which):
        self.share_reference_slots = _flag("share_reference_slots", which)
        return self

    def set_decompose_values(self, which):
        self.decompose_values = _flag("decompose_values", which)
        return self

    def set_type_conversions(self, which):
        self.generate_type_conversions = _flag("generate_type_conversions", which)
        return self

    def set_tag_name(self, name):
        self.tag_name = _name("tag_name", name)
        return self

    def set_tag_type_name(self, name):
        self.tag_type_name = _name("tag_type_name", name)
        return self

    def copy(self):
        return UnionOptions(**self.as_dict())

    def as_dict(self):
        result = {flag: getattr(self, flag) for flag in FLAGS}
        result["tag_name"] = self.tag_name
        result["tag_type_name"] = self.tag_type_name
        return result

    def key(self):
        return tuple(sorted(self.as_dict().items()))

    def __eq__(self, other):
        if not isinstance(other, UnionOptions):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        args = ", ".join(f"{k}={repr(v)}" for k, v in self.as_dict().items())
        return f"UnionOptions({args})"


def _flag(option, which):
    if not isinstance(which, bool):
        raise InvalidOptionError(option, which)
    return which


def _name(option, name):
    if not is_identifier(name):
        raise InvalidOptionError(option, name)
    return name


_NUMERIC = (
    "int", "Int", "integer", "Integer", "long", "Long", "short", "Short",
    "byte", "Byte", "sbyte", "ushort", "uint", "ulong",
    "i8", "i16", "i32", "i64", "u8", "u16", "u32", "u64", "size_t",
)
_FLOAT = ("float", "Float", "double", "Double", "f32", "f64", "decimal", "Decimal")
_BOOL = ("bool", "Bool", "boolean", "Boolean")
_TEXT = ("str", "String", "string", "char", "Char")

BUILTIN_DEFAULTS = {}
BUILTIN_DEFAULTS.update((name, 0) for name in _NUMERIC)
BUILTIN_DEFAULTS.update((name, 0.0) for name in _FLOAT)
BUILTIN_DEFAULTS.update((name, False) for name in _BOOL)
BUILTIN_DEFAULTS.update((name, "") for name in _TEXT)
BUILTIN_DEFAULTS.update({"bytes": b"", "None": None, "object": None})


class TypeDefaults:
    """Maps declared type names to their default values.

    An inactive slot always holds the default of its type, which is what failed
    try-accessors return as well. Callables are invoked for every default so that
    mutable defaults are never shared between instances. Unknown types default
    to None."""

    def __init__(self, overrides=None):
        self._defaults = dict(BUILTIN_DEFAULTS)
        if overrides:
            self._defaults.update(overrides)

    def default_for(self, declared_type):
        default = self._defaults.get(declared_type)
        if callable(default):
            return default()
        return default

    def knows(self, declared_type):
        return declared_type in self._defaults

    def with_overrides(self, overrides):
        result = TypeDefaults()
        result._defaults = dict(self._defaults)
        result._defaults.update(overrides)
        return result


BUILTIN_TYPES = {}
BUILTIN_TYPES.update((name, int) for name in _NUMERIC)
BUILTIN_TYPES.update((name, float) for name in _FLOAT)
BUILTIN_TYPES.update((name, bool) for name in _BOOL)
BUILTIN_TYPES.update((name, str) for name in _TEXT)
BUILTIN_TYPES["bytes"] = bytes


class TypeBindings:
    """Maps declared type names to python types.

    Only needed for type conversions, where a case is selected by the type of
    a python value. Declared types without a binding (type parameters, for
    example) never match."""

    def __init__(self, overrides=None):
        self._types = dict(BUILTIN_TYPES)
        if overrides:
            for name, python_type in overrides.items():
                if not isinstance(python_type, type):
                    raise InvalidOptionError(f"types[{repr(name)}]", python_type)
            self._types.update(overrides)

    def python_type(self, declared_type):
        return self._types.get(declared_type)
