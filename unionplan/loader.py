# Builds union models from plain mappings, e.g. parsed JSON:
#
#   {
#     "name": "Result",
#     "options": {"share_reference_slots": false},
#     "composites": [{"name": "Point", "members": [...]}],
#     "cases": [
#       {"name": "Success", "tag": 1, "values": [{"name": "value", "type": "Int"}]},
#       {"name": "Failure", "values": [{"name": "reason", "type": "String", "kind": "reference"}]}
#     ]
#   }

from .descriptors import Case, Composite, CompositeRegistry, Value
from .errors import DescriptorError
from .kinds import TypeKind
from .model import build_model
from .options import FLAGS, UnionOptions

_OPTION_KEYS = FLAGS + ("tag_name", "tag_type_name")


def _require(data, key, where):
    if not isinstance(data, dict):
        raise DescriptorError(f"Expected an object for {where}, got {type(data).__name__}.")
    if key not in data:
        raise DescriptorError(f"Missing {repr(key)} in {where}.")
    return data[key]


def _string(data, key, where):
    value = _require(data, key, where)
    if not isinstance(value, str):
        raise DescriptorError(f"{repr(key)} in {where} must be a string, got {type(value).__name__}.")
    return value


def _list(data, key, where):
    items = data.get(key, [])
    if not isinstance(items, list):
        raise DescriptorError(f"{repr(key)} in {where} must be a list.")
    return items


def load_value(data, where="value"):
    name = _string(data, "name", where)
    where = f"{where} {repr(name)}"
    declared_type = _string(data, "type", where)

    kind_name = data.get("kind", TypeKind.VALUE.value)
    try:
        kind = TypeKind(kind_name)
    except ValueError:
        raise DescriptorError(f"Unknown kind {repr(kind_name)} in {where}.") from None

    children = [load_value(child, f"member of {where}") for child in _list(data, "children", where)]
    return Value(
        name,
        declared_type,
        kind,
        children=children,
        constraint=data.get("constraint"),
        doc=data.get("doc"),
    )


def load_case(data):
    name = _string(data, "name", "case")
    where = f"case {repr(name)}"
    values = [load_value(value, f"value of {where}") for value in _list(data, "values", where)]
    return Case(
        name,
        values=values,
        tag=data.get("tag"),
        factory_name=data.get("factory"),
        doc=data.get("doc"),
    )


def load_composite(data):
    name = _string(data, "name", "composite")
    where = f"composite {repr(name)}"
    members = [load_value(member, f"member of {where}") for member in _list(data, "members", where)]
    return Composite(name, members, doc=data.get("doc"))


def load_options(data, overrides=None):
    if data is not None and not isinstance(data, dict):
        raise DescriptorError(f"'options' must be an object, got {type(data).__name__}.")
    data = dict(data or {})
    data.update(overrides or {})
    unknown = sorted(set(data) - set(_OPTION_KEYS))
    if unknown:
        raise DescriptorError(f"Unknown options: {', '.join(unknown)}.")
    return UnionOptions(**data)


def load_union(data, option_overrides=None):
    """Builds and validates the union described by 'data'.

    'option_overrides' take precedence over the options stored in 'data'."""

    name = _string(data, "name", "union")
    cases = [load_case(case) for case in _list(data, "cases", f"union {repr(name)}")]
    registry = CompositeRegistry(
        [load_composite(c) for c in _list(data, "composites", f"union {repr(name)}")]
    )
    options = load_options(data.get("options"), option_overrides)
    defaults = data.get("defaults")
    if defaults is not None and not isinstance(defaults, dict):
        raise DescriptorError(f"'defaults' of union {repr(name)} must be an object.")
    return build_model(name, cases, options, registry, defaults)
