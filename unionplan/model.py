import logging

from .descriptors import CompositeRegistry
from .errors import (
    DescriptorError,
    DuplicateCaseNameError,
    DuplicateFactoryNameError,
    DuplicateTagError,
    DuplicateValueNameError,
    InvalidOptionError,
    InvalidTagError,
    UnknownCaseError,
)
from .layout import plan_layout
from .names import is_identifier
from .options import TypeBindings, TypeDefaults, UnionOptions

logger = logging.getLogger(__name__)

# Members installed on every realized union class.
RESERVED_MEMBERS = (
    "match",
    "matcher",
    "visit",
    "case_name",
    "model",
    "operations",
    "try_create_from",
    "try_get",
)


class UnionModel:
    """A validated union bound to its slot plan.

    Models are built once, from the complete list of cases, by build_model().
    They are never modified afterwards and may be shared freely."""

    def __init__(self, name, cases, tags, plan, options, defaults, registry, types=None):
        self.name = name
        self.cases = tuple(cases)
        self.tags = dict(tags)
        self.plan = plan
        self.options = options
        self.defaults = defaults
        self.registry = registry
        self.types = TypeBindings() if types is None else types
        self._by_name = {case.name: case for case in self.cases}
        self._by_tag = {tag: self._by_name[name] for name, tag in self.tags.items()}

    def case(self, name):
        if name not in self._by_name:
            raise UnknownCaseError(self.name, name)
        return self._by_name[name]

    def case_for_tag(self, tag):
        if tag not in self._by_tag:
            raise UnknownCaseError(self.name, tag)
        return self._by_tag[tag]

    def tag_of(self, case):
        return self.tags[_case_name(case)]

    def layout_of(self, case):
        return self.plan.layout_of(_case_name(case))

    def cases_by_tag(self):
        "Returns all cases, ordered by ascending tag."
        return sorted(self.cases, key=lambda case: self.tags[case.name])

    @property
    def is_tags_only(self):
        return all(case.is_singleton for case in self.cases)

    def __repr__(self):
        return f"UnionModel({repr(self.name)}, cases={[case.name for case in self.cases]})"


def _case_name(case):
    return case if isinstance(case, str) else case.name


def build_model(name, cases, options=None, registry=None, defaults=None, types=None):
    """Validates the cases of a union and computes its layout.

    This is the only way to create a UnionModel. Every problem with the
    description is reported here, before any instance can be constructed."""

    if not is_identifier(name):
        raise DescriptorError(f"Invalid union name: {repr(name)}.")
    cases = list(cases)
    if not cases:
        raise DescriptorError(f"Union {repr(name)} has no cases.")

    options = UnionOptions() if options is None else options
    registry = CompositeRegistry() if registry is None else registry
    if not isinstance(defaults, TypeDefaults):
        defaults = TypeDefaults(defaults)
    if not isinstance(types, TypeBindings):
        types = TypeBindings(types)

    _check_case_names(cases)
    _check_member_names(cases, options)
    _check_value_names(cases)
    tags = assign_tags(cases)

    plan = plan_layout(cases, tags, options, registry)
    model = UnionModel(name, cases, tags, plan, options, defaults, registry, types)
    logger.debug(
        "built union %s with tags %s",
        name,
        ", ".join(f"{case.name}={tags[case.name]}" for case in model.cases_by_tag()),
    )
    return model


def assign_tags(cases):
    """Returns a mapping from case name to tag.

    Explicit tags are kept as they are. Cases without a tag receive, in
    declaration order, the smallest positive integer not used by any other
    case."""

    tags = {}
    owners = {}
    for case in cases:
        if case.tag is None:
            continue
        if isinstance(case.tag, bool) or not isinstance(case.tag, int) or case.tag < 0:
            raise InvalidTagError(case.name, case.tag)
        if case.tag in owners:
            raise DuplicateTagError(case.tag, owners[case.tag], case.name)
        owners[case.tag] = case.name
        tags[case.name] = case.tag

    next_tag = 1
    for case in cases:
        if case.tag is not None:
            continue
        while next_tag in owners:
            next_tag += 1
        owners[next_tag] = case.name
        tags[case.name] = next_tag

    return tags


def _check_case_names(cases):
    seen = set()
    for case in cases:
        if case.name in seen:
            raise DuplicateCaseNameError(case.name)
        seen.add(case.name)


def _check_member_names(cases, options):
    factories = {}
    for case in cases:
        if not is_identifier(case.factory_name):
            raise DescriptorError(
                f"Invalid factory name for case {repr(case.name)}: {repr(case.factory_name)}."
            )
        if case.factory_name in factories:
            raise DuplicateFactoryNameError(
                case.factory_name, factories[case.factory_name], case.name
            )
        factories[case.factory_name] = case.name

    for option in ("tag_name", "tag_type_name"):
        value = getattr(options, option)
        if value in RESERVED_MEMBERS:
            raise InvalidOptionError(option, value)
    if options.tag_name == options.tag_type_name:
        raise InvalidOptionError("tag_type_name", options.tag_type_name)

    # Derived class members must not collide across cases or with the members
    # every realized union carries.
    members = dict(factories)
    for reserved in RESERVED_MEMBERS + (options.tag_name, options.tag_type_name):
        if reserved in members:
            raise DescriptorError(
                f"Factory {repr(reserved)} of case {repr(members[reserved])} shadows a union member."
            )
        members[reserved] = None
    for case in cases:
        derived = [
            case.predicate_name,
            case.accessor_name,
            case.try_accessor_name,
            case.default_accessor_name,
        ]
        for member in derived:
            _claim(members, member, case.name)

    handlers = {"otherwise": None}
    for case in cases:
        _claim(handlers, case.argument_name, case.name)


def _claim(names, name, owner):
    if not is_identifier(name):
        raise DescriptorError(f"Invalid member name for case {repr(owner)}: {repr(name)}.")
    if name in names and names[name] != owner:
        first = "the union" if names[name] is None else repr(names[name])
        raise DescriptorError(f"Name {repr(name)} is used by both {first} and {repr(owner)}.")
    names[name] = owner


def _check_value_names(cases):
    for case in cases:
        seen = set()
        for value in case.values:
            if value.name in seen:
                raise DuplicateValueNameError(case.name, value.name)
            seen.add(value.name)
