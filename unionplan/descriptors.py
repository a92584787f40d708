# Describes unions: their cases, the values carried by each case and the
# composite types that decomposable values are inlined from.

from collections import namedtuple

from .errors import DescriptorError, UnknownCompositeError
from .kinds import TYPE_PARAMETER_CONSTRAINTS, TypeKind
from .names import avoid_keyword, camel_to_snake, is_identifier


class Value:
    "A named, typed payload slot carried by a case."

    def __init__(
        self,
        name,
        declared_type,
        kind=TypeKind.VALUE,
        children=None,
        constraint=None,
        composer=None,
        doc=None,
    ):
        if not is_identifier(name):
            raise DescriptorError(f"Invalid value name: {repr(name)}.")
        if not isinstance(kind, TypeKind):
            raise DescriptorError(f"Invalid kind for value {repr(name)}: {repr(kind)}.")
        if children and kind != TypeKind.DECOMPOSABLE:
            raise DescriptorError(
                f"Only decomposable values may have children ({repr(name)} is {kind.value})."
            )
        if constraint not in TYPE_PARAMETER_CONSTRAINTS:
            raise DescriptorError(f"Invalid constraint: {repr(constraint)}.")
        if constraint is not None and kind != TypeKind.TYPE_PARAMETER:
            raise DescriptorError(
                f"Only type parameters may be constrained ({repr(name)} is {kind.value})."
            )

        self.name = name
        self.argument_name = avoid_keyword(name)
        self.declared_type = declared_type
        self.kind = kind
        self.children = list(children) if children else []
        self.constraint = constraint
        self.composer = composer
        self.doc = doc

    @property
    def is_decomposable(self):
        return self.kind == TypeKind.DECOMPOSABLE

    def set_argument_name(self, argument_name):
        self.argument_name = argument_name
        return self

    def set_composer(self, composer):
        self.composer = composer
        return self


class Case:
    """One alternative of a union.

    A case without values is a singleton. Tags are explicit integers so that
    regenerating a union never renumbers them; a tag of None is assigned
    automatically when the model is built."""

    def __init__(self, name, values=None, tag=None, factory_name=None, doc=None):
        if not is_identifier(name):
            raise DescriptorError(f"Invalid case name: {repr(name)}.")

        self.name = name
        self.tag = tag
        self.values = [] if values is None else list(values)
        self.doc = doc

        snake = camel_to_snake(name)
        self.argument_name = avoid_keyword(snake)
        self.factory_name = "make_" + snake if factory_name is None else factory_name
        self.predicate_name = "is_" + snake
        self.try_accessor_name = "try_as_" + snake
        self.accessor_name = "as_" + snake
        self.default_accessor_name = "as_" + snake + "_or_default"
        self.visit_name = "visit_" + snake

    @property
    def payload_values(self):
        "Returns the values passed to the factory and returned by the accessors."
        return [value for value in self.values if value.kind != TypeKind.SINGLETON]

    @property
    def is_singleton(self):
        # Zero-size markers carry nothing, so a case made only of them is a
        # singleton as well.
        return len(self.payload_values) == 0

    def set_tag(self, tag):
        self.tag = tag
        return self

    def set_factory_name(self, factory_name):
        self.factory_name = factory_name
        return self

    def set_argument_name(self, argument_name):
        self.argument_name = argument_name
        return self

    def set_accessor_name(self, accessor_name):
        self.accessor_name = accessor_name
        self.try_accessor_name = "try_" + accessor_name
        self.default_accessor_name = accessor_name + "_or_default"
        return self


class Alias(Case):
    "A case carrying exactly one value named 'value'."

    def __init__(
        self,
        name,
        target,
        kind=TypeKind.VALUE,
        tag=None,
        factory_name=None,
        constraint=None,
        doc=None,
    ):
        super().__init__(
            name,
            values=[Value("value", target, kind, constraint=constraint)],
            tag=tag,
            factory_name=factory_name,
            doc=doc,
        )
        self.target = target


class Composite:
    "A decomposable type whose members are inlined into the cases that carry it."

    def __init__(self, name, members=None, composer=None, doc=None):
        self.name = name
        self.members = [] if members is None else list(members)
        self.composer = composer
        self.doc = doc


class CompositeRegistry:
    "A collection of composite types that decomposable values can refer to by name."

    def __init__(self, composites=None):
        self.composites = {}
        self._composers = {}
        self.__add_all(*(composites or ()))

    def get(self, name):
        "Returns the composite with the given name."

        if name not in self.composites:
            raise UnknownCompositeError(name)
        return self.composites[name]

    def __contains__(self, name):
        return name in self.composites

    def add(self, composite):
        self.__add_all(composite)
        return self

    def __add_all(self, *composites):
        for composite in composites:
            name = composite.name
            if name in self.composites:
                raise DescriptorError(f"Composite {repr(name)} was already defined.")

            self.composites[name] = composite

    def members_of(self, value):
        """Returns the members a decomposable value is inlined into.

        Inline children take precedence over the registered composite."""

        if value.children:
            return value.children
        return self.get(value.declared_type).members

    def composer_of(self, value):
        if value.composer is not None:
            return value.composer
        if not value.children and value.declared_type in self.composites:
            return self.composites[value.declared_type].composer
        return None

    def default_composer(self, type_name, member_names):
        "Returns the named tuple type used to rebuild decomposed values of a type."

        key = (type_name, tuple(member_names))
        if key not in self._composers:
            type_ident = "".join(ch if ch.isalnum() else "_" for ch in type_name)
            if not type_ident.isidentifier():
                type_ident = "Composite_" + type_ident
            self._composers[key] = namedtuple(type_ident, member_names, rename=True)
        return self._composers[key]

