"""Maps the values of every case onto a shared set of storage slots.

The plan has three parts:

* the discriminant, which holds the tag of the active case;
* value slots, shared by position: the k-th value-kind leaf of every case lives
  in value slot k;
* a single overlay bucket for reference-like leaves. Each leaf gets a region
  keyed by (case name, leaf name). Regions of different cases may share a
  bucket position because only the active case's regions are ever read.

Decomposable values are expanded into their members first, so only leaves are
ever stored."""

import logging
from collections.abc import Mapping

from .errors import CyclicDecompositionError, DuplicateValueNameError, LayoutError
from .kinds import Storage, TypeKind, storage_for
from .names import join_name

logger = logging.getLogger(__name__)


class Leaf:
    "A stored value after decomposition, addressed by its path from the case."

    def __init__(self, case_name, path, declared_type, kind, constraint=None):
        self.case_name = case_name
        self.path = tuple(path)
        self.name = join_name(*self.path)
        self.declared_type = declared_type
        self.kind = kind
        self.constraint = constraint
        self.storage = storage_for(kind, constraint)
        self.index = None

    def key(self):
        return (
            self.name,
            self.declared_type,
            self.kind.value,
            self.storage.value,
            self.index,
        )

    def __repr__(self):
        return f"Leaf({self.case_name}.{self.name}: {self.declared_type} @ {self.storage.value}[{self.index}])"


class ValueNode:
    """A top-level or nested case value in the expanded tree.

    Exactly one of 'leaf' and 'children' is set. Composite nodes know how to
    rebuild the original value from their children through 'composer'."""

    def __init__(self, value, path, leaf=None, children=None, composer=None):
        self.value = value
        self.path = tuple(path)
        self.leaf = leaf
        self.children = [] if children is None else children
        self.composer = composer

    @property
    def is_leaf(self):
        return self.leaf is not None

    def leaves(self):
        if self.is_leaf:
            yield self.leaf
            return
        for child in self.children:
            yield from child.leaves()

    def decompose(self, argument):
        "Splits a factory argument into the values of this node's leaves."

        if self.is_leaf:
            yield argument
            return
        for position, child in enumerate(self.children):
            yield from child.decompose(_member(argument, child.value.name, position))

    def compose(self, leaf_values):
        "Rebuilds the factory argument from an iterator over leaf values."

        if self.is_leaf:
            return next(leaf_values)
        parts = [child.compose(leaf_values) for child in self.children]
        return self.composer(*parts)


def _member(argument, name, position):
    if isinstance(argument, Mapping):
        return argument[name]
    if isinstance(argument, (tuple, list)):
        return argument[position]
    return getattr(argument, name)


def expand(case, options, registry):
    """Expands the values of a case into a tree of ValueNodes.

    Raises CyclicDecompositionError if a composite (transitively) contains
    itself."""

    def visit(value, parent_path, expanding):
        path = parent_path + (value.name,)
        if value.kind != TypeKind.DECOMPOSABLE or not options.decompose_values:
            leaf = Leaf(case.name, path, value.declared_type, value.kind, value.constraint)
            return ValueNode(value, path, leaf=leaf)

        if value.declared_type in expanding:
            cycle = expanding[expanding.index(value.declared_type) :]
            raise CyclicDecompositionError(cycle + (value.declared_type,))

        members = registry.members_of(value)
        inner = expanding + (value.declared_type,)
        children = [visit(member, path, inner) for member in members]
        composer = registry.composer_of(value)
        if composer is None:
            composer = registry.default_composer(
                value.declared_type, [member.name for member in members]
            )
        return ValueNode(value, path, children=children, composer=composer)

    return [visit(value, (), ()) for value in case.values]


class Discriminant:
    "The slot holding the active tag."

    def __init__(self, name, tags):
        self.name = name
        # (tag, case name), ascending by tag.
        self.tags = tuple(sorted(tags))

    def key(self):
        return (self.name, self.tags)


class Slot:
    "A physical storage location and the case leaves that may occupy it."

    def __init__(self, index):
        self.index = index
        self.declared_types = []
        self.occupants = []

    @property
    def storage_type(self):
        "The declared type used to pick the default of the slot when it is inactive."
        return self.declared_types[0]

    def add(self, leaf):
        if leaf.declared_type not in self.declared_types:
            self.declared_types.append(leaf.declared_type)
        self.occupants.append((leaf.case_name, leaf.name))

    def key(self):
        return (self.index, tuple(self.declared_types), tuple(self.occupants))


class ValueSlot(Slot):
    "A value-kind slot shared by position across all cases."

    @property
    def name(self):
        return f"value{self.index}"


class BucketPosition(Slot):
    "A position of the overlay bucket, reinterpreted according to the active tag."


class OverlayBucket:
    "The single discriminated overlay holding every reference-like leaf."

    def __init__(self):
        self.positions = []
        self.regions = {}

    @property
    def size(self):
        return len(self.positions)

    def region(self, case_name, field_name):
        return self.regions[(case_name, field_name)]

    def place(self, leaf, index):
        while len(self.positions) <= index:
            self.positions.append(BucketPosition(len(self.positions)))
        self.positions[index].add(leaf)
        self.regions[(leaf.case_name, leaf.name)] = index

    def key(self):
        return (
            tuple(position.key() for position in self.positions),
            tuple(sorted(self.regions.items())),
        )


class CaseLayout:
    "Maps the logical values of one case to physical slots."

    def __init__(self, case, tag, roots):
        self.case = case
        self.tag = tag
        self.roots = roots

    @property
    def name(self):
        return self.case.name

    @property
    def leaves(self):
        return [leaf for root in self.roots for leaf in root.leaves()]

    def stored_leaves(self, storage):
        return [leaf for leaf in self.leaves if leaf.storage == storage]

    def key(self):
        return (self.case.name, self.tag, tuple(leaf.key() for leaf in self.leaves))


class SlotPlan:
    def __init__(self, discriminant, value_slots, bucket, case_layouts):
        self.discriminant = discriminant
        self.value_slots = value_slots
        self.bucket = bucket
        self.case_layouts = case_layouts
        self._by_name = {layout.name: layout for layout in case_layouts}

    def layout_of(self, case_name):
        return self._by_name[case_name]

    def key(self):
        return (
            self.discriminant.key(),
            tuple(slot.key() for slot in self.value_slots),
            self.bucket.key(),
            tuple(layout.key() for layout in self.case_layouts),
        )

    def __eq__(self, other):
        if not isinstance(other, SlotPlan):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())


def plan_layout(cases, tags, options, registry):
    """Computes the SlotPlan for the given cases.

    'tags' maps every case name to its (already validated) tag. The result
    depends only on the order of 'cases' and on 'options'."""

    value_slots = []
    bucket = OverlayBucket()
    case_layouts = []
    next_unshared = 0

    for case in cases:
        roots = expand(case, options, registry)
        layout = CaseLayout(case, tags[case.name], roots)

        names = set()
        for leaf in layout.leaves:
            if leaf.name in names:
                raise DuplicateValueNameError(case.name, leaf.name)
            names.add(leaf.name)

        for position, leaf in enumerate(layout.stored_leaves(Storage.VALUE)):
            if position == len(value_slots):
                value_slots.append(ValueSlot(position))
            leaf.index = position
            value_slots[position].add(leaf)

        for position, leaf in enumerate(layout.stored_leaves(Storage.BUCKET)):
            if options.share_reference_slots:
                leaf.index = position
            else:
                leaf.index = next_unshared
                next_unshared += 1
            bucket.place(leaf, leaf.index)

        _check_case(layout)
        case_layouts.append(layout)

    discriminant = Discriminant(
        options.tag_name, [(tags[case.name], case.name) for case in cases]
    )
    plan = SlotPlan(discriminant, value_slots, bucket, case_layouts)
    logger.debug(
        "planned %d cases: %d value slots, %d bucket positions (shared=%s)",
        len(case_layouts),
        len(value_slots),
        bucket.size,
        options.share_reference_slots,
    )
    return plan


def _check_case(layout):
    seen_slots = {}
    for leaf in layout.leaves:
        if leaf.storage == Storage.NONE:
            continue
        if leaf.index is None:
            raise LayoutError(layout.name, f"leaf {repr(leaf.name)} has no slot.")

        slot = (leaf.storage, leaf.index)
        if slot in seen_slots:
            raise LayoutError(
                layout.name,
                f"{repr(leaf.name)} and {repr(seen_slots[slot])} share {leaf.storage.value} slot {leaf.index}.",
            )
        seen_slots[slot] = leaf.name
