import jinja2

from .kinds import Storage
from .operations import synthesize


def slot_of(leaf):
    "Describes where a leaf is stored, e.g. 'reason -> bucket[0]'."

    if leaf.storage == Storage.VALUE:
        return f"{leaf.name} -> value{leaf.index}"
    if leaf.storage == Storage.BUCKET:
        return f"{leaf.name} -> bucket[{leaf.index}]"
    return f"{leaf.name} -> (none)"


ENV = jinja2.Environment(
    loader=jinja2.PackageLoader("unionplan", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)
ENV.filters["slot_of"] = slot_of


def render_model(model, operations=None):
    "Returns a human readable description of the model's layout and operations."

    if operations is None:
        operations = synthesize(model)
    templ = ENV.get_template("union_model.jinja2")
    return str(templ.module.model_report(model, operations))


def render_operations(operations):
    templ = ENV.get_template("union_model.jinja2")
    return str(templ.module.operation_list(operations))
