import keyword
import re

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def camel_to_snake(name):
    "Converts CamelCase names to snake_case."

    name = _FIRST_CAP.sub(r"\1_\2", name)
    return _ALL_CAP.sub(r"\1_\2", name).lower()


def avoid_keyword(name):
    "Appends an underscore to names that would otherwise be python keywords."

    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return name + "_"
    return name


def join_name(*parts):
    return "_".join(part for part in parts if part)


def is_identifier(name):
    return isinstance(name, str) and name.isidentifier()
