# Commonly used unions, declared with the same descriptors as user unions.

from .descriptors import Alias, Case
from .kinds import TypeKind
from .model import build_model
from .runtime import realize

OPTION = build_model(
    "Option",
    [
        Case("None", tag=0, doc="No value is present."),
        Alias("Some", "T", TypeKind.TYPE_PARAMETER, tag=1, doc="A present value."),
    ],
)

RESULT = build_model(
    "Result",
    [
        Alias("Success", "T", TypeKind.TYPE_PARAMETER, tag=1, doc="The operation succeeded."),
        Alias("Failure", "E", TypeKind.TYPE_PARAMETER, tag=2, doc="The operation failed."),
    ],
)

Option = realize(OPTION, module=__name__)
Result = realize(RESULT, module=__name__)


def map_result(result, when_success):
    "Applies 'when_success' to the value of a successful result."

    return result.match(
        success=lambda value: Result.make_success(when_success(value)),
        failure=lambda error: result,
    )


def bind_result(result, when_success):
    "Like map_result(), but 'when_success' returns a Result itself."

    return result.match(success=when_success, failure=lambda error: result)


def option_or(option, default):
    ok, value = option.try_as_some()
    return value if ok else default
