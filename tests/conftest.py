import pytest

from unionplan import Alias, Case, TypeKind, Value, build_model, realize


def result_cases():
    return [
        Case("Success", values=[Value("value", "Int")], tag=1),
        Case("Failure", values=[Value("reason", "String", TypeKind.REFERENCE)], tag=2),
    ]


def shape_cases():
    return [
        Case("Circle", values=[Value("radius", "float"), Value("label", "str", TypeKind.REFERENCE)]),
        Case(
            "Rect",
            values=[
                Value("width", "float"),
                Value("height", "float"),
                Value("label", "str", TypeKind.REFERENCE),
                Value("owner", "object", TypeKind.REFERENCE),
            ],
        ),
        Case("Empty"),
    ]


@pytest.fixture
def result_model():
    return build_model("Result", result_cases())


@pytest.fixture
def Result(result_model):
    return realize(result_model)


@pytest.fixture
def option_model():
    return build_model(
        "Option",
        [Case("None", tag=0), Alias("Some", "Int", tag=1)],
    )


@pytest.fixture
def Option(option_model):
    return realize(option_model)


@pytest.fixture
def shape_model():
    return build_model("Shape", shape_cases())


@pytest.fixture
def Shape(shape_model):
    return realize(shape_model)
