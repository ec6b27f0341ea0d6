import pytest

from graphmaker_layout.parser import parse_constraint
from graphmaker_layout.printer import coordinate, format_constraint, format_number, node_ref


def test_format_constraint_prints_canonical_form():
    parsed = parse_constraint("A.x = (B.x + C.x) / 2")

    assert format_constraint(parsed) == "A.x - 0.5*B.x - 0.5*C.x = 0"


def test_formatted_constraint_reparses_to_same_coefficients():
    parsed = parse_constraint("2 * A.x + 3 >= 'my node'.y - B.y")
    again = parse_constraint(format_constraint(parsed))

    assert again.coefs == parsed.coefs
    assert again.rhs == parsed.rhs
    assert again.relation is parsed.relation


def test_negative_rhs_and_leading_term():
    parsed = parse_constraint("-A.x <= 1")

    assert format_constraint(parsed) == "-A.x <= 1"


def test_coordinate_quotes_names_that_are_not_bare():
    assert coordinate("A", "x") == "A.x"
    assert coordinate("my node", "y") == "'my node'.y"
    assert node_ref("n-1:a") == "n-1:a"


@pytest.mark.parametrize("name", ["it's", "two\nlines", ""])
def test_unwritable_names_are_rejected(name):
    with pytest.raises(ValueError):
        node_ref(name)


def test_coordinate_rejects_unknown_axis():
    with pytest.raises(ValueError):
        coordinate("A", "z")


def test_format_number():
    assert format_number(2.0) == "2"
    assert format_number(-0.25) == "-0.25"
