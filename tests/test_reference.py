import pytest

from graphmaker_layout.parser import parse_constraint
from graphmaker_layout.reference import CONSTRAINT_BNF, CONSTRAINT_PROMPT, EXAMPLES, get_constraint_prompt


@pytest.mark.parametrize("example", EXAMPLES)
def test_every_example_parses(example):
    parse_constraint(example)


def test_bnf_lists_every_relation():
    for op in ("'='", "'<='", "'<'", "'>='", "'>'"):
        assert op in CONSTRAINT_BNF


def test_prompt_includes_bnf_and_examples_by_default():
    assert "SYNTAX REFERENCE (BNF)" in CONSTRAINT_PROMPT
    assert CONSTRAINT_BNF in CONSTRAINT_PROMPT
    assert EXAMPLES[0] in CONSTRAINT_PROMPT


def test_prompt_can_skip_sections():
    prompt = get_constraint_prompt(include_bnf=False, include_examples=False)

    assert "SYNTAX REFERENCE" not in prompt
    assert "EXAMPLES" not in prompt
