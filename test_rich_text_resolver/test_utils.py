import pytest

from rich_text_resolver.utils import exactly_one


def test_exactly_one_accepts_a_single_non_empty_argument():
    exactly_one(filename="blocks.json", text="")
    exactly_one(filename=None, text="[]")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"filename": "", "text": ""},
        {"filename": None, "text": None},
        {"filename": "a", "text": "b"},
    ],
)
def test_exactly_one_raises_otherwise(kwargs):
    with pytest.raises(ValueError, match="Exactly one of filename and text must be specified."):
        exactly_one(**kwargs)


def test_exactly_one_names_a_lone_argument_in_its_message():
    with pytest.raises(ValueError, match="filename must be specified."):
        exactly_one(filename="")
