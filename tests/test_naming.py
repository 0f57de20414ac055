"""Identifier case conversion tests."""

from __future__ import annotations

import pytest

from kitgen.naming import camel_case, hyphen_case, pascal_case, snake_case, split_words


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("GetOrder", ["Get", "Order"]),
        ("get_order", ["get", "order"]),
        ("HTTPServer", ["HTTP", "Server"]),
        ("user-profile", ["user", "profile"]),
        ("v2Api", ["v2", "Api"]),
    ],
)
def test_split_words(value: str, expected: list[str]) -> None:
    assert split_words(value) == expected


def test_case_conversions_agree_on_words() -> None:
    assert pascal_case("get_order") == "GetOrder"
    assert camel_case("GetOrder") == "getOrder"
    assert snake_case("GetOrder") == "get_order"
    assert hyphen_case("GetOrder") == "get-order"


def test_camel_case_lowers_leading_acronym() -> None:
    assert camel_case("HTTPStatus") == "httpStatus"
    assert camel_case("") == ""
