# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from tcres.classes.decls import Constraint
from tcres.core.type_keys import con, var
from tcres.core.type_parse import TypeSyntaxError, parse_constraint, parse_type


def test_parse_type_with_nested_arguments() -> None:
	assert parse_type("Map<String, List<a>>") == con("Map", con("String"), con("List", var("a")))
	assert parse_type("  Int ") == con("Int")
	assert parse_type("a") == var("a")


def test_parse_multi_parameter_constraint() -> None:
	assert parse_constraint("Convert Int List<String>") == ("Convert", (con("Int"), con("List", con("String"))))


def test_constraint_round_trips_through_rendering() -> None:
	c = Constraint.parse("Eq Pair<Int, List<b>>")
	assert c == Constraint("Eq", (con("Pair", con("Int"), con("List", var("b"))),))
	assert str(c) == "Eq Pair<Int, List<b>>"


@pytest.mark.parametrize("text", ["List<", "Int Int", "List<Int,>", "<Int>", ""])
def test_parse_type_rejects_malformed_text(text: str) -> None:
	with pytest.raises(TypeSyntaxError):
		parse_type(text)


def test_constraint_needs_a_class_and_a_type() -> None:
	with pytest.raises(TypeSyntaxError):
		parse_constraint("Eq")
	with pytest.raises(TypeSyntaxError):
		parse_constraint("eq Int")
