# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from tcres.core.type_keys import (
	TypeHeadKey,
	con,
	free_vars,
	is_concrete,
	match_types,
	render_type,
	substitute,
	var,
)

INT = con("Int")
BOOL = con("Bool")


def test_render_nested_constructors_and_variables() -> None:
	term = con("Map", con("String"), con("List", var("a")))
	assert render_type(term) == "Map<String, List<a>>"
	assert str(INT) == "Int"


def test_head_is_outer_constructor_with_arity() -> None:
	assert con("List", INT).head() == TypeHeadKey(name="List", arity=1)
	assert con("Pair", INT, BOOL).head() == TypeHeadKey(name="Pair", arity=2)
	assert var("a").head() is None


def test_free_vars_in_first_occurrence_order() -> None:
	term = con("F", var("b"), con("G", var("a")), var("b"))
	assert free_vars(term) == ["b", "a"]
	assert not is_concrete(term)
	assert is_concrete(con("List", INT))


def test_match_binds_variables_consistently() -> None:
	pattern = (con("Pair", var("a"), var("a")),)
	assert match_types(pattern, (con("Pair", INT, INT),)) == {"a": INT}
	assert match_types(pattern, (con("Pair", INT, BOOL),)) is None


def test_match_rejects_different_constructor_or_arity() -> None:
	assert match_types((con("List", var("a")),), (con("Set", INT),)) is None
	assert match_types((con("List", var("a")),), (con("List"),)) is None
	assert match_types((INT,), (INT, INT)) is None


def test_substitute_replaces_bound_variables_only() -> None:
	term = con("Pair", var("a"), con("List", var("b")))
	assert substitute(term, {"a": INT}) == con("Pair", INT, con("List", var("b")))
