# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from tcres.classes.coherence import has_wildcard, keys_unify, matching_key, render_key
from tcres.core.type_keys import TypeHeadKey, con, var

INT = con("Int")


def test_matching_key_keeps_only_outer_constructors() -> None:
	assert matching_key((con("List", INT),)) == (TypeHeadKey("List", 1),)
	assert matching_key((con("List", var("a")),)) == matching_key((con("List", con("List", INT)),))
	assert matching_key((INT, var("b"))) == (TypeHeadKey("Int", 0), None)


def test_arity_is_part_of_the_key() -> None:
	assert matching_key((con("F", INT),)) != matching_key((con("F", INT, INT),))


def test_wildcards_unify_with_anything_in_their_position() -> None:
	int_any = matching_key((INT, var("b")))
	any_str = matching_key((var("a"), con("String")))
	str_any = matching_key((con("String"), var("b")))
	assert has_wildcard(int_any)
	assert keys_unify(int_any, any_str)
	assert not keys_unify(int_any, str_any)
	assert not keys_unify(int_any, matching_key((INT,)))


def test_render_key() -> None:
	assert render_key(matching_key((con("Map", INT, var("v")), var("a")))) == "Map/2 _"
