# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from tcres.classes.decls import ClassDecl, Constraint, InstanceDecl, MethodSig
from tcres.classes.errors import ArityMismatch, NoInstance, UnboundTypeVariable, UnknownClass
from tcres.classes.prelude import BOOL, INT, STRING, list_of, prelude_registry
from tcres.classes.registry import Registry
from tcres.classes.resolver import Resolver
from tcres.core.type_keys import con, var
from tcres.options import EngineOptions


def _prelude_resolver(**kwargs) -> Resolver:
	return Resolver(prelude_registry(options=EngineOptions(**kwargs)).seal())


def test_list_instance_uses_element_dictionary() -> None:
	d = _prelude_resolver().resolve("Eq", [list_of(INT)])
	assert d.invoke("eq", [1, 2], [1, 2]) is True
	assert d.invoke("eq", [1, 2], [1, 3]) is False
	assert d.requirement("Eq", INT) is d.context[0]
	assert [str(c) for c in d.requirements] == ["Eq Int"]


def test_nested_list_show() -> None:
	d = _prelude_resolver().resolve("Show", [list_of(list_of(STRING))])
	assert d.invoke("show", [["a"], []]) == '[["a"], []]'


def test_missing_context_instance_names_the_element_type() -> None:
	r = _prelude_resolver()
	with pytest.raises(NoInstance) as exc:
		r.resolve("Eq", [list_of(con("X"))])
	assert exc.value.class_name == "Eq"
	assert exc.value.type_heads == ("X",)
	assert any("required by instance 'Eq List<a>'" in note for note in exc.value.notes)


def test_failed_resolution_is_not_cached() -> None:
	r = _prelude_resolver()
	with pytest.raises(NoInstance):
		r.resolve("Ord", [list_of(con("X"))])
	assert r.cached(Constraint("Ord", (list_of(con("X")),))) is None


def test_resolution_is_cached_per_constraint() -> None:
	r = _prelude_resolver()
	first = r.resolve("Ord", [list_of(BOOL)])
	assert r.resolve("Ord", [list_of(BOOL)]) is first
	assert r.cached(Constraint("Ord", (BOOL,))) is first.context[0]


def test_uncached_resolutions_are_structurally_identical() -> None:
	r = _prelude_resolver(cache_dictionaries=False)
	a = r.resolve("Ord", [list_of(INT)])
	b = r.resolve("Ord", [list_of(INT)])
	assert a is not b
	assert a.signature() == b.signature()
	assert r.cached(Constraint("Ord", (list_of(INT),))) is None


def test_resolution_order_does_not_change_result() -> None:
	one = _prelude_resolver()
	two = _prelude_resolver()
	one.resolve("Eq", [INT])
	x = one.resolve("Eq", [list_of(INT)])
	y = two.resolve("Eq", [list_of(INT)])
	two.resolve("Eq", [INT])
	assert x.signature() == y.signature()


def test_concurrent_resolvers_share_one_dictionary() -> None:
	r = _prelude_resolver()
	with ThreadPoolExecutor(max_workers=8) as pool:
		results = list(pool.map(lambda _: r.resolve("Show", [list_of(INT)]), range(32)))
	assert all(d is results[0] for d in results)


def test_constraint_must_be_concrete_and_well_formed() -> None:
	r = _prelude_resolver()
	with pytest.raises(UnboundTypeVariable):
		r.resolve("Eq", [list_of(var("a"))])
	with pytest.raises(ArityMismatch):
		r.resolve("Eq", [INT, INT])
	with pytest.raises(UnknownClass):
		r.resolve("Hash", [INT])


def test_same_outer_constructor_but_nested_mismatch() -> None:
	reg = Registry()
	reg.register_class(ClassDecl(name="Key", params=("a",), methods=(MethodSig("key"),)))
	reg.register_instance(InstanceDecl("Key", (con("Pair", INT, var("b")),), {"key": lambda d, p: p[0]}))
	r = Resolver(reg.seal())
	assert r.resolve("Key", [con("Pair", INT, STRING)]).invoke("key", (7, "x")) == 7
	with pytest.raises(NoInstance) as exc:
		r.resolve("Key", [con("Pair", BOOL, STRING)])
	assert exc.value.notes


def test_multi_parameter_resolution_picks_by_position() -> None:
	reg = Registry()
	reg.register_class(ClassDecl(name="Convert", params=("a", "b"), methods=(MethodSig("convert"),)))
	reg.register_instance(InstanceDecl("Convert", (INT, STRING), {"convert": lambda d, n: str(n)}))
	reg.register_instance(InstanceDecl("Convert", (STRING, INT), {"convert": lambda d, s: int(s)}))
	r = Resolver(reg.seal())
	assert r.resolve("Convert", [INT, STRING]).invoke("convert", 12) == "12"
	assert r.resolve("Convert", [STRING, INT]).invoke("convert", "12") == 12


def test_resolver_requires_sealed_registry() -> None:
	with pytest.raises(ValueError):
		Resolver(prelude_registry())


def test_discharge_collects_sorted_diagnostics() -> None:
	r = _prelude_resolver()
	result = r.discharge(
		[
			Constraint.parse("Show Int"),
			Constraint.parse("Eq Widget"),
			Constraint.parse("Hash Int"),
			Constraint.parse("Show Int"),
		]
	)
	assert not result.ok
	assert [str(c) for c in result.dictionaries] == ["Show Int"]
	assert [d.code for d in result.diagnostics] == ["NoInstance", "UnknownClass"]
	assert all(d.phase == "resolve" for d in result.diagnostics)


def _growing_context_registry(**kwargs) -> Registry:
	reg = prelude_registry(options=EngineOptions(**kwargs))
	reg.register_instance(
		InstanceDecl(
			"Show",
			(con("Nest", var("a")),),
			{"show": lambda d, v: "nest"},
			context=(Constraint("Show", (con("Nest", list_of(var("a"))),)),),
		)
	)
	return reg.seal()


def test_growing_instance_context_is_reported_not_recursed() -> None:
	r = Resolver(_growing_context_registry())
	result = r.discharge([Constraint("Show", (con("Nest", INT),)), Constraint.parse("Show Int")])
	assert [str(c) for c in result.dictionaries] == ["Show Int"]
	(diag,) = result.diagnostics
	assert diag.code == "NoInstance"
	assert any("gave up after 64 nested constraints" in note for note in diag.notes)
	assert r.cached(Constraint("Show", (con("Nest", INT),))) is None


def test_resolution_depth_is_configurable() -> None:
	r = Resolver(_growing_context_registry(max_resolution_depth=3))
	with pytest.raises(NoInstance) as exc:
		r.resolve("Show", [con("Nest", INT)])
	assert exc.value.type_heads == ("Nest<List<List<List<List<Int>>>>>",)
	assert any("gave up after 3" in note for note in exc.value.notes)
