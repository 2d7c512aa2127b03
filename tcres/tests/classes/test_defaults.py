# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from tcres.classes.decls import ClassDecl, DefaultBody, InstanceDecl, MethodSig
from tcres.classes.defaults import DefaultDependencyGraph
from tcres.classes.dictionary import ImplOrigin
from tcres.classes.errors import MissingMethod, UnresolvableDefaults
from tcres.classes.prelude import INT, prelude_registry
from tcres.classes.registry import Registry
from tcres.classes.resolver import Resolver
from tcres.core.type_keys import con


def _mutual() -> ClassDecl:
	return ClassDecl(
		name="Mutual",
		params=("t",),
		methods=(MethodSig("a"), MethodSig("b")),
		defaults={
			"a": DefaultBody(calls=("b",), fn=lambda d: d.invoke("b") - 1),
			"b": DefaultBody(calls=("a",), fn=lambda d: d.invoke("a") + 1),
		},
	)


def _ring() -> ClassDecl:
	return ClassDecl(
		name="Ring",
		params=("t",),
		methods=(MethodSig("x"), MethodSig("y"), MethodSig("z"), MethodSig("w")),
		defaults={
			"x": DefaultBody(calls=("y",)),
			"y": DefaultBody(calls=("z",)),
			"z": DefaultBody(calls=("x",)),
			"w": DefaultBody(calls=("x",)),
		},
	)


def test_mutual_defaults_without_base_case_report_cycle() -> None:
	reg = Registry()
	reg.register_class(_mutual())
	with pytest.raises(UnresolvableDefaults) as exc:
		reg.register_instance(InstanceDecl("Mutual", (INT,), {}))
	assert exc.value.cycle == ("a", "b")
	assert exc.value.class_name == "Mutual"
	assert reg.instances_of("Mutual") == ()
	diag = exc.value.to_diagnostic()
	assert diag.notes[0] == "cycle: a -> b -> a"


def test_one_explicit_method_breaks_the_cycle() -> None:
	reg = Registry()
	reg.register_class(_mutual())
	reg.register_instance(InstanceDecl("Mutual", (INT,), {"a": lambda d: 41}))
	d = Resolver(reg.seal()).resolve("Mutual", [INT])
	assert d["a"].origin is ImplOrigin.EXPLICIT
	assert d["b"].origin is ImplOrigin.DEFAULT
	assert d["b"].calls == ("a",)
	assert d.invoke("b") == 42


def test_graph_edges_follow_default_calls() -> None:
	graph = DefaultDependencyGraph.from_class(_ring())
	assert graph.methods == ("x", "y", "z", "w")
	assert graph.edges["w"] == ("x",)
	assert graph.has_default("z")


def test_cycle_search_is_ordered_and_respects_explicit_methods() -> None:
	graph = DefaultDependencyGraph.from_class(_ring())
	assert graph.find_unproductive_cycle(set()) == ["x", "y", "z"]
	assert graph.find_unproductive_cycle({"y"}) is None
	assert graph.find_unproductive_cycle({"w"}) == ["x", "y", "z"]


def test_self_calling_default_is_a_cycle() -> None:
	decl = ClassDecl(
		name="Loop",
		params=("t",),
		methods=(MethodSig("m"),),
		defaults={"m": DefaultBody(calls=("m",))},
	)
	assert DefaultDependencyGraph.from_class(decl).find_unproductive_cycle(set()) == ["m"]


def test_method_without_default_must_be_implemented() -> None:
	reg = Registry()
	reg.register_class(
		ClassDecl(
			name="Sized",
			params=("t",),
			methods=(MethodSig("size"), MethodSig("is_empty")),
			defaults={"is_empty": DefaultBody(calls=("size",), fn=lambda d, v: d.invoke("size", v) == 0)},
		)
	)
	with pytest.raises(MissingMethod) as exc:
		reg.register_instance(InstanceDecl("Sized", (con("Bag"),), {}))
	assert "'size'" in exc.value.message
	reg.register_instance(InstanceDecl("Sized", (con("Bag"),), {"size": lambda d, v: len(v)}))
	d = Resolver(reg.seal()).resolve("Sized", [con("Bag")])
	assert d.invoke("is_empty", []) is True


def test_prelude_show_instance_needs_show_or_show_prec() -> None:
	reg = prelude_registry()
	with pytest.raises(UnresolvableDefaults) as exc:
		reg.register_instance(InstanceDecl("Show", (con("Color"),), {}))
	assert exc.value.cycle == ("show_prec", "show")


def test_prelude_eq_fills_neq_from_eq() -> None:
	d = Resolver(prelude_registry().seal()).resolve("Eq", [INT])
	assert d.invoke("neq", 1, 2) is True
	assert d.invoke("neq", 3, 3) is False
	assert d["neq"].target() == "not eq"
