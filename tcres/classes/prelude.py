# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Standard classes and primitive instances.

`Eq`, `Ord` and `Show` follow the familiar minimal-complete-definition
pattern: their defaults call each other, so an instance must supply at least
one method of each cycle (`eq` or `neq`; `compare` or `le`; `show` or
`show_prec`). Values of the primitive types are plain Python values: `Int` is
`int`, `Bool` is `bool`, `String` is `str` and `List<a>` is any sequence.
"""

from __future__ import annotations

from typing import Optional, Tuple

from tcres.core.type_keys import TypeKey, TypeTerm, con, var
from tcres.options import EngineOptions

from .decls import ClassDecl, Constraint, DefaultBody, InstanceDecl, MethodSig
from .merge import DeclUnit
from .registry import Registry

BOOL = con("Bool")
INT = con("Int")
STRING = con("String")


def list_of(elem: TypeTerm) -> TypeKey:
	return con("List", elem)


def _fn(*terms: TypeTerm) -> TypeKey:
	return con("Fn", *terms)


# -- defaults ------------------------------------------------------------------


def _compare_via_le(d, x, y) -> int:
	if d.invoke("le", x, y):
		return 0 if d.invoke("le", y, x) else -1
	return 1


def _show_prec_via_show(d, _prec, x) -> str:
	return d.invoke("show", x)


def prelude_classes() -> Tuple[ClassDecl, ...]:
	a = var("a")
	eq = ClassDecl(
		name="Eq",
		params=("a",),
		methods=(MethodSig("eq", _fn(a, a, BOOL)), MethodSig("neq", _fn(a, a, BOOL))),
		defaults={
			"eq": DefaultBody(calls=("neq",), fn=lambda d, x, y: not d.invoke("neq", x, y), description="not neq"),
			"neq": DefaultBody(calls=("eq",), fn=lambda d, x, y: not d.invoke("eq", x, y), description="not eq"),
		},
	)
	ord_ = ClassDecl(
		name="Ord",
		params=("a",),
		methods=(
			MethodSig("compare", _fn(a, a, INT)),
			MethodSig("lt", _fn(a, a, BOOL)),
			MethodSig("le", _fn(a, a, BOOL)),
			MethodSig("gt", _fn(a, a, BOOL)),
			MethodSig("ge", _fn(a, a, BOOL)),
			MethodSig("max", _fn(a, a, a)),
			MethodSig("min", _fn(a, a, a)),
		),
		defaults={
			"compare": DefaultBody(calls=("le",), fn=_compare_via_le, description="compare via le"),
			"lt": DefaultBody(calls=("compare",), fn=lambda d, x, y: d.invoke("compare", x, y) < 0),
			"le": DefaultBody(calls=("compare",), fn=lambda d, x, y: d.invoke("compare", x, y) <= 0),
			"gt": DefaultBody(calls=("compare",), fn=lambda d, x, y: d.invoke("compare", x, y) > 0),
			"ge": DefaultBody(calls=("compare",), fn=lambda d, x, y: d.invoke("compare", x, y) >= 0),
			"max": DefaultBody(calls=("compare",), fn=lambda d, x, y: y if d.invoke("compare", x, y) <= 0 else x),
			"min": DefaultBody(calls=("compare",), fn=lambda d, x, y: x if d.invoke("compare", x, y) <= 0 else y),
		},
	)
	show = ClassDecl(
		name="Show",
		params=("a",),
		methods=(MethodSig("show_prec", _fn(INT, a, STRING)), MethodSig("show", _fn(a, STRING))),
		defaults={
			"show_prec": DefaultBody(calls=("show",), fn=_show_prec_via_show, description="show, ignoring precedence"),
			"show": DefaultBody(calls=("show_prec",), fn=lambda d, x: d.invoke("show_prec", 0, x), description="show_prec 0"),
		},
	)
	return (eq, ord_, show)


# -- primitive instances -------------------------------------------------------


def _cmp(x, y) -> int:
	return (x > y) - (x < y)


def _list_eq(d, xs, ys) -> bool:
	elem = d.context[0]
	return len(xs) == len(ys) and all(elem.invoke("eq", x, y) for x, y in zip(xs, ys))


def _list_compare(d, xs, ys) -> int:
	elem = d.context[0]
	for x, y in zip(xs, ys):
		c = elem.invoke("compare", x, y)
		if c != 0:
			return c
	return _cmp(len(xs), len(ys))


def _list_show(d, xs) -> str:
	elem = d.context[0]
	return "[" + ", ".join(elem.invoke("show", x) for x in xs) + "]"


def _int_show_prec(_d, prec, n) -> str:
	# Negative literals bind looser than application.
	return f"({n})" if n < 0 and prec > 6 else str(n)


def _string_show(_d, s) -> str:
	escaped = s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
	return f'"{escaped}"'


def prelude_instances() -> Tuple[InstanceDecl, ...]:
	a = var("a")
	eq_a = Constraint("Eq", (a,))
	ord_a = Constraint("Ord", (a,))
	show_a = Constraint("Show", (a,))
	out = []
	for ty in (INT, BOOL, STRING):
		out.append(InstanceDecl("Eq", (ty,), {"eq": lambda d, x, y: x == y}))
		out.append(InstanceDecl("Ord", (ty,), {"compare": lambda d, x, y: _cmp(x, y)}))
	out.append(InstanceDecl("Eq", (list_of(a),), {"eq": _list_eq}, context=(eq_a,)))
	out.append(InstanceDecl("Ord", (list_of(a),), {"compare": _list_compare}, context=(ord_a,)))
	out.append(InstanceDecl("Show", (INT,), {"show_prec": _int_show_prec}))
	out.append(InstanceDecl("Show", (BOOL,), {"show": lambda d, b: "True" if b else "False"}))
	out.append(InstanceDecl("Show", (STRING,), {"show": _string_show}))
	out.append(InstanceDecl("Show", (list_of(a),), {"show": _list_show}, context=(show_a,)))
	return tuple(out)


def prelude_unit() -> DeclUnit:
	return DeclUnit(name="prelude", classes=prelude_classes(), instances=prelude_instances())


def prelude_registry(*, options: Optional[EngineOptions] = None) -> Registry:
	"""An unsealed registry holding the prelude, for further registration."""
	registry = Registry(options=options)
	for decl in prelude_classes():
		registry.register_class(decl)
	for inst in prelude_instances():
		registry.register_instance(inst)
	return registry


__all__ = [
	"BOOL",
	"INT",
	"STRING",
	"list_of",
	"prelude_classes",
	"prelude_instances",
	"prelude_unit",
	"prelude_registry",
]
