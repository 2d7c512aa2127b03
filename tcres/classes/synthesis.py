# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural synthesis of equality, ordering and display instances.

Given a DataDecl (ordered constructors with ordered fields) and the concrete
type arguments of one use, synthesis produces method bodies that walk values
constructor by constructor and delegate field work to the dictionaries of the
field types. Those field dictionaries are not looked up here: the plan lists
the field constraints and the resolver discharges them, so a missing field
instance surfaces as `MissingFieldInstance` and recursive types reuse the
dictionary under construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from tcres.core.span import Span
from tcres.core.type_keys import TypeKey, TypeTerm, render_type, substitute
from tcres.options import DerivableKind, EngineOptions

from .decls import ClassDecl, Constraint, DataDecl, DataValue
from .errors import NotDerivable

# Precedence of constructor application; fields render one level tighter.
APP_PREC = 10


@dataclass(frozen=True)
class FieldSite:
	"""Where a field type was first required, for diagnostics."""

	constructor: str
	field: str
	type: TypeTerm


@dataclass(frozen=True)
class _StructuralBody:
	data: DataDecl
	class_name: str
	field_types: Tuple[Tuple[TypeTerm, ...], ...]  # concrete, one tuple per constructor

	def _index(self, value: Any) -> int:
		if not isinstance(value, DataValue) or value.type_name != self.data.name:
			raise TypeError(f"expected a value of type '{self.data.name}', got {value!r}")
		return self.data.constructor_index(value.constructor)

	def _field_dict(self, dictionary, ftype: TypeTerm):
		return dictionary.requirement(self.class_name, ftype)


@dataclass(frozen=True)
class StructuralEq(_StructuralBody):
	method: str = "eq"

	def __call__(self, dictionary, left: Any, right: Any) -> bool:
		li = self._index(left)
		if li != self._index(right):
			return False
		for ftype, a, b in zip(self.field_types[li], left.fields, right.fields):
			if not self._field_dict(dictionary, ftype).invoke(self.method, a, b):
				return False
		return True

	def __str__(self) -> str:
		return f"structural-eq({self.data.name})"


@dataclass(frozen=True)
class StructuralOrd(_StructuralBody):
	method: str = "compare"

	def __call__(self, dictionary, left: Any, right: Any) -> int:
		li = self._index(left)
		ri = self._index(right)
		if li != ri:
			return -1 if li < ri else 1
		for ftype, a, b in zip(self.field_types[li], left.fields, right.fields):
			c = self._field_dict(dictionary, ftype).invoke(self.method, a, b)
			if c < 0:
				return -1
			if c > 0:
				return 1
		return 0

	def __str__(self) -> str:
		return f"structural-compare({self.data.name})"


@dataclass(frozen=True)
class StructuralShow(_StructuralBody):
	"""
	Constructor name followed by its fields, e.g. `Q (P 3) 4`.

	With `show_prec_method` set, fields render through the field dictionary's
	precedence-aware method at application precedence; otherwise through
	`show_method`, parenthesizing field values that have fields themselves or
	render with a leading minus.
	"""

	show_method: str = "show"
	show_prec_method: Optional[str] = None
	with_prec: bool = False

	def __call__(self, dictionary, *args: Any) -> str:
		if self.with_prec:
			prec, value = args
			return self.render(dictionary, prec, value)
		(value,) = args
		return self.render(dictionary, 0, value)

	def render(self, dictionary, prec: int, value: Any) -> str:
		idx = self._index(value)
		ctor = self.data.constructors[idx]
		if not ctor.fields:
			return ctor.name
		parts = [ctor.name]
		for ftype, fval in zip(self.field_types[idx], value.fields):
			fdict = self._field_dict(dictionary, ftype)
			if self.show_prec_method is not None:
				parts.append(fdict.invoke(self.show_prec_method, APP_PREC + 1, fval))
				continue
			text = fdict.invoke(self.show_method, fval)
			if (isinstance(fval, DataValue) and fval.fields) or text.startswith("-"):
				text = f"({text})"
			parts.append(text)
		text = " ".join(parts)
		return f"({text})" if prec > APP_PREC else text

	def __str__(self) -> str:
		name = "structural-show-prec" if self.with_prec else "structural-show"
		return f"{name}({self.data.name})"


@dataclass(frozen=True)
class SynthesisPlan:
	bodies: Mapping[str, Any]
	field_constraints: Tuple[Tuple[Constraint, FieldSite], ...]


def synthesized_methods(kind: DerivableKind, decl: ClassDecl, options: EngineOptions) -> Tuple[str, ...]:
	"""Methods synthesis fills for `decl`; the rest come from defaults."""
	if kind is DerivableKind.DISPLAY:
		out = [options.show_method]
		if options.show_prec_method is not None and decl.has_method(options.show_prec_method):
			out.append(options.show_prec_method)
		return tuple(out)
	return options.core_methods(kind)


def check_derivable(decl: ClassDecl, data: DataDecl, options: EngineOptions, *, loc: object = None) -> DerivableKind:
	kind = options.derivable_kind(decl.name)
	reason: Optional[str] = None
	if kind is None:
		reason = f"class '{decl.name}' is not a derivable class"
	elif decl.arity != 1:
		reason = f"derivable class '{decl.name}' must have exactly one parameter"
	else:
		absent = [m for m in options.core_methods(kind) if not decl.has_method(m)]
		if absent:
			reason = f"class '{decl.name}' does not declare {', '.join(repr(m) for m in absent)}"
	if reason is not None or kind is None:
		raise NotDerivable(
			message=f"cannot derive '{decl.name}' for '{data.label()}': {reason}",
			class_name=decl.name,
			type_heads=(data.label(),),
			span=Span.from_loc(loc if loc is not None else data.loc),
		)
	return kind


def plan_synthesis(
	kind: DerivableKind,
	decl: ClassDecl,
	data: DataDecl,
	concrete: TypeKey,
	options: EngineOptions,
) -> SynthesisPlan:
	"""Bodies and field constraints for `decl` at the concrete type `concrete`."""
	subst: Dict[str, TypeTerm] = dict(zip(data.params, concrete.args))
	field_types: List[Tuple[TypeTerm, ...]] = []
	constraints: Dict[Constraint, FieldSite] = {}
	for ctor in data.constructors:
		row: List[TypeTerm] = []
		for pos, fld in enumerate(ctor.fields):
			ftype = substitute(fld.type, subst)
			row.append(ftype)
			key = Constraint(class_name=decl.name, types=(ftype,))
			if key not in constraints:
				constraints[key] = FieldSite(constructor=ctor.name, field=fld.name or str(pos), type=fld.type)
		field_types.append(tuple(row))
	rows = tuple(field_types)

	bodies: Dict[str, Any] = {}
	if kind is DerivableKind.EQUALITY:
		bodies[options.eq_method] = StructuralEq(data=data, class_name=decl.name, field_types=rows, method=options.eq_method)
	elif kind is DerivableKind.ORDERING:
		bodies[options.compare_method] = StructuralOrd(
			data=data, class_name=decl.name, field_types=rows, method=options.compare_method
		)
	else:
		prec_method = None
		if options.show_prec_method is not None and decl.has_method(options.show_prec_method):
			prec_method = options.show_prec_method
		bodies[options.show_method] = StructuralShow(
			data=data,
			class_name=decl.name,
			field_types=rows,
			show_method=options.show_method,
			show_prec_method=prec_method,
		)
		if prec_method is not None:
			bodies[prec_method] = StructuralShow(
				data=data,
				class_name=decl.name,
				field_types=rows,
				show_method=options.show_method,
				show_prec_method=prec_method,
				with_prec=True,
			)
	return SynthesisPlan(bodies=bodies, field_constraints=tuple(constraints.items()))


def describe_site(data: DataDecl, site: FieldSite) -> str:
	return f"field '{site.field}' of constructor '{site.constructor}' in '{data.label()}' has type '{render_type(site.type)}'"


__all__ = [
	"APP_PREC",
	"FieldSite",
	"StructuralEq",
	"StructuralOrd",
	"StructuralShow",
	"SynthesisPlan",
	"synthesized_methods",
	"check_derivable",
	"plan_synthesis",
	"describe_site",
]
