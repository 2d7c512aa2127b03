# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration records consumed by the registry.

These are produced by an external front-end (or by `tcres.decl_json`) and are
immutable once built. Location objects are kept opaque in `loc` and only
turned into spans when a diagnostic needs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple

from tcres.core.type_keys import TypeKey, TypeTerm, TypeVarKey, free_vars, render_type, render_types
from tcres.core.type_parse import parse_constraint


@dataclass(frozen=True)
class MethodSig:
	name: str
	shape: Optional[TypeTerm] = None  # e.g. Fn<a, a, Bool>; informational only
	loc: Optional[object] = field(default=None, compare=False)


@dataclass(frozen=True)
class DefaultBody:
	"""
	A class-supplied method body written in terms of sibling methods.

	`calls` lists the sibling methods the body invokes (the edges of the class's
	default dependency graph). `fn`, when present, is a host callable
	`fn(dictionary, *args)`; without it the body is a description for the
	code generator only.
	"""

	calls: Tuple[str, ...] = ()
	fn: Optional[Callable[..., Any]] = field(default=None, compare=False)
	description: Optional[str] = None


@dataclass(frozen=True)
class ClassDecl:
	name: str
	params: Tuple[str, ...]
	methods: Tuple[MethodSig, ...]
	defaults: Mapping[str, DefaultBody] = field(default_factory=dict, compare=False)
	loc: Optional[object] = field(default=None, compare=False)

	@property
	def arity(self) -> int:
		return len(self.params)

	def method_names(self) -> Tuple[str, ...]:
		return tuple(m.name for m in self.methods)

	def has_method(self, name: str) -> bool:
		return any(m.name == name for m in self.methods)


@dataclass(frozen=True)
class Constraint:
	class_name: str
	types: Tuple[TypeTerm, ...]

	@classmethod
	def parse(cls, text: str) -> "Constraint":
		name, types = parse_constraint(text)
		return cls(class_name=name, types=types)

	def __str__(self) -> str:
		return f"{self.class_name} {render_types(self.types)}"


@dataclass(frozen=True)
class InstanceDecl:
	"""
	A hand-written (or derived) instance.

	`methods` maps method names to explicit implementations: host callables
	`fn(dictionary, *args)` or any opaque reference (symbol name, IR handle)
	the code generator understands. `context` lists the constraints the
	instance needs discharged for its type variables, e.g. `Eq a` for
	`Eq List<a>`. `derived_from` names the structural type when the instance
	was requested through deriving.
	"""

	class_name: str
	head: Tuple[TypeTerm, ...]
	methods: Mapping[str, Any] = field(default_factory=dict, compare=False)
	context: Tuple[Constraint, ...] = ()
	origin: Optional[str] = None
	derived_from: Optional[str] = None
	loc: Optional[object] = field(default=None, compare=False)

	def head_str(self) -> str:
		return render_types(self.head)

	def label(self) -> str:
		text = f"{self.class_name} {self.head_str()}"
		if self.origin:
			text += f" (from {self.origin})"
		return text

	def head_vars(self) -> Tuple[str, ...]:
		acc: list[str] = []
		for term in self.head:
			free_vars(term, acc)
		return tuple(acc)


@dataclass(frozen=True)
class FieldDecl:
	name: Optional[str]
	type: TypeTerm


@dataclass(frozen=True)
class ConstructorDecl:
	name: str
	fields: Tuple[FieldDecl, ...] = ()


@dataclass(frozen=True)
class DataValue:
	"""Runtime value of a structural type, as seen by synthesized methods."""

	type_name: str
	constructor: str
	fields: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class DataDecl:
	"""Sum-of-products definition of a type: ordered constructors with ordered fields."""

	name: str
	params: Tuple[str, ...] = ()
	constructors: Tuple[ConstructorDecl, ...] = ()
	deriving: Tuple[str, ...] = ()
	origin: Optional[str] = None
	loc: Optional[object] = field(default=None, compare=False)

	def type_pattern(self) -> TypeKey:
		return TypeKey(name=self.name, args=tuple(TypeVarKey(p) for p in self.params))

	def constructor_index(self, name: str) -> int:
		for idx, ctor in enumerate(self.constructors):
			if ctor.name == name:
				return idx
		raise KeyError(f"type '{self.name}' has no constructor '{name}'")

	def make(self, constructor: str, *fields: Any) -> DataValue:
		ctor = self.constructors[self.constructor_index(constructor)]
		if len(fields) != len(ctor.fields):
			raise TypeError(
				f"constructor '{self.name}.{constructor}' takes {len(ctor.fields)} field(s), got {len(fields)}"
			)
		return DataValue(type_name=self.name, constructor=constructor, fields=tuple(fields))

	def label(self) -> str:
		return render_type(self.type_pattern())


__all__ = [
	"MethodSig",
	"DefaultBody",
	"ClassDecl",
	"Constraint",
	"InstanceDecl",
	"FieldDecl",
	"ConstructorDecl",
	"DataValue",
	"DataDecl",
]
