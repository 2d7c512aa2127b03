# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from tcres.core.type_keys import TypeTerm, render_types

from .decls import Constraint, DefaultBody, InstanceDecl


class ImplOrigin(Enum):
	EXPLICIT = "explicit"
	DEFAULT = "default"
	SYNTHESIZED = "synthesized"


@dataclass(frozen=True)
class MethodEntry:
	"""
	One slot of a method table.

	`body` is the explicit implementation reference, the class's DefaultBody,
	or a synthesized structural body. `calls` are the sibling methods the body
	delegates to (empty for explicit implementations).
	"""

	name: str
	origin: ImplOrigin
	body: Any = field(compare=False)
	calls: Tuple[str, ...] = ()

	def target(self) -> str:
		"""Stable description of what the slot delegates to."""
		if self.origin is ImplOrigin.EXPLICIT:
			if isinstance(self.body, str):
				return self.body
			return getattr(self.body, "__qualname__", None) or repr(self.body)
		if self.origin is ImplOrigin.DEFAULT:
			desc = self.body.description if isinstance(self.body, DefaultBody) else None
			return desc or f"default({', '.join(self.calls)})"
		return str(self.body)


MethodTable = Mapping[str, MethodEntry]


class Dictionary:
	"""
	Total method table for one (class, concrete types) pair.

	`requirements` holds the dictionaries of the nested constraints discharged
	while building this one (instance context or synthesized field types), keyed
	by the concrete constraint. `context` lists the instance-context
	dictionaries positionally, in the order the instance declared its context,
	for hand-written bodies that do not know their concrete types. The resolver
	fills both before handing the dictionary out; for recursive types a
	requirement may be this very dictionary.
	"""

	def __init__(
		self,
		class_name: str,
		types: Tuple[TypeTerm, ...],
		entries: MethodTable,
		*,
		instance: Optional[InstanceDecl] = None,
	) -> None:
		self.class_name = class_name
		self.types = types
		self.entries: Dict[str, MethodEntry] = dict(entries)
		self.instance = instance
		self.requirements: Dict[Constraint, "Dictionary"] = {}
		self.context: List["Dictionary"] = []

	@property
	def constraint(self) -> Constraint:
		return Constraint(class_name=self.class_name, types=self.types)

	def __getitem__(self, method: str) -> MethodEntry:
		return self.entries[method]

	def __contains__(self, method: object) -> bool:
		return method in self.entries

	def __iter__(self) -> Iterator[str]:
		return iter(self.entries)

	def __len__(self) -> int:
		return len(self.entries)

	def __repr__(self) -> str:
		return f"Dictionary({self.class_name} {render_types(self.types)}, methods={list(self.entries)})"

	def requirement(self, class_name: str, *types: TypeTerm) -> "Dictionary":
		key = Constraint(class_name=class_name, types=tuple(types))
		found = self.requirements.get(key)
		if found is None:
			raise KeyError(f"dictionary '{self.constraint}' has no requirement '{key}'")
		return found

	def invoke(self, method: str, *args: Any) -> Any:
		"""Run a host-callable slot, passing this dictionary first."""
		entry = self.entries[method]
		body = entry.body
		if isinstance(body, DefaultBody):
			body = body.fn
		if not callable(body):
			raise TypeError(f"method '{method}' of '{self.constraint}' is not invocable ({entry.origin.value})")
		return body(self, *args)

	def signature(self) -> Tuple[object, ...]:
		"""
		Structural identity: method set, origins, delegation targets and the
		constraints of the requirements. Two resolutions of the same
		constraint against the same registry have equal signatures.
		"""
		methods = tuple(
			(name, entry.origin.value, entry.calls, entry.target()) for name, entry in sorted(self.entries.items())
		)
		reqs = tuple(str(c) for c in self.requirements)
		return (self.class_name, self.types, methods, reqs)

	def describe(self) -> Dict[str, Any]:
		return {
			"class": self.class_name,
			"types": [str(t) for t in self.types],
			"methods": {
				name: {"origin": entry.origin.value, "target": entry.target(), "calls": list(entry.calls)}
				for name, entry in sorted(self.entries.items())
			},
			"requires": [str(c) for c in self.requirements],
		}


__all__ = ["ImplOrigin", "MethodEntry", "MethodTable", "Dictionary"]
