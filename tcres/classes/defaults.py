# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Default method completion.

A class's defaults may call each other (`neq` defaults to `not eq`, `eq` to
`not neq`). The call structure is captured once per class as a
DefaultDependencyGraph. Completing an instance's table then depends only on
which methods that instance implements explicitly:

- an explicit method is a base case and cuts every cycle through it;
- a cycle made only of defaulted methods never reaches a base case, so the
  instance is rejected with the cycle instead of looping at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Any, Dict, List, Mapping, Optional, Tuple

from tcres.core.span import Span

from .decls import ClassDecl, InstanceDecl
from .dictionary import ImplOrigin, MethodEntry
from .errors import MissingMethod, UnresolvableDefaults


@dataclass(frozen=True)
class DefaultDependencyGraph:
	class_name: str
	methods: Tuple[str, ...]  # declaration order; drives deterministic traversal
	edges: Mapping[str, Tuple[str, ...]]

	@classmethod
	def from_class(cls, decl: ClassDecl) -> "DefaultDependencyGraph":
		edges: Dict[str, Tuple[str, ...]] = {}
		for name in decl.method_names():
			body = decl.defaults.get(name)
			if body is not None:
				edges[name] = tuple(dict.fromkeys(body.calls))
		return cls(class_name=decl.name, methods=decl.method_names(), edges=edges)

	def has_default(self, method: str) -> bool:
		return method in self.edges

	def find_unproductive_cycle(self, explicit: AbstractSet[str]) -> Optional[List[str]]:
		"""
		First cycle made only of methods missing from `explicit`.

		Traversal starts at methods in declaration order and follows calls in the
		order the default lists them, so the reported cycle is stable. The cycle
		starts at the method where it was entered: `a -> b -> a` is `[a, b]`.
		"""
		state: Dict[str, int] = {}  # 1 = on stack, 2 = done
		stack: List[str] = []

		def visit(node: str) -> Optional[List[str]]:
			state[node] = 1
			stack.append(node)
			for callee in self.edges.get(node, ()):
				if callee in explicit or callee not in self.edges:
					continue
				mark = state.get(callee)
				if mark == 1:
					return stack[stack.index(callee):]
				if mark is None:
					found = visit(callee)
					if found is not None:
						return found
			stack.pop()
			state[node] = 2
			return None

		for method in self.methods:
			if method in explicit or method not in self.edges or method in state:
				continue
			found = visit(method)
			if found is not None:
				return list(found)
		return None


def complete_method_table(
	decl: ClassDecl,
	graph: DefaultDependencyGraph,
	instance: InstanceDecl,
	explicit: Mapping[str, MethodEntry],
) -> Dict[str, MethodEntry]:
	"""
	Build the total method table of `instance`.

	`explicit` holds the entries that count as base cases: hand-written
	implementations, or synthesized bodies for derived instances.
	"""
	missing = [m for m in graph.methods if m not in explicit and not graph.has_default(m)]
	if missing:
		raise MissingMethod(
			message=(
				f"instance '{instance.label()}' does not implement "
				f"{', '.join(repr(m) for m in missing)} and class '{decl.name}' has no default"
			),
			class_name=decl.name,
			type_heads=(instance.head_str(),),
			span=Span.from_loc(instance.loc),
		)
	cycle = graph.find_unproductive_cycle(set(explicit))
	if cycle is not None:
		raise UnresolvableDefaults(
			message=(
				f"default methods of class '{decl.name}' call each other without a base case "
				f"in instance '{instance.label()}'"
			),
			class_name=decl.name,
			type_heads=(instance.head_str(),),
			cycle=tuple(cycle),
			span=Span.from_loc(instance.loc),
			notes=[f"implement at least one of {', '.join(repr(m) for m in cycle)}"],
		)
	table: Dict[str, MethodEntry] = {}
	for name in graph.methods:
		entry = explicit.get(name)
		if entry is None:
			body = decl.defaults[name]
			entry = MethodEntry(name=name, origin=ImplOrigin.DEFAULT, body=body, calls=graph.edges[name])
		table[name] = entry
	return table


def explicit_entries(methods: Mapping[str, Any]) -> Dict[str, MethodEntry]:
	return {
		name: MethodEntry(name=name, origin=ImplOrigin.EXPLICIT, body=impl)
		for name, impl in methods.items()
	}


__all__ = ["DefaultDependencyGraph", "complete_method_table", "explicit_entries"]
