# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dictionary resolution for class constraints.

`resolve(class_name, types)` turns a constraint whose types are fully
concrete into a total Dictionary:

1. the matching key of `types` selects at most one accepted instance
   (coherence makes the lookup unambiguous);
2. the instance head is matched against `types`, binding its variables;
3. a derived instance gets its bodies synthesized for these types, and its
   field types become nested constraints; a hand-written instance's context
   is substituted into nested constraints;
4. nested constraints are resolved recursively. Their failures propagate
   unchanged (with a note saying which instance needed them), except that
   failures for field types of a derived instance become
   `MissingFieldInstance`.

Recursive types resolve through the dictionary under construction; chains
whose nested constraints keep growing stop at `max_resolution_depth` with
`NoInstance`. Results are committed to the cache only when the top-level
request succeeds, so a failed resolution never leaves half-built
dictionaries behind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from tcres.core.diagnostics import Diagnostic
from tcres.core.span import Span
from tcres.core.type_keys import TypeKey, TypeTerm, free_vars, match_types, render_type, render_types, substitute
from tcres.options import EngineOptions

from .decls import Constraint
from .dictionary import Dictionary, ImplOrigin, MethodEntry
from .errors import (
	ArityMismatch,
	ClassResolutionError,
	MissingFieldInstance,
	NoInstance,
	UnboundTypeVariable,
	UnknownClass,
	sorted_diagnostics,
)
from .registry import AcceptedInstance, Registry
from .synthesis import describe_site, plan_synthesis

logger = logging.getLogger(__name__)


@dataclass
class _ResolveState:
	"""Per-request bookkeeping; discarded if the request fails."""

	in_progress: Dict[Constraint, Dictionary] = field(default_factory=dict)
	done: Dict[Constraint, Dictionary] = field(default_factory=dict)


@dataclass
class DischargeResult:
	dictionaries: Dict[Constraint, Dictionary] = field(default_factory=dict)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.diagnostics


class Resolver:
	def __init__(self, registry: Registry, *, options: Optional[EngineOptions] = None) -> None:
		if not registry.sealed:
			raise ValueError("resolver requires a sealed registry")
		self.registry = registry
		self.options = options or registry.options
		self._cache: Dict[Constraint, Dictionary] = {}
		self._lock = threading.Lock()

	def resolve(self, class_name: str, types: Sequence[TypeTerm]) -> Dictionary:
		return self.resolve_constraint(Constraint(class_name=class_name, types=tuple(types)))

	def resolve_constraint(self, constraint: Constraint) -> Dictionary:
		state = _ResolveState()
		result = self._resolve(constraint, state)
		if not self.options.cache_dictionaries:
			return result
		with self._lock:
			for key, built in state.done.items():
				self._cache.setdefault(key, built)
			return self._cache[constraint]

	def discharge(self, constraints: Iterable[Constraint]) -> DischargeResult:
		"""
		Resolve a constraint set, collecting failures instead of stopping.

		Each constraint is independent: one failing does not affect the others.
		Diagnostics are ordered by (code, class name, type heads).
		"""
		out = DischargeResult()
		errors: List[ClassResolutionError] = []
		for constraint in dict.fromkeys(constraints):
			try:
				out.dictionaries[constraint] = self.resolve_constraint(constraint)
			except ClassResolutionError as err:
				errors.append(err)
		out.diagnostics = sorted_diagnostics(errors, phase="resolve")
		return out

	def cached(self, constraint: Constraint) -> Optional[Dictionary]:
		with self._lock:
			return self._cache.get(constraint)

	# -- internals -----------------------------------------------------------

	def _check_constraint(self, constraint: Constraint) -> None:
		decl = self.registry.lookup_class(constraint.class_name)
		rendered = render_types(constraint.types)
		if decl is None:
			raise UnknownClass(
				message=f"no class named '{constraint.class_name}' (needed for '{constraint}')",
				class_name=constraint.class_name,
				type_heads=(rendered,),
			)
		if len(constraint.types) != decl.arity:
			raise ArityMismatch(
				message=(
					f"constraint '{constraint}' gives {len(constraint.types)} type(s) "
					f"but class '{decl.name}' takes {decl.arity}"
				),
				class_name=decl.name,
				type_heads=(rendered,),
			)
		unbound: List[str] = []
		for term in constraint.types:
			free_vars(term, unbound)
		if unbound:
			raise UnboundTypeVariable(
				message=(
					f"constraint '{constraint}' still mentions type variable(s) "
					f"{', '.join(repr(v) for v in unbound)}; only concrete types can be resolved"
				),
				class_name=decl.name,
				type_heads=(rendered,),
			)

	def _no_instance(self, constraint: Constraint, note: Optional[str] = None) -> NoInstance:
		return NoInstance(
			message=f"no instance for '{constraint}'",
			class_name=constraint.class_name,
			type_heads=(render_types(constraint.types),),
			notes=[note] if note else [],
		)

	def _resolve(self, constraint: Constraint, state: _ResolveState, depth: int = 0) -> Dictionary:
		self._check_constraint(constraint)
		if self.options.cache_dictionaries:
			hit = self.cached(constraint)
			if hit is not None:
				return hit
		built = state.done.get(constraint)
		if built is None:
			built = state.in_progress.get(constraint)
		if built is not None:
			return built

		limit = self.options.max_resolution_depth
		if depth > limit:
			raise self._no_instance(
				constraint,
				note=f"gave up after {limit} nested constraints; the instance chain never reaches a base case",
			)

		inst = self.registry.find_instance(constraint.class_name, constraint.types)
		if inst is None:
			raise self._no_instance(constraint)
		subst = match_types(inst.decl.head, constraint.types)
		if subst is None:
			raise self._no_instance(
				constraint,
				note=f"instance '{inst.decl.label()}' has the same outer constructors but does not match",
			)
		logger.debug("resolving %s via %s", constraint, inst.decl.label())

		if inst.derivation is not None:
			return self._resolve_derived(constraint, inst, state, depth)

		dictionary = Dictionary(constraint.class_name, constraint.types, inst.table, instance=inst.decl)
		state.in_progress[constraint] = dictionary
		try:
			for req in inst.decl.context:
				nested = Constraint(
					class_name=req.class_name,
					types=tuple(substitute(t, subst) for t in req.types),
				)
				try:
					nested_dict = self._resolve(nested, state, depth + 1)
				except ClassResolutionError as err:
					err.notes.append(f"required by instance '{inst.decl.label()}' for '{constraint}'")
					raise
				dictionary.requirements[nested] = nested_dict
				dictionary.context.append(nested_dict)
		finally:
			state.in_progress.pop(constraint, None)
		state.done[constraint] = dictionary
		return dictionary

	def _resolve_derived(
		self,
		constraint: Constraint,
		inst: AcceptedInstance,
		state: _ResolveState,
		depth: int,
	) -> Dictionary:
		data = self.registry.lookup_data(inst.decl.derived_from or "")
		decl = self.registry.lookup_class(constraint.class_name)
		concrete = constraint.types[0]
		if data is None or decl is None or inst.derivation is None or not isinstance(concrete, TypeKey):
			raise RuntimeError(f"derived instance '{inst.decl.label()}' lost its structural type or class")
		plan = plan_synthesis(inst.derivation, decl, data, concrete, self.options)

		entries: Dict[str, MethodEntry] = {}
		for name, entry in inst.table.items():
			if entry.origin is ImplOrigin.SYNTHESIZED:
				entry = MethodEntry(name=name, origin=ImplOrigin.SYNTHESIZED, body=plan.bodies[name])
			entries[name] = entry
		dictionary = Dictionary(constraint.class_name, constraint.types, entries, instance=inst.decl)
		state.in_progress[constraint] = dictionary
		try:
			for field_constraint, site in plan.field_constraints:
				try:
					dictionary.requirements[field_constraint] = self._resolve(field_constraint, state, depth + 1)
				except (NoInstance, MissingFieldInstance) as err:
					field_type = render_types(field_constraint.types)
					raise MissingFieldInstance(
						message=(
							f"cannot synthesize '{constraint}': no '{constraint.class_name}' "
							f"instance for field type '{field_type}'"
						),
						class_name=constraint.class_name,
						type_heads=(render_type(concrete), field_type),
						span=Span.from_loc(data.loc),
						notes=[describe_site(data, site), f"caused by: {err.message}"],
					) from err
		finally:
			state.in_progress.pop(constraint, None)
		state.done[constraint] = dictionary
		return dictionary


__all__ = ["DischargeResult", "Resolver"]
