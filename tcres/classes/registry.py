# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration registry for class resolution.

This stores class, instance and structural type declarations and is the only
owner of them. Registration validates each declaration against what is
already present:

  register_class     DuplicateClass, UnknownMethod (defaults), ArityMismatch
  register_data      DuplicateType, UnboundTypeVariable, then derive()
  register_instance  UnknownClass, UnknownMethod, ArityMismatch,
                     UnboundTypeVariable, then coherence
                     (OverlappingInstance / AmbiguousInstance), then default
                     completion (MissingMethod / UnresolvableDefaults)
  derive             UnknownType, UnknownClass, NotDerivable, then the
                     same coherence and completion path as a hand-written
                     instance

A failed registration leaves the registry exactly as it was. Once `seal()`
is called the registry is read-only and may be shared by concurrent
resolvers without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from tcres.core.span import Span
from tcres.core.type_keys import TypeTerm, free_vars, render_types
from tcres.options import DerivableKind, EngineOptions

from .coherence import CoherenceChecker, MatchingKey, has_wildcard, keys_unify, matching_key
from .decls import ClassDecl, DataDecl, InstanceDecl
from .defaults import DefaultDependencyGraph, complete_method_table, explicit_entries
from .dictionary import ImplOrigin, MethodEntry, MethodTable
from .errors import (
	ArityMismatch,
	DuplicateClass,
	DuplicateType,
	OverlappingInstance,
	UnboundTypeVariable,
	UnknownClass,
	UnknownMethod,
	UnknownType,
)
from .synthesis import check_derivable, synthesized_methods

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptedInstance:
	"""An instance that passed coherence and default completion."""

	decl: InstanceDecl
	key: MatchingKey
	# Completed table. For derived instances the synthesized slots hold
	# placeholder entries; real bodies depend on the concrete type and are
	# built at resolution time.
	table: MethodTable
	derivation: Optional[DerivableKind] = None


class Registry:
	def __init__(self, *, options: Optional[EngineOptions] = None) -> None:
		self.options = options or EngineOptions()
		self._classes: Dict[str, ClassDecl] = {}
		self._graphs: Dict[str, DefaultDependencyGraph] = {}
		self._data: Dict[str, DataDecl] = {}
		self._instances: Dict[str, List[AcceptedInstance]] = {}
		self._by_key: Dict[Tuple[str, MatchingKey], AcceptedInstance] = {}
		self._coherence = CoherenceChecker()
		self._sealed = False

	# -- lifecycle -----------------------------------------------------------

	@property
	def sealed(self) -> bool:
		return self._sealed

	def seal(self) -> "Registry":
		self._sealed = True
		logger.debug(
			"registry sealed: %d classes, %d types, %d instances",
			len(self._classes),
			len(self._data),
			sum(len(v) for v in self._instances.values()),
		)
		return self

	def _ensure_open(self) -> None:
		if self._sealed:
			raise RuntimeError("registry is sealed; declarations can no longer be added")

	# -- queries -------------------------------------------------------------

	@property
	def classes(self) -> Mapping[str, ClassDecl]:
		return MappingProxyType(self._classes)

	@property
	def data_types(self) -> Mapping[str, DataDecl]:
		return MappingProxyType(self._data)

	def lookup_class(self, name: str) -> Optional[ClassDecl]:
		return self._classes.get(name)

	def lookup_data(self, name: str) -> Optional[DataDecl]:
		return self._data.get(name)

	def default_graph(self, class_name: str) -> DefaultDependencyGraph:
		return self._graphs[class_name]

	def instances_of(self, class_name: str) -> Tuple[AcceptedInstance, ...]:
		return tuple(self._instances.get(class_name, ()))

	def find_instance(self, class_name: str, types: Tuple[TypeTerm, ...]) -> Optional[AcceptedInstance]:
		"""
		The instance whose matching key fits `types`, if any.

		Coherence guarantees at most one candidate: an exact key hit, or a
		single wildcard instance unifying with the key. Nested arguments are
		not checked here.
		"""
		key = matching_key(types)
		exact = self._by_key.get((class_name, key))
		if exact is not None:
			return exact
		for inst in self._instances.get(class_name, ()):
			if has_wildcard(inst.key) and keys_unify(inst.key, key):
				return inst
		return None

	# -- registration --------------------------------------------------------

	def register_class(self, decl: ClassDecl) -> None:
		self._ensure_open()
		if decl.name in self._classes:
			raise DuplicateClass(
				message=f"duplicate class definition '{decl.name}'",
				class_name=decl.name,
				span=Span.from_loc(decl.loc),
			)
		if decl.arity < 1:
			raise ArityMismatch(
				message=f"class '{decl.name}' must have at least one type parameter",
				class_name=decl.name,
				span=Span.from_loc(decl.loc),
			)
		names = decl.method_names()
		seen: set[str] = set()
		for name in names:
			if name in seen:
				raise DuplicateClass(
					message=f"duplicate method '{name}' in class '{decl.name}'",
					class_name=decl.name,
					span=Span.from_loc(decl.loc),
				)
			seen.add(name)
		for method, body in decl.defaults.items():
			unknown = [m for m in (method, *body.calls) if m not in seen]
			if unknown:
				raise UnknownMethod(
					message=(
						f"default for '{method}' in class '{decl.name}' refers to undeclared "
						f"method {', '.join(repr(m) for m in dict.fromkeys(unknown))}"
					),
					class_name=decl.name,
					span=Span.from_loc(decl.loc),
				)
		self._classes[decl.name] = decl
		self._graphs[decl.name] = DefaultDependencyGraph.from_class(decl)
		logger.debug("registered class %s (%s)", decl.name, ", ".join(names))

	def register_data(self, decl: DataDecl) -> None:
		self._ensure_open()
		if decl.name in self._data:
			raise DuplicateType(
				message=f"duplicate structural type definition '{decl.name}'",
				type_heads=(decl.label(),),
				span=Span.from_loc(decl.loc),
			)
		for ctor in decl.constructors:
			for fld in ctor.fields:
				unbound = [v for v in free_vars(fld.type) if v not in decl.params]
				if unbound:
					raise UnboundTypeVariable(
						message=(
							f"field '{fld.name or '?'}' of constructor '{ctor.name}' in '{decl.label()}' "
							f"uses unbound type variable {', '.join(repr(v) for v in unbound)}"
						),
						type_heads=(decl.label(),),
						span=Span.from_loc(decl.loc),
					)
		# Every derivation is checked before anything is stored, so a bad deriving
		# clause rejects the whole declaration.
		pending: List[AcceptedInstance] = []
		for class_name in decl.deriving:
			if any(p.decl.class_name == class_name for p in pending):
				raise OverlappingInstance(
					message=f"class '{class_name}' is derived twice for '{decl.label()}'",
					class_name=class_name,
					type_heads=(decl.label(), decl.label()),
					span=Span.from_loc(decl.loc),
				)
			pending.append(self._prepare_derivation(class_name, decl))
		self._data[decl.name] = decl
		logger.debug("registered type %s", decl.label())
		for accepted in pending:
			self._commit(accepted)

	def derive(self, class_name: str, data_name: str, *, loc: object = None) -> AcceptedInstance:
		"""Explicitly request a synthesized instance of `class_name` for `data_name`."""
		self._ensure_open()
		data = self._data.get(data_name)
		if data is None:
			raise UnknownType(
				message=f"cannot derive '{class_name}': unknown structural type '{data_name}'",
				class_name=class_name,
				type_heads=(data_name,),
				span=Span.from_loc(loc),
			)
		return self._commit(self._prepare_derivation(class_name, data, loc=loc))

	def _prepare_derivation(self, class_name: str, data: DataDecl, *, loc: object = None) -> AcceptedInstance:
		decl = self._classes.get(class_name)
		if decl is None:
			raise UnknownClass(
				message=f"cannot derive unknown class '{class_name}' for '{data.label()}'",
				class_name=class_name,
				type_heads=(data.label(),),
				span=Span.from_loc(loc if loc is not None else data.loc),
			)
		kind = check_derivable(decl, data, self.options, loc=loc)
		inst = InstanceDecl(
			class_name=class_name,
			head=(data.type_pattern(),),
			origin=data.origin,
			derived_from=data.name,
			loc=loc if loc is not None else data.loc,
		)
		placeholders = {
			name: MethodEntry(name=name, origin=ImplOrigin.SYNTHESIZED, body=f"structural({data.name})")
			for name in synthesized_methods(kind, decl, self.options)
		}
		return self._prepare(decl, inst, placeholders, derivation=kind)

	def register_instance(self, inst: InstanceDecl) -> AcceptedInstance:
		self._ensure_open()
		decl = self._classes.get(inst.class_name)
		if decl is None:
			raise UnknownClass(
				message=f"instance '{inst.label()}' refers to unknown class '{inst.class_name}'",
				class_name=inst.class_name,
				type_heads=(inst.head_str(),),
				span=Span.from_loc(inst.loc),
			)
		if len(inst.head) != decl.arity:
			raise ArityMismatch(
				message=(
					f"instance '{inst.label()}' gives {len(inst.head)} type(s) "
					f"but class '{decl.name}' takes {decl.arity}"
				),
				class_name=decl.name,
				type_heads=(inst.head_str(),),
				span=Span.from_loc(inst.loc),
			)
		unknown = [m for m in inst.methods if not decl.has_method(m)]
		if unknown:
			raise UnknownMethod(
				message=(
					f"instance '{inst.label()}' implements {', '.join(repr(m) for m in unknown)} "
					f"which class '{decl.name}' does not declare"
				),
				class_name=decl.name,
				type_heads=(inst.head_str(),),
				span=Span.from_loc(inst.loc),
			)
		self._check_context(decl, inst)
		return self._commit(self._prepare(decl, inst, explicit_entries(inst.methods)))

	def _check_context(self, decl: ClassDecl, inst: InstanceDecl) -> None:
		head_vars = inst.head_vars()
		for req in inst.context:
			req_decl = self._classes.get(req.class_name)
			if req_decl is None:
				raise UnknownClass(
					message=f"context of instance '{inst.label()}' refers to unknown class '{req.class_name}'",
					class_name=req.class_name,
					type_heads=(inst.head_str(),),
					span=Span.from_loc(inst.loc),
				)
			if len(req.types) != req_decl.arity:
				raise ArityMismatch(
					message=(
						f"context constraint '{req}' of instance '{inst.label()}' gives "
						f"{len(req.types)} type(s) but class '{req_decl.name}' takes {req_decl.arity}"
					),
					class_name=req_decl.name,
					type_heads=(inst.head_str(),),
					span=Span.from_loc(inst.loc),
				)
			used: list[str] = []
			for term in req.types:
				free_vars(term, used)
			unbound = [v for v in used if v not in head_vars]
			if unbound:
				raise UnboundTypeVariable(
					message=(
						f"context constraint '{req}' of instance '{inst.label()}' uses "
						f"{', '.join(repr(v) for v in unbound)} which the head does not bind"
					),
					class_name=decl.name,
					type_heads=(inst.head_str(),),
					span=Span.from_loc(inst.loc),
				)

	def _prepare(
		self,
		decl: ClassDecl,
		inst: InstanceDecl,
		explicit: Dict[str, MethodEntry],
		*,
		derivation: Optional[DerivableKind] = None,
	) -> AcceptedInstance:
		"""Coherence and default completion, without storing anything."""
		key = self._coherence.check(inst)
		table = complete_method_table(decl, self._graphs[decl.name], inst, explicit)
		return AcceptedInstance(decl=inst, key=key, table=MappingProxyType(table), derivation=derivation)

	def _commit(self, accepted: AcceptedInstance) -> AcceptedInstance:
		inst = accepted.decl
		self._coherence.accept(inst, accepted.key)
		self._instances.setdefault(inst.class_name, []).append(accepted)
		self._by_key[(inst.class_name, accepted.key)] = accepted
		logger.debug(
			"accepted instance %s %s (%s)",
			inst.class_name,
			render_types(inst.head),
			"derived" if accepted.derivation is not None else "explicit",
		)
		return accepted


__all__ = ["AcceptedInstance", "Registry"]
