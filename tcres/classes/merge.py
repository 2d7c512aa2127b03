# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Order-independent merge of compilation units into one sealed registry.

Units may be parsed and checked in parallel and arrive in any order. The
builder only buffers them; `seal()` registers every declaration in a
canonical order (classes by name, structural types by name, explicit
derivations by class and type, instances by class, rendered head and origin)
so the accepted set and the diagnostics are the same whether units were
added one at a time or all at once. Registration failures become
diagnostics; the failing declaration is simply left out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from tcres.core.diagnostics import Diagnostic
from tcres.options import EngineOptions

from .decls import ClassDecl, DataDecl, InstanceDecl
from .errors import ClassResolutionError, sorted_diagnostics
from .registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeclUnit:
	"""Declarations contributed by one compilation unit."""

	name: str
	classes: Tuple[ClassDecl, ...] = ()
	data: Tuple[DataDecl, ...] = ()
	instances: Tuple[InstanceDecl, ...] = ()
	derivations: Tuple[Tuple[str, str], ...] = ()  # standalone (class name, type name) requests


@dataclass
class MergeResult:
	registry: Registry
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.diagnostics


def _instance_sort_key(inst: InstanceDecl) -> Tuple[str, str, str, Tuple[str, ...]]:
	return (inst.class_name, inst.head_str(), inst.origin or "", tuple(sorted(inst.methods)))


class RegistryBuilder:
	def __init__(self, *, options: Optional[EngineOptions] = None) -> None:
		self.options = options or EngineOptions()
		self._units: List[DeclUnit] = []
		self._sealed = False

	def add_unit(self, unit: DeclUnit) -> None:
		"""
		Buffer `unit` for the merge.

		Unit names must be unique; they order declarations that are otherwise
		identical. A JSON unit without a `"unit"` key is named after its file.
		"""
		if self._sealed:
			raise RuntimeError("builder already sealed")
		if any(u.name == unit.name for u in self._units):
			raise ValueError(f"duplicate declaration unit name '{unit.name}'")
		self._units.append(unit)

	def seal(self) -> MergeResult:
		if self._sealed:
			raise RuntimeError("builder already sealed")
		self._sealed = True
		registry = Registry(options=self.options)
		errors: List[ClassResolutionError] = []
		units = sorted(self._units, key=lambda u: u.name)

		classes = sorted(((c, u.name) for u in units for c in u.classes), key=lambda item: (item[0].name, item[1]))
		for decl, _unit in classes:
			try:
				registry.register_class(decl)
			except ClassResolutionError as err:
				errors.append(err)

		data = sorted(
			(replace(d, origin=d.origin or u.name) for u in units for d in u.data),
			key=lambda d: (d.name, d.origin or ""),
		)
		for decl in data:
			try:
				registry.register_data(decl)
			except ClassResolutionError as err:
				errors.append(err)

		derivations = sorted((cls, ty, u.name) for u in units for cls, ty in u.derivations)
		for class_name, type_name, _unit in derivations:
			try:
				registry.derive(class_name, type_name)
			except ClassResolutionError as err:
				errors.append(err)

		instances = sorted(
			(replace(i, origin=i.origin or u.name) for u in units for i in u.instances),
			key=_instance_sort_key,
		)
		for inst in instances:
			try:
				registry.register_instance(inst)
			except ClassResolutionError as err:
				errors.append(err)

		registry.seal()
		if errors:
			logger.debug("merge of %d unit(s) rejected %d declaration(s)", len(units), len(errors))
		return MergeResult(registry=registry, diagnostics=sorted_diagnostics(errors, phase="registry"))


def merge_units(units: Iterable[DeclUnit], *, options: Optional[EngineOptions] = None) -> MergeResult:
	builder = RegistryBuilder(options=options)
	for unit in units:
		builder.add_unit(unit)
	return builder.seal()


__all__ = ["DeclUnit", "MergeResult", "RegistryBuilder", "merge_units"]
