# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class DerivableKind(Enum):
	EQUALITY = "equality"
	ORDERING = "ordering"
	DISPLAY = "display"


def _default_derivable() -> Mapping[str, DerivableKind]:
	return {
		"Eq": DerivableKind.EQUALITY,
		"Ord": DerivableKind.ORDERING,
		"Show": DerivableKind.DISPLAY,
	}


@dataclass(frozen=True)
class EngineOptions:
	"""
	Engine configuration.

	`derivable` maps class names to the structural algorithm synthesizing
	them. The method names say which class methods the synthesized bodies fill;
	`show_prec_method` is used only when the display class declares it.
	`max_resolution_depth` bounds instance chains whose nested constraints keep
	growing (`Show Nest<a>` requiring `Show Nest<List<a>>`).
	"""

	derivable: Mapping[str, DerivableKind] = field(default_factory=_default_derivable)
	eq_method: str = "eq"
	compare_method: str = "compare"
	show_method: str = "show"
	show_prec_method: Optional[str] = "show_prec"
	cache_dictionaries: bool = True
	# Nesting limit for constraints discharged while building one dictionary.
	max_resolution_depth: int = 64

	def derivable_kind(self, class_name: str) -> Optional[DerivableKind]:
		return self.derivable.get(class_name)

	def core_methods(self, kind: DerivableKind) -> tuple[str, ...]:
		"""Methods a class of `kind` must declare to be derivable."""
		if kind is DerivableKind.EQUALITY:
			return (self.eq_method,)
		if kind is DerivableKind.ORDERING:
			return (self.compare_method,)
		return (self.show_method,)


__all__ = ["DerivableKind", "EngineOptions"]
