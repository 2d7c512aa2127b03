# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised by the registry and the resolver.

Every kind indicates a static defect in the program being compiled, never a
transient condition, so nothing here is retried. Each error carries a stable
reason code (`kind.value`) plus the class name, rendered type heads and (for
default cycles) the ordered cycle, and converts to a `Diagnostic` for batch
reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, List, Tuple

from tcres.core.diagnostics import Diagnostic
from tcres.core.span import Span


class ErrorKind(Enum):
	DUPLICATE_CLASS = "DuplicateClass"
	DUPLICATE_TYPE = "DuplicateType"
	UNKNOWN_TYPE = "UnknownType"
	UNKNOWN_CLASS = "UnknownClass"
	UNKNOWN_METHOD = "UnknownMethod"
	ARITY_MISMATCH = "ArityMismatch"
	UNBOUND_TYPE_VARIABLE = "UnboundTypeVariable"
	OVERLAPPING_INSTANCE = "OverlappingInstance"
	AMBIGUOUS_INSTANCE = "AmbiguousInstance"
	UNRESOLVABLE_DEFAULTS = "UnresolvableDefaults"
	MISSING_METHOD = "MissingMethod"
	NOT_DERIVABLE = "NotDerivable"
	MISSING_FIELD_INSTANCE = "MissingFieldInstance"
	NO_INSTANCE = "NoInstance"


@dataclass(eq=False)
class ClassResolutionError(Exception):
	kind: ClassVar[ErrorKind]
	phase: ClassVar[str] = "registry"

	message: str
	class_name: str | None = None
	type_heads: Tuple[str, ...] = ()
	cycle: Tuple[str, ...] = ()
	span: Span = field(default_factory=Span)
	notes: List[str] = field(default_factory=list)

	def __str__(self) -> str:
		return self.format_human()

	@property
	def code(self) -> str:
		return self.kind.value

	def sort_key(self) -> Tuple[str, str, Tuple[str, ...], str]:
		return (self.code, self.class_name or "", self.type_heads, self.message)

	def format_human(self) -> str:
		parts: List[str] = [f"[{self.code}] {self.message}"]
		if self.cycle:
			parts.append(f"cycle=[{', '.join(self.cycle)}]")
		if self.span.is_known():
			parts.append(f"at={self.span.format()}")
		return " ".join(parts)

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code,
			"message": self.message,
			"class_name": self.class_name,
			"type_heads": list(self.type_heads),
			"cycle": list(self.cycle),
			"span": self.span.to_dict(),
			"notes": list(self.notes),
		}

	def to_diagnostic(self, *, phase: str | None = None) -> Diagnostic:
		notes = list(self.notes)
		if self.cycle:
			notes.insert(0, f"cycle: {' -> '.join(self.cycle + self.cycle[:1])}")
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase=phase or self.phase,
			severity="error",
			span=self.span,
			notes=notes,
		)


class DuplicateClass(ClassResolutionError):
	kind = ErrorKind.DUPLICATE_CLASS


class DuplicateType(ClassResolutionError):
	kind = ErrorKind.DUPLICATE_TYPE


class UnknownType(ClassResolutionError):
	kind = ErrorKind.UNKNOWN_TYPE


class UnknownClass(ClassResolutionError):
	kind = ErrorKind.UNKNOWN_CLASS


class UnknownMethod(ClassResolutionError):
	kind = ErrorKind.UNKNOWN_METHOD


class ArityMismatch(ClassResolutionError):
	kind = ErrorKind.ARITY_MISMATCH


class UnboundTypeVariable(ClassResolutionError):
	kind = ErrorKind.UNBOUND_TYPE_VARIABLE


class OverlappingInstance(ClassResolutionError):
	kind = ErrorKind.OVERLAPPING_INSTANCE


class AmbiguousInstance(ClassResolutionError):
	kind = ErrorKind.AMBIGUOUS_INSTANCE


class UnresolvableDefaults(ClassResolutionError):
	kind = ErrorKind.UNRESOLVABLE_DEFAULTS


class MissingMethod(ClassResolutionError):
	kind = ErrorKind.MISSING_METHOD


class NotDerivable(ClassResolutionError):
	kind = ErrorKind.NOT_DERIVABLE


class MissingFieldInstance(ClassResolutionError):
	kind = ErrorKind.MISSING_FIELD_INSTANCE
	phase = "resolve"


class NoInstance(ClassResolutionError):
	kind = ErrorKind.NO_INSTANCE
	phase = "resolve"


def sorted_diagnostics(errors: List[ClassResolutionError], *, phase: str | None = None) -> List[Diagnostic]:
	"""Diagnostics ordered by (code, class name, type heads), not by arrival."""
	return [err.to_diagnostic(phase=phase) for err in sorted(errors, key=lambda e: e.sort_key())]


__all__ = [
	"ErrorKind",
	"ClassResolutionError",
	"DuplicateClass",
	"DuplicateType",
	"UnknownType",
	"UnknownClass",
	"UnknownMethod",
	"ArityMismatch",
	"UnboundTypeVariable",
	"OverlappingInstance",
	"AmbiguousInstance",
	"UnresolvableDefaults",
	"MissingMethod",
	"NotDerivable",
	"MissingFieldInstance",
	"NoInstance",
	"sorted_diagnostics",
]
