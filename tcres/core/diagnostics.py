"""
Common diagnostic structure for registry and resolver failures.

Engine operations raise; batch drivers (unit merging, constraint discharge,
the CLI) turn the raised errors into these records so a pipeline can collect
several of them before deciding what is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents an engine diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Which stage produced the diagnostic: "registry" for declaration
	# registration and unit merging, "resolve" for constraint discharge.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self) -> str:
		head = f"{self.severity}[{self.code}]" if self.code else self.severity
		text = f"{head}: {self.message}"
		if self.span.is_known():
			text = f"{self.span.format()}: {text}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_dict(self) -> dict[str, Any]:
		return {
			"message": self.message,
			"code": self.code,
			"phase": self.phase,
			"severity": self.severity,
			"span": self.span.to_dict(),
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
