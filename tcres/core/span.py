# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to declarations and diagnostics.

Declarations arrive from an external parser, so the engine never produces
locations itself. A Span wraps whatever location object the front-end put on
a declaration via the `raw` field while carrying file/line/column when the
object exposes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column plus the raw front-end location."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from a declaration location.

		`None` maps to the unknown Span(); a Span is returned unchanged; a
		mapping (as produced by the JSON loader) or any object with
		`file`/`line`/`column` attributes is unpacked.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		if isinstance(loc, dict):
			return cls(file=loc.get("file"), line=loc.get("line"), column=loc.get("column"), raw=loc)
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			raw=loc,
		)

	def is_known(self) -> bool:
		return self.file is not None or self.line is not None

	def format(self) -> str:
		if not self.is_known():
			return "<unknown>"
		parts = [self.file or "<input>"]
		if self.line is not None:
			parts.append(str(self.line))
			if self.column is not None:
				parts.append(str(self.column))
		return ":".join(parts)

	def to_dict(self) -> dict[str, Any]:
		return {"file": self.file, "line": self.line, "column": self.column}


__all__ = ["Span"]
