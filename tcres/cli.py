# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from tcres.classes.decls import Constraint
from tcres.classes.dictionary import Dictionary
from tcres.classes.merge import RegistryBuilder
from tcres.classes.prelude import prelude_unit
from tcres.classes.resolver import Resolver
from tcres.core.diagnostics import Diagnostic
from tcres.core.type_parse import TypeSyntaxError
from tcres.decl_json import DeclFormatError, load_unit
from tcres.options import EngineOptions


@dataclass(frozen=True)
class CheckOptions:
	unit_paths: List[Path] = field(default_factory=list)
	constraints: List[str] = field(default_factory=list)
	prelude: bool = False
	cache: bool = True


@dataclass
class CheckReport:
	units: List[str] = field(default_factory=list)
	dictionaries: List[Dictionary] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.diagnostics

	def to_dict(self) -> dict[str, Any]:
		return {
			"ok": self.ok,
			"units": list(self.units),
			"dictionaries": [d.describe() for d in self.dictionaries],
			"diagnostics": [d.to_dict() for d in self.diagnostics],
		}


def run_check(opts: CheckOptions) -> CheckReport:
	"""
	Merge the units, then resolve each requested constraint.

	Declaration and constraint syntax errors raise (`DeclFormatError`,
	`TypeSyntaxError`), as does a repeated unit name (`ValueError`); engine
	failures are reported as diagnostics.
	"""
	constraints = [Constraint.parse(text) for text in opts.constraints]
	builder = RegistryBuilder(options=EngineOptions(cache_dictionaries=opts.cache))
	report = CheckReport()
	if opts.prelude:
		unit = prelude_unit()
		builder.add_unit(unit)
		report.units.append(unit.name)
	for path in opts.unit_paths:
		unit = load_unit(path)
		builder.add_unit(unit)
		report.units.append(unit.name)
	merged = builder.seal()
	report.diagnostics.extend(merged.diagnostics)
	discharged = Resolver(merged.registry).discharge(constraints)
	report.dictionaries.extend(discharged.dictionaries.values())
	report.diagnostics.extend(discharged.diagnostics)
	return report


def _print_human(report: CheckReport) -> None:
	for dictionary in report.dictionaries:
		print(f"{dictionary.constraint}:")
		for name in dictionary:
			entry = dictionary[name]
			print(f"  {name}: {entry.origin.value} {entry.target()}")
	for diag in report.diagnostics:
		print(diag.format_human(), file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="tcres", description="Type class resolution engine")
	p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = p.add_subparsers(dest="cmd", required=True)

	check = sub.add_parser("check", help="Merge declaration units and resolve constraints against them")
	check.add_argument("units", nargs="*", type=Path, help="Declaration unit JSON files")
	check.add_argument("--prelude", action="store_true", help="Include the standard Eq/Ord/Show prelude unit")
	check.add_argument(
		"--resolve",
		action="append",
		default=[],
		metavar="CONSTRAINT",
		help="Constraint to resolve, e.g. 'Eq List<Int>' (repeatable)",
	)
	check.add_argument("--no-cache", action="store_true", help="Do not cache resolved dictionaries")
	check.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
	return p


def main(argv: Optional[List[str]] = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	if args.cmd == "check":
		opts = CheckOptions(
			unit_paths=list(args.units),
			constraints=list(args.resolve),
			prelude=bool(args.prelude),
			cache=not args.no_cache,
		)
		try:
			report = run_check(opts)
		except (DeclFormatError, TypeSyntaxError, ValueError, OSError) as err:
			p.error(str(err))
			return 2
		if args.json:
			print(json.dumps(report.to_dict(), sort_keys=True, separators=(",", ":")))
		else:
			_print_human(report)
		return 0 if report.ok else 2

	raise AssertionError("unreachable")


__all__ = ["CheckOptions", "CheckReport", "run_check", "main"]
