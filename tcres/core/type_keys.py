# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type terms as seen by the class engine.

The engine never infers types. It receives concrete types from the inference
collaborator and type patterns (with variables) from instance heads, context
constraints and structural field declarations. Both are represented by the
same two frozen records:

- `TypeKey`: a constructor applied to argument terms (`List<Int>`).
- `TypeVarKey`: a type variable (`a`), only legal in patterns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class TypeHeadKey:
	"""Outermost constructor of a type: its name and how many arguments it takes."""

	name: str
	arity: int = 0

	def __str__(self) -> str:
		return f"{self.name}/{self.arity}" if self.arity else self.name


@dataclass(frozen=True)
class TypeKey:
	name: str
	args: Tuple["TypeTerm", ...] = ()

	def head(self) -> TypeHeadKey:
		return TypeHeadKey(name=self.name, arity=len(self.args))

	def __str__(self) -> str:
		return render_type(self)


@dataclass(frozen=True)
class TypeVarKey:
	name: str

	def head(self) -> None:
		return None

	def __str__(self) -> str:
		return self.name


TypeTerm = Union[TypeKey, TypeVarKey]
Subst = Dict[str, TypeTerm]


def con(name: str, *args: TypeTerm) -> TypeKey:
	"""Shorthand for building constructor terms in code and tests."""
	return TypeKey(name=name, args=tuple(args))


def var(name: str) -> TypeVarKey:
	return TypeVarKey(name=name)


def render_type(term: TypeTerm) -> str:
	if isinstance(term, TypeVarKey):
		return term.name
	if not term.args:
		return term.name
	args = ", ".join(render_type(a) for a in term.args)
	return f"{term.name}<{args}>"


def render_types(terms: Iterable[TypeTerm]) -> str:
	return " ".join(render_type(t) for t in terms)


def free_vars(term: TypeTerm, out: Optional[List[str]] = None) -> List[str]:
	"""Type variables of `term` in first-occurrence order."""
	acc: List[str] = out if out is not None else []
	if isinstance(term, TypeVarKey):
		if term.name not in acc:
			acc.append(term.name)
		return acc
	for arg in term.args:
		free_vars(arg, acc)
	return acc


def is_concrete(term: TypeTerm) -> bool:
	return not free_vars(term)


def substitute(term: TypeTerm, subst: Subst) -> TypeTerm:
	if isinstance(term, TypeVarKey):
		return subst.get(term.name, term)
	if not term.args:
		return term
	return TypeKey(name=term.name, args=tuple(substitute(a, subst) for a in term.args))


def match_type(pattern: TypeTerm, concrete: TypeTerm, subst: Subst) -> bool:
	"""
	One-way match of `pattern` against `concrete`, extending `subst` in place.

	A variable already bound must be bound to an equal term (`Pair<a, a>` does
	not match `Pair<Int, Bool>`). On failure `subst` may hold partial bindings;
	callers discard it.
	"""
	if isinstance(pattern, TypeVarKey):
		bound = subst.get(pattern.name)
		if bound is None:
			subst[pattern.name] = concrete
			return True
		return bound == concrete
	if not isinstance(concrete, TypeKey):
		return False
	if pattern.name != concrete.name or len(pattern.args) != len(concrete.args):
		return False
	return all(match_type(p, c, subst) for p, c in zip(pattern.args, concrete.args))


def match_types(patterns: Tuple[TypeTerm, ...], concretes: Tuple[TypeTerm, ...]) -> Optional[Subst]:
	if len(patterns) != len(concretes):
		return None
	subst: Subst = {}
	for pattern, concrete in zip(patterns, concretes):
		if not match_type(pattern, concrete, subst):
			return None
	return subst


__all__ = [
	"TypeHeadKey",
	"TypeKey",
	"TypeVarKey",
	"TypeTerm",
	"Subst",
	"con",
	"var",
	"render_type",
	"render_types",
	"free_vars",
	"is_concrete",
	"substitute",
	"match_type",
	"match_types",
]
