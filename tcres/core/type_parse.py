# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Textual notation for type terms and constraints.

Declaration files, the CLI and tests spell types the way diagnostics render
them:

    Int            List<a>           Map<String, List<Int>>
    Eq List<Int>   Convert Int String

Identifiers starting with an upper-case letter are constructors (and class
names in constraints); lower-case identifiers are type variables.
"""

from __future__ import annotations

from typing import Tuple

from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedInput

from .type_keys import TypeKey, TypeTerm, TypeVarKey

_GRAMMAR_SRC = r"""
type_term: type
constraint: UNAME type+

?type: con
     | var
con: UNAME type_args?
type_args: "<" type ("," type)* ">"
var: LNAME

UNAME: /[A-Z][A-Za-z0-9_]*/
LNAME: /[a-z_][A-Za-z0-9_]*/

%import common.WS
%ignore WS
"""

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start=["type_term", "constraint"],
	maybe_placeholders=False,
)


class TypeSyntaxError(ValueError):
	"""
	Malformed type or constraint text.

	A `ValueError` so loaders can treat it like any other bad input while still
	reporting the offending column.
	"""

	def __init__(self, message: str, *, text: str, column: int | None = None) -> None:
		super().__init__(message)
		self.text = text
		self.column = column


class _TypeBuilder(Transformer):
	def con(self, items):
		name: Token = items[0]
		args: Tuple[TypeTerm, ...] = items[1] if len(items) > 1 else ()
		return TypeKey(name=str(name), args=args)

	def type_args(self, items):
		return tuple(items)

	def var(self, items):
		return TypeVarKey(name=str(items[0]))

	def type_term(self, items):
		return items[0]

	def constraint(self, items):
		return str(items[0]), tuple(items[1:])


def _parse(text: str, start: str):
	try:
		tree = _PARSER.parse(text, start=start)
	except UnexpectedInput as err:
		column = getattr(err, "column", None)
		raise TypeSyntaxError(f"invalid {start.replace('_', ' ')} '{text}' at column {column}", text=text, column=column) from err
	return _TypeBuilder().transform(tree)


def parse_type(text: str) -> TypeTerm:
	return _parse(text, "type_term")


def parse_constraint(text: str) -> Tuple[str, Tuple[TypeTerm, ...]]:
	"""Parse `Class T1 .. Tn` into the class name and its type arguments."""
	return _parse(text, "constraint")


__all__ = ["TypeSyntaxError", "parse_type", "parse_constraint"]
