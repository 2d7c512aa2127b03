"""
tcres.core: type terms, textual type notation and diagnostics shared by the
registry and the resolver.

Modules:
  - span: best-effort source spans carried by declarations
  - diagnostics: Diagnostic records for batch reporting
  - type_keys: TypeKey/TypeVarKey terms, matching and substitution
  - type_parse: lark grammar for `List<Int>` / `Eq List<Int>` notation
"""

__all__ = [
	"span",
	"diagnostics",
	"type_keys",
	"type_parse",
]
