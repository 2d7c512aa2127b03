# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON form of a declaration unit.

One file holds the declarations of one compilation unit:

	{
	  "unit": "shapes",
	  "classes": [
	    {"name": "Eq", "params": ["a"],
	     "methods": [{"name": "eq", "shape": "Fn<a, a, Bool>"}, "neq"],
	     "defaults": {"neq": {"calls": ["eq"], "description": "not eq"}}}
	  ],
	  "types": [
	    {"name": "Shape", "params": [],
	     "constructors": [{"name": "P", "fields": [{"name": "x", "type": "Int"}]}],
	     "deriving": ["Eq"]}
	  ],
	  "instances": [
	    {"class": "Eq", "head": ["List<a>"], "methods": {"eq": "list_eq"}, "context": ["Eq a"]}
	  ],
	  "derive": [{"class": "Show", "type": "Shape"}]
	}

Types and constraints use the notation of `tcres.core.type_parse`. Method
implementations are opaque symbol names handed through to the dictionary;
defaults loaded from JSON are descriptions only and cannot be invoked.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from tcres.classes.decls import (
	ClassDecl,
	Constraint,
	ConstructorDecl,
	DataDecl,
	DefaultBody,
	FieldDecl,
	InstanceDecl,
	MethodSig,
)
from tcres.classes.merge import DeclUnit
from tcres.core.type_parse import TypeSyntaxError, parse_type


class DeclFormatError(ValueError):
	"""Malformed declaration unit (bad JSON shape or type syntax)."""


def _expect(obj: Any, kind: type, what: str) -> Any:
	if not isinstance(obj, kind):
		raise DeclFormatError(f"{what} must be a {kind.__name__}, got {type(obj).__name__}")
	return obj


def _type(text: Any, what: str):
	_expect(text, str, what)
	try:
		return parse_type(text)
	except TypeSyntaxError as err:
		raise DeclFormatError(f"{what}: {err}") from err


def _constraint(text: Any, what: str) -> Constraint:
	_expect(text, str, what)
	try:
		return Constraint.parse(text)
	except TypeSyntaxError as err:
		raise DeclFormatError(f"{what}: {err}") from err


def _class_from_dict(obj: Mapping[str, Any], loc: Dict[str, Any]) -> ClassDecl:
	name = _expect(obj.get("name"), str, "class name")
	methods: List[MethodSig] = []
	for item in _expect(obj.get("methods", []), list, f"methods of class '{name}'"):
		if isinstance(item, str):
			methods.append(MethodSig(name=item))
			continue
		_expect(item, dict, f"method of class '{name}'")
		shape = item.get("shape")
		methods.append(
			MethodSig(
				name=_expect(item.get("name"), str, f"method name in class '{name}'"),
				shape=_type(shape, f"shape of '{name}.{item.get('name')}'") if shape is not None else None,
			)
		)
	defaults: Dict[str, DefaultBody] = {}
	for method, body in _expect(obj.get("defaults", {}), dict, f"defaults of class '{name}'").items():
		if isinstance(body, list):
			body = {"calls": body}
		_expect(body, dict, f"default of '{name}.{method}'")
		defaults[method] = DefaultBody(
			calls=tuple(_expect(body.get("calls", []), list, f"calls of default '{name}.{method}'")),
			description=body.get("description"),
		)
	params = tuple(_expect(obj.get("params", []), list, f"params of class '{name}'"))
	return ClassDecl(name=name, params=params, methods=tuple(methods), defaults=defaults, loc=loc)


def _data_from_dict(obj: Mapping[str, Any], unit: str, loc: Dict[str, Any]) -> DataDecl:
	name = _expect(obj.get("name"), str, "type name")
	ctors: List[ConstructorDecl] = []
	for ctor in _expect(obj.get("constructors", []), list, f"constructors of '{name}'"):
		_expect(ctor, dict, f"constructor of '{name}'")
		cname = _expect(ctor.get("name"), str, f"constructor name in '{name}'")
		fields: List[FieldDecl] = []
		for fld in _expect(ctor.get("fields", []), list, f"fields of '{name}.{cname}'"):
			if isinstance(fld, str):
				fields.append(FieldDecl(name=None, type=_type(fld, f"field of '{name}.{cname}'")))
				continue
			_expect(fld, dict, f"field of '{name}.{cname}'")
			fields.append(FieldDecl(name=fld.get("name"), type=_type(fld.get("type"), f"field of '{name}.{cname}'")))
		ctors.append(ConstructorDecl(name=cname, fields=tuple(fields)))
	return DataDecl(
		name=name,
		params=tuple(_expect(obj.get("params", []), list, f"params of '{name}'")),
		constructors=tuple(ctors),
		deriving=tuple(_expect(obj.get("deriving", []), list, f"deriving of '{name}'")),
		origin=unit,
		loc=loc,
	)


def _instance_from_dict(obj: Mapping[str, Any], unit: str, loc: Dict[str, Any]) -> InstanceDecl:
	class_name = _expect(obj.get("class"), str, "instance class")
	head = tuple(_type(t, f"head of instance of '{class_name}'") for t in _expect(obj.get("head"), list, "instance head"))
	context = tuple(
		_constraint(c, f"context of instance of '{class_name}'") for c in _expect(obj.get("context", []), list, "instance context")
	)
	methods = dict(_expect(obj.get("methods", {}), dict, f"methods of instance of '{class_name}'"))
	return InstanceDecl(class_name=class_name, head=head, methods=methods, context=context, origin=unit, loc=loc)


def unit_from_dict(obj: Mapping[str, Any], *, default_name: str, file: Optional[str] = None) -> DeclUnit:
	_expect(obj, dict, "declaration unit")
	name = obj.get("unit") or default_name
	_expect(name, str, "unit name")

	def _loc(section: str, idx: int) -> Dict[str, Any]:
		return {"file": file, "line": None, "column": None, "section": section, "index": idx}

	classes = tuple(
		_class_from_dict(_expect(c, dict, "class"), _loc("classes", i)) for i, c in enumerate(obj.get("classes", []))
	)
	data = tuple(
		_data_from_dict(_expect(d, dict, "type"), name, _loc("types", i)) for i, d in enumerate(obj.get("types", []))
	)
	instances = tuple(
		_instance_from_dict(_expect(inst, dict, "instance"), name, _loc("instances", i))
		for i, inst in enumerate(obj.get("instances", []))
	)
	derivations: List[Tuple[str, str]] = []
	for req in _expect(obj.get("derive", []), list, "derive"):
		_expect(req, dict, "derive request")
		derivations.append(
			(_expect(req.get("class"), str, "derive class"), _expect(req.get("type"), str, "derive type"))
		)
	return DeclUnit(name=name, classes=classes, data=data, instances=instances, derivations=tuple(derivations))


def load_unit(path: Path) -> DeclUnit:
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise DeclFormatError(f"{path}: invalid JSON: {err}") from err
	return unit_from_dict(obj, default_name=path.stem, file=str(path))


__all__ = ["DeclFormatError", "unit_from_dict", "load_unit"]
