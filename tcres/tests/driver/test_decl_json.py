# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from tcres.classes.merge import merge_units
from tcres.classes.prelude import prelude_unit
from tcres.classes.resolver import Resolver
from tcres.core.type_keys import con, var
from tcres.decl_json import DeclFormatError, load_unit, unit_from_dict

SHAPES = {
	"unit": "shapes",
	"classes": [
		{
			"name": "Area",
			"params": ["a"],
			"methods": [{"name": "area", "shape": "Fn<a, Int>"}, "describe"],
			"defaults": {"describe": {"calls": ["area"], "description": "area as text"}},
		}
	],
	"types": [
		{
			"name": "Shape",
			"constructors": [
				{"name": "Circle", "fields": [{"name": "r", "type": "Int"}]},
				{"name": "Rect", "fields": ["Int", "Int"]},
			],
			"deriving": ["Eq"],
		}
	],
	"instances": [
		{"class": "Area", "head": ["Shape"], "methods": {"area": "shape_area"}},
		{"class": "Area", "head": ["List<a>"], "methods": {"area": "sum_area"}, "context": ["Area a"]},
	],
	"derive": [{"class": "Show", "type": "Shape"}],
}


def _write(tmp_path: Path, obj, name: str = "shapes.json") -> Path:
	path = tmp_path / name
	path.write_text(json.dumps(obj), encoding="utf-8")
	return path


def test_load_unit_reads_every_section(tmp_path: Path) -> None:
	unit = load_unit(_write(tmp_path, SHAPES))
	assert unit.name == "shapes"
	(area,) = unit.classes
	assert area.method_names() == ("area", "describe")
	assert area.methods[0].shape == con("Fn", var("a"), con("Int"))
	assert area.defaults["describe"].calls == ("area",)
	(shape,) = unit.data
	assert [c.name for c in shape.constructors] == ["Circle", "Rect"]
	assert shape.constructors[1].fields[0].name is None
	assert shape.origin == "shapes"
	assert unit.instances[1].context[0].class_name == "Area"
	assert unit.derivations == (("Show", "Shape"),)


def test_unit_name_defaults_to_file_stem(tmp_path: Path) -> None:
	obj = dict(SHAPES)
	del obj["unit"]
	assert load_unit(_write(tmp_path, obj, "geometry.json")).name == "geometry"


def test_loaded_unit_merges_and_resolves(tmp_path: Path) -> None:
	unit = load_unit(_write(tmp_path, SHAPES))
	result = merge_units([unit, prelude_unit()])
	assert result.ok, [d.format_human() for d in result.diagnostics]
	r = Resolver(result.registry)
	area = r.resolve("Area", [con("List", con("Shape"))])
	assert area["area"].target() == "sum_area"
	assert area.context[0]["describe"].target() == "area as text"
	with pytest.raises(TypeError):
		area.context[0].invoke("describe", None)
	show = r.resolve("Show", [con("Shape")])
	shape = result.registry.lookup_data("Shape")
	assert show.invoke("show", shape.make("Rect", 1, 2)) == "Rect 1 2"


def test_diagnostics_point_at_the_file(tmp_path: Path) -> None:
	obj = {"instances": [{"class": "Nope", "head": ["Int"]}]}
	path = _write(tmp_path, obj, "bad.json")
	result = merge_units([load_unit(path)])
	(diag,) = result.diagnostics
	assert diag.code == "UnknownClass"
	assert diag.span.file == str(path)


@pytest.mark.parametrize(
	"obj",
	[
		[],
		{"classes": [{"name": "C", "methods": "m"}]},
		{"types": [{"name": "T", "constructors": [{"name": "K", "fields": ["List<"]}]}]},
		{"instances": [{"class": "Eq", "head": "Int"}]},
		{"instances": [{"class": "Eq", "head": ["Int"], "context": ["eq a"]}]},
		{"derive": [{"class": "Eq"}]},
	],
)
def test_malformed_units_are_rejected(obj) -> None:
	with pytest.raises(DeclFormatError):
		unit_from_dict(obj, default_name="bad")


def test_invalid_json_is_a_format_error(tmp_path: Path) -> None:
	path = tmp_path / "broken.json"
	path.write_text("{", encoding="utf-8")
	with pytest.raises(DeclFormatError):
		load_unit(path)
