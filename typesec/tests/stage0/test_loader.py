# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json

import pytest

from typesec.core.types_core import AbsHeapType, ArrayType, FuncType, NumType, PackedType, RefType, StructType, TypeRef
from typesec.stage0 import ModuleFormatError, RawModule, load_module_json, make_func_decl, module_from_obj, module_to_obj


def _doc(*types):
	return {"format": "typesec-module", "version": 0, "types": list(types)}


def test_module_from_obj_groups_and_payloads() -> None:
	module = module_from_obj(
		_doc(
			{"name": "$f", "func": {"params": ["i32", "externref"], "results": [{"ref": "$f", "null": False}]}},
			{
				"rec": [
					{"name": "$node", "struct": {"fields": [{"type": {"ref": "$node"}, "mut": True}, "i8"]}},
					{"name": "$bytes", "sub": True, "final": True, "supertype": 0, "array": {"type": "i8"}},
				],
				"loc": {"line": 3, "column": 1},
			},
		),
		source="mod.json",
	)
	assert module.group_sizes() == (1, 2)
	assert [g.explicit for g in module.groups] == [False, True]
	assert module.groups[1].span.line == 3

	f, node, arr = list(module.iter_decls())
	assert isinstance(f.composite, FuncType)
	assert f.composite.params == (NumType.I32, RefType(heap=AbsHeapType.EXTERN, nullable=True))
	assert f.composite.results == (RefType(heap=TypeRef(name="$f"), nullable=False),)

	assert isinstance(node.composite, StructType)
	first, second = node.composite.fields
	assert first.mutable and first.storage == RefType(heap=TypeRef(name="$node"))
	assert second.storage is PackedType.I8 and not second.mutable

	assert isinstance(arr.composite, ArrayType)
	assert arr.sub and arr.final
	assert arr.supertype == TypeRef(index=0)


def test_empty_rec_group_contributes_no_declarations() -> None:
	module = module_from_obj(_doc({"rec": []}, {"func": {}}))
	assert len(module.groups) == 2
	assert module.group_sizes() == (1,)
	assert module.decl_count() == 1


@pytest.mark.parametrize(
	"entry, message",
	[
		({"func": {"params": ["i8"]}}, "packed type i8"),
		({"func": {"params": ["i33"]}}, "unknown value type"),
		({"name": "a", "func": {}}, "name must be"),
		({"func": {}, "struct": {}}, "exactly one"),
		({"final": True, "func": {}}, "require \"sub\""),
		({"sub": True, "supertype": True, "func": {}}, "type reference"),
		({"struct": {"fields": [{"mut": True}]}}, "field must be"),
		({"array": {"type": {"ref": "$a", "null": "no"}}}, "null must be"),
	],
)
def test_module_from_obj_rejects_malformed_declarations(entry, message) -> None:
	with pytest.raises(ModuleFormatError, match=message):
		module_from_obj(_doc(entry))


def test_module_from_obj_rejects_wrong_header() -> None:
	with pytest.raises(ModuleFormatError, match="format/version"):
		module_from_obj({"format": "typesec-module", "version": 1, "types": []})


def test_load_module_json_reports_invalid_json(tmp_path) -> None:
	path = tmp_path / "broken.json"
	path.write_text("{not json", encoding="utf-8")
	with pytest.raises(ModuleFormatError, match="invalid JSON"):
		load_module_json(path)


def test_load_module_json_attaches_source_to_spans(tmp_path) -> None:
	path = tmp_path / "types.json"
	path.write_text(json.dumps(_doc({"func": {}, "loc": {"line": 2, "column": 5}})), encoding="utf-8")
	module = load_module_json(path)
	(decl,) = list(module.iter_decls())
	assert decl.span.file == str(path)
	assert decl.span.line == 2


def test_module_to_obj_is_accepted_by_module_from_obj() -> None:
	doc = _doc(
		{"name": "$a", "sub": True, "func": {"params": [{"ref": "$a", "null": True}], "results": ["i64"]}},
		{"rec": [{"sub": True, "final": True, "supertype": "$a", "func": {"params": [{"ref": 0, "null": False}], "results": ["i64"]}}]},
	)
	module = module_from_obj(doc)
	assert module_from_obj(module_to_obj(module)) == module


def test_append_type_adds_singleton_group() -> None:
	module = module_from_obj(_doc({"rec": [{"func": {}}, {"struct": {}}]}))
	extended = module.append_type(make_func_decl([NumType.I32], [NumType.I64]))
	assert module.group_sizes() == (2,)
	assert extended.group_sizes() == (2, 1)
	assert extended.groups[:1] == module.groups
	last = list(extended.iter_decls())[-1]
	assert last.composite == FuncType(params=(NumType.I32,), results=(NumType.I64,))
	assert isinstance(extended, RawModule)
