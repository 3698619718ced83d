# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON interchange for raw type sections (v0).

The text parser lives outside this package; it (or any other producer) hands us
the declarations in this JSON shape. Malformed documents raise
`ModuleFormatError`; they never turn into validation diagnostics.

Format (pinned for v0, JSON):
{
  "format": "typesec-module",
  "version": 0,
  "types": [
    {"name": "$a", "func": {"params": ["i32"], "results": [{"ref": "$a", "null": true}]}},
    {"rec": [
      {"name": "$node", "struct": {"fields": [{"type": {"ref": "$node"}, "mut": true}]}},
      {"name": "$list", "sub": true, "final": true, "supertype": 0, "array": {"type": "i8"}}
    ]}
  ]
}

Value types are strings (`i32 i64 f32 f64 v128`) or `{"ref": heap, "null": bool}`
(null defaults to true); heap is an abstract heap type name, a `$name` or an
integer index. Packed types (`i8 i16`) are only accepted as field storage.
Declarations and groups may carry `"loc": {"line": N, "column": M}`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, assert_never

from typesec.core.span import Span
from typesec.core.types_core import (
	ABS_HEAP_TYPES_BY_NAME,
	NUM_TYPES_BY_NAME,
	PACKED_TYPES_BY_NAME,
	AbsHeapType,
	ArrayType,
	CompositeType,
	FieldType,
	FuncType,
	NumType,
	PackedType,
	RefType,
	StorageType,
	StructType,
	TypeRef,
	ValType,
)
from typesec.stage0.raw import RawDecl, RawModule, RawRecGroup

MODULE_FORMAT = "typesec-module"
MODULE_VERSION = 0

_COMPOSITE_KEYS = ("func", "struct", "array")


class ModuleFormatError(ValueError):
	"""Raised for documents that are not a well-formed v0 type section."""


def load_module_json(path: Path) -> RawModule:
	"""Load a module file (see module docstring for the format)."""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise ModuleFormatError(f"{path}: invalid JSON: {err}") from err
	return module_from_obj(obj, source=str(path))


def module_from_obj(obj: Any, *, source: Optional[str] = None) -> RawModule:
	"""Decode a JSON object into a RawModule."""
	if not isinstance(obj, Mapping):
		raise ModuleFormatError("module must be a JSON object")
	if obj.get("format") != MODULE_FORMAT or obj.get("version") != MODULE_VERSION:
		raise ModuleFormatError("unsupported module format/version")
	items = obj.get("types")
	if items is None:
		items = []
	if not isinstance(items, list):
		raise ModuleFormatError("module types must be a JSON array")

	groups: list[RawRecGroup] = []
	for pos, item in enumerate(items):
		where = f"types[{pos}]"
		if not isinstance(item, Mapping):
			raise ModuleFormatError(f"{where}: entry must be a JSON object")
		if "rec" in item:
			members = item["rec"]
			if not isinstance(members, list):
				raise ModuleFormatError(f"{where}: rec must be a JSON array")
			decls = tuple(_decl_from_obj(m, f"{where}.rec[{i}]", source) for i, m in enumerate(members))
			groups.append(RawRecGroup(decls=decls, explicit=True, span=Span.from_loc(item.get("loc"), file=source)))
		else:
			decl = _decl_from_obj(item, where, source)
			groups.append(RawRecGroup(decls=(decl,), explicit=False, span=decl.span))
	return RawModule(groups=tuple(groups), source=source)


def _decl_from_obj(obj: Any, where: str, source: Optional[str]) -> RawDecl:
	if not isinstance(obj, Mapping):
		raise ModuleFormatError(f"{where}: declaration must be a JSON object")
	present = [k for k in _COMPOSITE_KEYS if k in obj]
	if len(present) != 1:
		raise ModuleFormatError(f"{where}: declaration needs exactly one of func/struct/array")
	span = Span.from_loc(obj.get("loc"), file=source)
	name = obj.get("name")
	if name is not None and (not isinstance(name, str) or not name.startswith("$") or len(name) < 2):
		raise ModuleFormatError(f"{where}: name must be a string like '$t'")
	sub = obj.get("sub", False)
	final = obj.get("final", False)
	if not isinstance(sub, bool) or not isinstance(final, bool):
		raise ModuleFormatError(f"{where}: sub/final must be booleans")
	supertype = None
	if obj.get("supertype") is not None:
		supertype = _ref_from_obj(obj["supertype"], f"{where}.supertype", span)
	if (supertype is not None or final) and not sub:
		raise ModuleFormatError(f"{where}: supertype/final require \"sub\": true")

	kind = present[0]
	body = obj[kind]
	comp: CompositeType
	if kind == "func":
		if not isinstance(body, Mapping):
			raise ModuleFormatError(f"{where}.func: must be a JSON object")
		params = _val_list(body.get("params", []), f"{where}.func.params", span)
		results = _val_list(body.get("results", []), f"{where}.func.results", span)
		comp = FuncType(params=params, results=results)
	elif kind == "struct":
		if not isinstance(body, Mapping):
			raise ModuleFormatError(f"{where}.struct: must be a JSON object")
		fields = body.get("fields", [])
		if not isinstance(fields, list):
			raise ModuleFormatError(f"{where}.struct.fields: must be a JSON array")
		comp = StructType(fields=tuple(_field_from_obj(f, f"{where}.struct.fields[{i}]", span) for i, f in enumerate(fields)))
	else:
		comp = ArrayType(element=_field_from_obj(body, f"{where}.array", span))
	return RawDecl(composite=comp, name=name, supertype=supertype, sub=sub, final=final, span=span)


def _val_list(items: Any, where: str, span: Span) -> tuple[ValType, ...]:
	if not isinstance(items, list):
		raise ModuleFormatError(f"{where}: must be a JSON array")
	out: list[ValType] = []
	for i, item in enumerate(items):
		st = _storage_from_obj(item, f"{where}[{i}]", span)
		if isinstance(st, PackedType):
			raise ModuleFormatError(f"{where}[{i}]: packed type {st.value} is only allowed as field storage")
		out.append(st)
	return tuple(out)


def _field_from_obj(obj: Any, where: str, span: Span) -> FieldType:
	# Shorthand: a bare storage type is an immutable field.
	if isinstance(obj, str) or (isinstance(obj, Mapping) and "ref" in obj):
		return FieldType(storage=_storage_from_obj(obj, where, span), mutable=False)
	if not isinstance(obj, Mapping) or "type" not in obj:
		raise ModuleFormatError(f"{where}: field must be a storage type or {{\"type\": ..., \"mut\": bool}}")
	mutable = obj.get("mut", False)
	if not isinstance(mutable, bool):
		raise ModuleFormatError(f"{where}: mut must be a boolean")
	return FieldType(storage=_storage_from_obj(obj["type"], f"{where}.type", span), mutable=mutable)


def _storage_from_obj(obj: Any, where: str, span: Span) -> StorageType:
	if isinstance(obj, str):
		if obj in NUM_TYPES_BY_NAME:
			return NUM_TYPES_BY_NAME[obj]
		if obj in PACKED_TYPES_BY_NAME:
			return PACKED_TYPES_BY_NAME[obj]
		# WAT shorthands for nullable abstract references.
		if obj.endswith("ref") and obj[:-3] in ABS_HEAP_TYPES_BY_NAME:
			return RefType(heap=ABS_HEAP_TYPES_BY_NAME[obj[:-3]], nullable=True)
		raise ModuleFormatError(f"{where}: unknown value type {obj!r}")
	if isinstance(obj, Mapping) and "ref" in obj:
		nullable = obj.get("null", True)
		if not isinstance(nullable, bool):
			raise ModuleFormatError(f"{where}: null must be a boolean")
		heap_obj = obj["ref"]
		if isinstance(heap_obj, str) and heap_obj in ABS_HEAP_TYPES_BY_NAME:
			return RefType(heap=ABS_HEAP_TYPES_BY_NAME[heap_obj], nullable=nullable)
		return RefType(heap=_ref_from_obj(heap_obj, f"{where}.ref", span), nullable=nullable)
	raise ModuleFormatError(f"{where}: value type must be a string or {{\"ref\": ...}}")


def _ref_from_obj(obj: Any, where: str, span: Span) -> TypeRef:
	if isinstance(obj, bool):
		raise ModuleFormatError(f"{where}: type reference must be '$name' or an index")
	if isinstance(obj, int):
		return TypeRef(index=obj, span=span)
	if isinstance(obj, str) and obj.startswith("$") and len(obj) > 1:
		return TypeRef(name=obj, span=span)
	raise ModuleFormatError(f"{where}: type reference must be '$name' or an index")


def module_to_obj(module: RawModule) -> dict[str, Any]:
	"""Encode a RawModule back into the v0 JSON shape (deterministic)."""
	types: list[Any] = []
	for group in module.groups:
		if group.explicit:
			types.append({"rec": [_decl_to_obj(d) for d in group.decls]})
		else:
			types.extend(_decl_to_obj(d) for d in group.decls)
	return {"format": MODULE_FORMAT, "version": MODULE_VERSION, "types": types}


def _decl_to_obj(decl: RawDecl) -> dict[str, Any]:
	out: dict[str, Any] = {}
	if decl.name is not None:
		out["name"] = decl.name
	if decl.sub:
		out["sub"] = True
		if decl.final:
			out["final"] = True
		if decl.supertype is not None:
			out["supertype"] = _ref_to_obj(decl.supertype)
	comp = decl.composite
	if isinstance(comp, FuncType):
		out["func"] = {"params": [_storage_to_obj(p) for p in comp.params], "results": [_storage_to_obj(r) for r in comp.results]}
	elif isinstance(comp, StructType):
		out["struct"] = {"fields": [_field_to_obj(f) for f in comp.fields]}
	elif isinstance(comp, ArrayType):
		out["array"] = _field_to_obj(comp.element)
	else:
		assert_never(comp)
	return out


def _field_to_obj(f: FieldType) -> dict[str, Any]:
	return {"type": _storage_to_obj(f.storage), "mut": f.mutable}


def _storage_to_obj(st: StorageType) -> Any:
	if isinstance(st, (NumType, PackedType)):
		return st.value
	if isinstance(st, RefType):
		heap: Any = st.heap.value if isinstance(st.heap, AbsHeapType) else _ref_to_obj(st.heap)
		return {"ref": heap, "null": st.nullable}
	assert_never(st)


def _ref_to_obj(ref: TypeRef) -> Any:
	if ref.name is not None:
		return ref.name
	return ref.index


__all__ = ["ModuleFormatError", "load_module_json", "module_from_obj", "module_to_obj", "MODULE_FORMAT", "MODULE_VERSION"]
