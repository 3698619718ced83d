# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Compact text rendering of types for diagnostic messages."""

from __future__ import annotations

from typing import assert_never

from .types_core import (
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
)


def render_storage(st: StorageType) -> str:
	if isinstance(st, (NumType, PackedType)):
		return st.value
	if isinstance(st, RefType):
		heap = st.heap.value if isinstance(st.heap, AbsHeapType) else _render_ref(st.heap)
		return f"(ref null {heap})" if st.nullable else f"(ref {heap})"
	assert_never(st)


def _render_ref(ref: TypeRef) -> str:
	if ref.name is not None:
		return ref.name
	return str(ref.index)


def render_field(f: FieldType) -> str:
	inner = render_storage(f.storage)
	return f"(mut {inner})" if f.mutable else inner


def render_composite(comp: CompositeType) -> str:
	"""Render a composite payload, e.g. `(func (param i32) (result (ref 0)))`."""
	if isinstance(comp, FuncType):
		parts = ["func"]
		parts.extend(f"(param {render_storage(p)})" for p in comp.params)
		parts.extend(f"(result {render_storage(r)})" for r in comp.results)
		return "(" + " ".join(parts) + ")"
	if isinstance(comp, StructType):
		parts = ["struct"]
		parts.extend(f"(field {render_field(f)})" for f in comp.fields)
		return "(" + " ".join(parts) + ")"
	if isinstance(comp, ArrayType):
		return f"(array {render_field(comp.element)})"
	assert_never(comp)


__all__ = ["render_storage", "render_field", "render_composite"]
