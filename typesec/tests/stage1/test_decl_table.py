# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from typesec.core.error_kinds import ErrorKind
from typesec.core.types_core import RefType, TypeRef
from typesec.report import DiagnosticReporter
from typesec.stage1 import build_decl_table
from typesec.test_support import field, func, module, ref, struct


def _build(*items):
	reporter = DiagnosticReporter()
	table = build_decl_table(module(*items), reporter)
	return table, reporter.finish()


def test_symbolic_references_resolve_to_indices() -> None:
	table, report = _build(
		func(name="$a"),
		[
			struct(field(ref("$b")), name="$node"),
			struct(field(ref("$node")), name="$b"),
		],
		func(params=[ref("$a")], name="$c", sub="$a"),
	)
	assert report.diagnostics == ()
	assert table.group_sizes == (1, 2, 1)
	assert [d.index for d in table.decls] == [0, 1, 2, 3]
	assert table[1].composite.fields[0].storage == RefType(heap=TypeRef(name="$b", index=2))
	assert table[3].supertype == TypeRef(name="$a", index=0)
	assert table.index_of("$node") == 1
	assert table.index_of("$zzz") is None


def test_forward_names_resolve_table_wide() -> None:
	# Visibility is checked by the partitioner, not here.
	table, report = _build(func(params=[ref("$later")]), func(name="$later"))
	assert report.diagnostics == ()
	assert table[0].composite.params[0].heap.index == 1


def test_positional_references_pass_through_unchanged() -> None:
	table, report = _build(func(params=[ref(7)]))
	assert report.diagnostics == ()
	assert table[0].composite.params[0].heap == TypeRef(index=7)


def test_unbound_name_is_unresolved_reference() -> None:
	table, report = _build(func(name="$a"), struct(field(ref("$ghost")), field(ref("$ghost")), field(ref("$a"))))
	assert [d.code for d in report.diagnostics] == [ErrorKind.UNRESOLVED_REFERENCE]
	diag = report.diagnostics[0]
	assert diag.decl_index == 1
	assert "$ghost" in diag.message
	assert diag.phase == "resolve"
	assert table[1].composite.fields[0].storage.heap.index is None
	assert table[1].composite.fields[2].storage.heap.index == 0


def test_unbound_supertype_name_is_unresolved_reference() -> None:
	_table, report = _build(func(sub="$nope"))
	assert [d.code for d in report.diagnostics] == [ErrorKind.UNRESOLVED_REFERENCE]


def test_duplicate_name_reported_on_later_declaration() -> None:
	table, report = _build(func(name="$t"), struct(name="$t"), func(params=[ref("$t")]))
	assert [(d.code, d.decl_index) for d in report.diagnostics] == [(ErrorKind.DUPLICATE_TYPE_NAME, 1)]
	assert report.diagnostics[0].notes == ["first bound by type 0"]
	# The first binding wins.
	assert table[2].composite.params[0].heap.index == 0


def test_rejects_non_module_input() -> None:
	with pytest.raises(TypeError, match="RawModule"):
		build_decl_table([func()], DiagnosticReporter())
