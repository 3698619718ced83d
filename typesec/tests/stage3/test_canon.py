# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import itertools

from typesec.config import ValidationConfig
from typesec.report import DiagnosticReporter
from typesec.stage1 import build_decl_table
from typesec.stage2 import partition_groups
from typesec.stage3 import CanonTable, canonicalize
from typesec.stage3.canon import decl_shape
from typesec.test_support import array, field, func, module, ref, struct


def _canon(*items, config: ValidationConfig = ValidationConfig()) -> tuple[CanonTable, DiagnosticReporter]:
	reporter = DiagnosticReporter()
	table = build_decl_table(module(*items), reporter)
	grouped = partition_groups(table, reporter)
	reporter.propagate(grouped.reference_edges())
	return canonicalize(grouped, reporter, config), reporter


def test_structurally_identical_singletons_share_identity() -> None:
	canon, _ = _canon(func(), func(), func(params=["i32"]))
	assert canon.same(0, 1)
	assert not canon.same(0, 2)
	assert canon.representative(1) == 0
	assert list(canon.classes().values()) == [(0, 1), (2,)]


def test_identical_recursive_groups_at_different_positions_are_equal() -> None:
	canon, _ = _canon(
		[struct(field(ref(1))), struct(field(ref(0)), field("i32"))],
		func(),
		array("i8"),
		[struct(field(ref(5))), struct(field(ref(4)), field("i32"))],
	)
	assert canon.same(0, 4)
	assert canon.same(1, 5)
	assert not canon.same(0, 3)
	assert not canon.same(0, 1)
	assert canon.group_digests[0] == canon.group_digests[3]


def test_group_members_compare_by_position_not_content() -> None:
	# Same shapes, but member order differs: positions pair up differently.
	canon, _ = _canon(
		[struct(field("i32")), struct(field("i64"))],
		[struct(field("i64")), struct(field("i32"))],
	)
	assert not canon.same(0, 3)
	assert not canon.same(1, 2)


def test_group_size_matters() -> None:
	canon, _ = _canon([func()], [func(), func()])
	assert not canon.same(0, 1)
	assert not canon.same(0, 2)
	# Same digest for the group, different positions.
	assert canon.id_of(1).group == canon.id_of(2).group
	assert not canon.same(1, 2)


def test_self_reference_folds_to_relative_offset_zero() -> None:
	canon, _ = _canon(func(), func(params=[ref(1)]), array("i32"), func(params=[ref(3)]))
	assert canon.same(1, 3)
	reporter = DiagnosticReporter()
	table = build_decl_table(module(func(params=[ref(0)])), reporter)
	grouped = partition_groups(table, reporter)
	shape = decl_shape(table[0], grouped.groups[0], [None], implicit_final=False)
	assert shape["type"] == ["func", [["ref", True, ["rec", 0]]], []]


def test_self_referential_identity_is_stable_across_runs() -> None:
	first, _ = _canon(func(params=[ref(0)], results=[ref(0)]))
	second, _ = _canon(func(params=[ref(0)], results=[ref(0)]))
	assert first.ids == second.ids


def test_cross_group_references_use_target_identity() -> None:
	canon, _ = _canon(
		struct(field("i32")),
		struct(field("i32")),
		array(ref(0)),
		array(ref(1)),
		array(ref(0, null=False)),
	)
	assert canon.same(0, 1)
	assert canon.same(2, 3)
	assert not canon.same(2, 4)


def test_finality_and_supertype_are_part_of_identity() -> None:
	canon, _ = _canon(func(), func(sub=True), func(final=True), func(sub=0))
	# Bare declarations are open by default, like an explicit `sub`.
	assert canon.same(0, 1)
	assert not canon.same(0, 2)
	assert not canon.same(0, 3)


def test_strict_finality_makes_bare_equal_to_sub_final() -> None:
	canon, _ = _canon(func(), func(final=True), func(sub=True), config=ValidationConfig(implicit_final=True))
	assert canon.same(0, 1)
	assert not canon.same(0, 2)


def test_identity_is_an_equivalence_relation() -> None:
	canon, _ = _canon(
		func(),
		func(),
		[struct(field(ref(2), mut=True))],
		[struct(field(ref(3), mut=True))],
		func(),
		array(ref(2)),
		array(ref(3)),
		[struct(field(ref(8))), struct(field(ref(7)))],
	)
	n = len(canon.ids)
	for a in range(n):
		assert canon.same(a, a)
	for a, b in itertools.product(range(n), repeat=2):
		assert canon.same(a, b) == canon.same(b, a)
	for a, b, c in itertools.product(range(n), repeat=3):
		if canon.same(a, b) and canon.same(b, c):
			assert canon.same(a, c)
	assert canon.same(0, 4)
	assert canon.same(2, 3)
	assert canon.same(5, 6)


def test_tainted_member_blocks_whole_group() -> None:
	canon, reporter = _canon(
		[struct(field(ref("$missing"))), struct(field("i32"))],
		func(),
	)
	assert canon.id_of(0) is None
	assert canon.id_of(1) is None
	assert canon.id_of(2) is not None
	assert canon.group_digests[0] is None
	report = reporter.finish()
	assert [(s.decl_index, s.cause_index) for s in report.skipped] == [(1, 0)]
	assert not canon.same(0, 0)
