# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Group partitioning and reference-legality checks.

A reference from declaration i to declaration j is legal when j sits in the
same group as i (either direction) or in a strictly earlier group. Supertype
references follow the same visibility rule here; their ordering constraint is
checked by the subtype validator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from typesec.core.error_kinds import ErrorKind
from typesec.report import DiagnosticReporter
from typesec.stage1.decl_table import DeclTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Group:
	"""A contiguous run of declarations `[start, start + size)`."""

	index: int
	start: int
	size: int

	@property
	def end(self) -> int:
		return self.start + self.size

	def members(self) -> range:
		return range(self.start, self.end)

	def __contains__(self, decl_index: object) -> bool:
		return isinstance(decl_index, int) and self.start <= decl_index < self.end


@dataclass(frozen=True)
class GroupedTable:
	"""Declaration table annotated with group membership and relative positions."""

	table: DeclTable
	groups: tuple[Group, ...]
	group_of: tuple[int, ...]
	position_of: tuple[int, ...]

	def group_for(self, decl_index: int) -> Group:
		return self.groups[self.group_of[decl_index]]

	def same_group(self, a: int, b: int) -> bool:
		return self.group_of[a] == self.group_of[b]

	def reference_edges(self) -> dict[int, tuple[int, ...]]:
		"""decl index -> in-range indices it references (payload and supertype)."""
		n = len(self.table)
		edges: dict[int, tuple[int, ...]] = {}
		for decl in self.table.decls:
			targets = {r.index for r in decl.references() if r.index is not None and 0 <= r.index < n}
			edges[decl.index] = tuple(sorted(targets))
		return edges


def partition_groups(table: DeclTable, reporter: DiagnosticReporter) -> GroupedTable:
	"""
	Split `table` into its groups and validate every resolved reference.

	Unresolved (index-less) references were already reported by stage1 and are
	skipped here.
	"""
	if sum(table.group_sizes) != len(table):
		raise ValueError(
			f"group sizes cover {sum(table.group_sizes)} declarations, table has {len(table)}"
		)
	groups: list[Group] = []
	group_of: list[int] = []
	position_of: list[int] = []
	start = 0
	for gi, size in enumerate(table.group_sizes):
		if size < 1:
			raise ValueError("groups must be non-empty")
		groups.append(Group(index=gi, start=start, size=size))
		group_of.extend([gi] * size)
		position_of.extend(range(size))
		start += size

	n = len(table)
	for decl in table.decls:
		reported: set[tuple[ErrorKind, int]] = set()
		for ref in decl.references():
			j = ref.index
			if j is None:
				continue
			if j < 0 or j >= n:
				key = (ErrorKind.UNKNOWN_TYPE_INDEX, j)
				if key not in reported:
					reported.add(key)
					reporter.error(
						ErrorKind.UNKNOWN_TYPE_INDEX,
						decl,
						f"reference to type index {j} is out of range (table has {n} types)",
					)
				continue
			gi, gj = group_of[decl.index], group_of[j]
			if gj > gi:
				key = (ErrorKind.FORWARD_REFERENCE_ACROSS_GROUPS, j)
				if key not in reported:
					reported.add(key)
					reporter.error(
						ErrorKind.FORWARD_REFERENCE_ACROSS_GROUPS,
						decl,
						f"reference to {table[j].label()} in later group {gj} (this type is in group {gi})",
						notes=["types may only refer to their own recursion group or earlier groups"],
					)

	logger.debug("partitioned %d declarations into %d groups", n, len(groups))
	return GroupedTable(
		table=table,
		groups=tuple(groups),
		group_of=tuple(group_of),
		position_of=tuple(position_of),
	)


__all__ = ["Group", "GroupedTable", "partition_groups"]
