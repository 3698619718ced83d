# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Stage 2: recursion-group partitioning and reference legality."""

from .groups import Group, GroupedTable, partition_groups

__all__ = ["Group", "GroupedTable", "partition_groups"]
