# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Stage 1: Declaration Table (symbolic -> numeric references)."""

from .decl_table import DeclTable, build_decl_table

__all__ = ["DeclTable", "build_decl_table"]
