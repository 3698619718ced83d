# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Stage 4: supertype edges, finality and structural compatibility."""

from .subtyping import SubtypeLattice, check_subtypes, structural_mismatch

__all__ = ["SubtypeLattice", "check_subtypes", "structural_mismatch"]
