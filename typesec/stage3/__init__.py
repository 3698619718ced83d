# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Stage 3: iso-recursive canonical identities."""

from .canon import CanonicalId, CanonTable, canon_field, canon_storage, canonicalize

__all__ = ["CanonicalId", "CanonTable", "canon_field", "canon_storage", "canonicalize"]
