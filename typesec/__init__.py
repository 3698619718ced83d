# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
typesec: recursive type-group resolver and subtype validator.

Stages:
  stage0: raw declarations + group markers, JSON interchange
  stage1: Declaration Table (name binding)
  stage2: recursion-group partitioning and reference legality
  stage3: iso-recursive canonical identities
  stage4: subtype validation

The pipeline entrypoint is `typesec.driver.validate_module`; the CLI is
`typesec.driver:main`.
"""

__version__ = "0.1.0"

__all__ = ["stage0", "stage1", "stage2", "stage3", "stage4", "driver", "report", "config"]
