"""
typesec.core: shared types/diagnostics used across the validation stages.

Modules:
  - span: best-effort source locations
  - error_kinds: ErrorKind enum and phase labels
  - diagnostics: Diagnostic / SkippedDecl records
  - types_core: value/storage/composite types and Declaration
  - type_render: compact text rendering for messages
"""

__all__ = [
	"span",
	"error_kinds",
	"diagnostics",
	"types_core",
	"type_render",
]
