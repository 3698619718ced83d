# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stage 0: raw type-section input (declarations + group markers) and the JSON
interchange loader.
"""

from .raw import RawDecl, RawModule, RawRecGroup, make_func_decl
from .loader import ModuleFormatError, load_module_json, module_from_obj, module_to_obj

__all__ = [
	"RawDecl",
	"RawModule",
	"RawRecGroup",
	"make_func_decl",
	"ModuleFormatError",
	"load_module_json",
	"module_from_obj",
	"module_to_obj",
]
