# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-14
"""
reify.runtime: the host runtime materialized types are built into.

  - rtype: type handles, method tables, composite constructors, basic table
  - value: values, instantiation, field access and calls
"""

from reify.runtime.rtype import (
	BASIC_TYPES,
	EMPTY_INTERFACE,
	ERROR_INTERFACE,
	ChanDir,
	Kind,
	Method,
	MethodDescriptor,
	MethodTable,
	NilDereferenceError,
	RType,
	RuntimeTypeError,
	StructField,
	Thunk,
	array_of,
	chan_of,
	func_of,
	identical,
	interface_of,
	map_of,
	named_of,
	new_placeholder,
	patch_named,
	ptr_to,
	set_methods,
	slice_of,
	struct_of,
)
from reify.runtime.value import Cell, Value, append, make_func, make_map, make_slice, new, value_of, zero

__all__ = [
	"BASIC_TYPES",
	"EMPTY_INTERFACE",
	"ERROR_INTERFACE",
	"ChanDir",
	"Kind",
	"Method",
	"MethodDescriptor",
	"MethodTable",
	"NilDereferenceError",
	"RType",
	"RuntimeTypeError",
	"StructField",
	"Thunk",
	"array_of",
	"chan_of",
	"func_of",
	"identical",
	"interface_of",
	"map_of",
	"named_of",
	"new_placeholder",
	"patch_named",
	"ptr_to",
	"set_methods",
	"slice_of",
	"struct_of",
	"Cell",
	"Value",
	"append",
	"make_func",
	"make_map",
	"make_slice",
	"new",
	"value_of",
	"zero",
]
