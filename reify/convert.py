# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-16
"""
Type graph -> runtime type conversion.

`to_type` has one case per TypeNode variant. Composite cases convert their
components recursively and wrap the first failure with the position that
failed; named types go through the registry, which owns identity and cycle
breaking, and structs/named types with methods go through the method-set
materializer. The registry and materializer call back into `to_type` for
nested types, so the recursion is only cut by the registry's placeholders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

from reify.core import type_nodes as tn
from reify.core.errors import ReifyError, UnknownLengthError, UnknownTypeError, UntypedKindError
from reify.runtime.rtype import (
	EMPTY_INTERFACE,
	ERROR_INTERFACE,
	ChanDir,
	Kind,
	MethodDescriptor,
	RType,
	StructField,
	array_of,
	chan_of,
	func_of,
	interface_of,
	map_of,
	ptr_to,
	slice_of,
	struct_of,
)

if TYPE_CHECKING:
	from reify.registry import TypeRegistry


# Checker kinds -> runtime kinds for the default basic-type table.
BASIC_KINDS = {
	tn.BasicKind.BOOL: Kind.BOOL,
	tn.BasicKind.INT: Kind.INT,
	tn.BasicKind.INT8: Kind.INT8,
	tn.BasicKind.INT16: Kind.INT16,
	tn.BasicKind.INT32: Kind.INT32,
	tn.BasicKind.INT64: Kind.INT64,
	tn.BasicKind.UINT: Kind.UINT,
	tn.BasicKind.UINT8: Kind.UINT8,
	tn.BasicKind.UINT16: Kind.UINT16,
	tn.BasicKind.UINT32: Kind.UINT32,
	tn.BasicKind.UINT64: Kind.UINT64,
	tn.BasicKind.UINTPTR: Kind.UINTPTR,
	tn.BasicKind.FLOAT32: Kind.FLOAT32,
	tn.BasicKind.FLOAT64: Kind.FLOAT64,
	tn.BasicKind.COMPLEX64: Kind.COMPLEX64,
	tn.BasicKind.COMPLEX128: Kind.COMPLEX128,
	tn.BasicKind.STRING: Kind.STRING,
	tn.BasicKind.UNSAFE_POINTER: Kind.UNSAFE_POINTER,
}

# Untyped constants that still have an obvious typed counterpart.
_UNTYPED_DEFAULTS = {
	tn.BasicKind.UNTYPED_BOOL: tn.BasicKind.BOOL,
	tn.BasicKind.UNTYPED_STRING: tn.BasicKind.STRING,
}

_CHAN_DIRS = {
	tn.ChanDir.SEND_RECV: ChanDir.BOTH,
	tn.ChanDir.SEND_ONLY: ChanDir.SEND,
	tn.ChanDir.RECV_ONLY: ChanDir.RECV,
}


def to_type(node: tn.TypeNode, registry: "TypeRegistry") -> RType:
	"""Materialize `node`; raises a ReifyError subclass on failure."""
	if isinstance(node, tn.Basic):
		return _to_basic(node, registry)
	if isinstance(node, tn.Pointer):
		return ptr_to(_component(node.elem, registry, "pointer elem"))
	if isinstance(node, tn.Slice):
		return slice_of(_component(node.elem, registry, "slice elem"))
	if isinstance(node, tn.Array):
		elem = _component(node.elem, registry, "array elem")
		if node.length < 0:
			raise UnknownLengthError(node.length)
		return array_of(node.length, elem)
	if isinstance(node, tn.Map):
		key = _component(node.key, registry, "map key")
		elem = _component(node.elem, registry, "map elem")
		return map_of(key, elem)
	if isinstance(node, tn.Chan):
		return chan_of(_CHAN_DIRS[node.dir], _component(node.elem, registry, "chan elem"))
	if isinstance(node, tn.Struct):
		return _to_struct(node, registry)
	if isinstance(node, tn.Named):
		return _to_named(node, registry)
	if isinstance(node, tn.Interface):
		return _to_interface(node, registry)
	if isinstance(node, tn.Signature):
		return _to_func(node, registry)
	raise ReifyError(f"unknown type {node!r}")


def to_type_list(nodes: Iterable[tn.TypeNode], registry: "TypeRegistry") -> List[RType]:
	return [to_type(n, registry) for n in nodes]


def _component(node: tn.TypeNode, registry: "TypeRegistry", position: str) -> RType:
	try:
		return to_type(node, registry)
	except ReifyError as err:
		raise UnknownTypeError(position, err) from err


def _to_basic(node: tn.Basic, registry: "TypeRegistry") -> RType:
	kind = _UNTYPED_DEFAULTS.get(node.kind, node.kind)
	rt = registry.basic_types.get(kind)
	if rt is None:
		raise UntypedKindError(node.kind)
	return rt


def _to_func(sig: tn.Signature, registry: "TypeRegistry") -> RType:
	params = [_component(p, registry, f"func param #{i}") for i, p in enumerate(sig.params)]
	results = [_component(r, registry, f"func result #{i}") for i, r in enumerate(sig.results)]
	return func_of(params, results, sig.variadic)


def _to_struct(node: tn.Struct, registry: "TypeRegistry") -> RType:
	fields: List[StructField] = []
	for f in node.fields:
		typ = _component(f.type, registry, f"struct field `{f.name}`")
		fields.append(
			StructField(
				name=f.name,
				type=typ,
				tag=f.tag,
				anonymous=f.embedded,
				pkg_path="" if tn.is_exported(f.name) else (f.pkg_path or ""),
			)
		)
	rt = struct_of(fields)
	if any(f.embedded for f in node.fields):
		# Local import: method_set imports this module.
		from reify.method_set import materialize_methods

		materialize_methods(node, rt, registry)
	return rt


def _to_named(node: tn.Named, registry: "TypeRegistry") -> RType:
	if not node.pkg_path:
		# Universe types: `error` has a canonical handle, the rest are structural.
		if node.name == "error":
			return ERROR_INTERFACE
		if node.underlying is None:
			raise UnknownTypeError(f"named `{node.name}`", ValueError("no underlying type"))
		return to_type(node.underlying, registry)
	return registry.resolve(node)


def _to_interface(node: tn.Interface, registry: "TypeRegistry") -> RType:
	methods = node.all_methods()
	if not methods:
		return EMPTY_INTERFACE
	descs: List[MethodDescriptor] = []
	for m in methods:
		sig = _component(m.signature, registry, f"interface method `{m.name}`")
		descs.append(MethodDescriptor(name=m.name, signature=sig, pkg_path=m.pkg_path or ""))
	return interface_of(descs)


__all__ = ["to_type", "to_type_list", "BASIC_KINDS"]
