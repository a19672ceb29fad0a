# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-17
"""
Dynamic invocation: call a method by name with positional arguments.

Methods attached at runtime have no compiled call site, so callers go
through here: look the method up on the value's handle (exported or not,
taking the value's address when only the pointer has the method), then call
it with a positional argument list and get the positional result list back.

Argument count/type mismatches surface as the runtime's own
`RuntimeTypeError`, unchanged.
"""

from __future__ import annotations

from typing import List, Sequence

from reify.runtime.rtype import Kind, NilDereferenceError
from reify.runtime.value import Value


def method_by_name(v: Value, name: str) -> Value:
	"""Bound method value for `name` on `v`."""
	if v.kind is Kind.INTERFACE:
		dyn = v.elem()
		if not dyn.is_valid():
			raise NilDereferenceError(f"method {name} called on nil interface value")
		return method_by_name(dyn, name)
	if not v.is_valid():
		raise AttributeError(f"invalid value has no method {name}")
	desc = v.type.lookup_descriptor(name)  # type: ignore[union-attr]
	if desc is not None:
		return v.bind(desc)
	if v.can_addr():
		pv = v.addr()
		desc = pv.type.lookup_descriptor(name)  # type: ignore[union-attr]
		if desc is not None:
			return pv.bind(desc)
	raise AttributeError(f"type {v.type} has no method {name}")


def call(fn: Value, args: Sequence[Value] = ()) -> List[Value]:
	return fn.call(args)


def invoke(v: Value, name: str, args: Sequence[Value] = ()) -> List[Value]:
	return call(method_by_name(v, name), args)


def field(v: Value, index: int) -> Value:
	"""Field `index` of a struct, looking through any number of pointers."""
	x = v
	while x.kind is Kind.POINTER:
		x = x.elem()
		if not x.is_valid():
			raise NilDereferenceError()
	return x.field(index)


def field_addr(v: Value, index: int) -> Value:
	"""Pointer to field `index` of the struct `v` points to."""
	x = v.elem()
	if not x.is_valid():
		raise NilDereferenceError()
	return x.field(index).addr()


__all__ = ["method_by_name", "call", "invoke", "field", "field_addr"]
