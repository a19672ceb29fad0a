# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-17
"""
Method sets over the checker's type graph, and method-table materialization.

Method-set rules (value vs pointer receivers, promotion through embedded
fields) are computed on TypeNodes, before anything is materialized:

  - the method set of a value T holds value-receiver methods, plus promoted
    methods whose path is addressable (it crosses an embedded pointer);
  - the method set of *T holds every method of T and of its embedded fields;
  - a name found at a shallower embedding depth hides deeper ones; two
    candidates (or a field) at the same depth make the name unusable.

The runtime table of a concrete type is built from the *intuitive* method
set: everything callable on a T or a *T, preferring the value-receiver
entry, with pointer-only entries marked so the runtime exposes them only on
the pointer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from reify.convert import to_type
from reify.core import type_nodes as tn
from reify.core.errors import ReifyError, UnknownTypeError
from reify.invoke import invoke as invoke_method
from reify.runtime.rtype import (
	Kind,
	MethodDescriptor,
	MethodTable,
	NilDereferenceError,
	RType,
	Thunk,
	set_methods,
)

if TYPE_CHECKING:
	from reify.registry import TypeRegistry
	from reify.runtime.value import Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
	"""A method reachable from some receiver type."""

	func: tn.Func
	path: Tuple[int, ...] = ()  # embedded field indices walked from the receiver
	indirect: bool = False  # the path goes through a pointer
	pointer_recv: bool = False  # only in the pointer method set

	@property
	def name(self) -> str:
		return self.func.name

	@property
	def promoted(self) -> bool:
		return bool(self.path)


@dataclass(frozen=True)
class MethodIdentity:
	"""What `lookup_method` is asked about: one declared method of one named type."""

	recv: tn.Named
	func: tn.Func
	type: RType  # runtime handle of the receiver's named type
	signature: RType  # without the receiver

	@property
	def name(self) -> str:
		return self.func.name

	@property
	def pkg_path(self) -> str:
		return self.recv.pkg_path or ""

	@property
	def pointer_recv(self) -> bool:
		return self.func.pointer_recv


def method_set(node: tn.TypeNode, *, pointer: bool = False) -> List[Selection]:
	"""Standard method set of `node` (of `*node` when `pointer`), sorted by name."""
	if isinstance(node, tn.Pointer):
		if pointer or tn.is_interface(node.elem):
			return []
		return method_set(node.elem, pointer=True)
	if tn.is_interface(node):
		if pointer:
			return []
		return [Selection(func=m) for m in tn.underlying(node).all_methods()]  # type: ignore[union-attr]

	found: Dict[str, Optional[Selection]] = {}
	seen: set[int] = set()
	current: List[Tuple[tn.TypeNode, Tuple[int, ...], bool]] = [(node, (), pointer)]
	while current:
		level: Dict[str, List[Optional[Selection]]] = {}
		deeper: List[Tuple[tn.TypeNode, Tuple[int, ...], bool]] = []
		level_seen: set[int] = set()
		for typ, path, indirect in current:
			if isinstance(typ, tn.Named):
				# only a shallower occurrence hides it; a repeat at this depth is ambiguous
				if id(typ) in seen:
					continue
				level_seen.add(id(typ))
				for m in typ.methods:
					level.setdefault(m.name, []).append(Selection(m, path, indirect))
				typ = tn.underlying(typ)
			if isinstance(typ, tn.Struct):
				for i, f in enumerate(typ.fields):
					# a field hides methods of the same name at this depth
					level.setdefault(f.name, []).append(None)
					if f.embedded:
						ft, ind = f.type, indirect
						if isinstance(ft, tn.Pointer):
							ft, ind = ft.elem, True
						deeper.append((ft, path + (i,), ind))
			elif isinstance(typ, tn.Interface) and path:
				for m in typ.all_methods():
					level.setdefault(m.name, []).append(Selection(m, path, indirect))
		for name, cands in level.items():
			if name in found:
				continue
			found[name] = cands[0] if len(cands) == 1 else None
		seen |= level_seen
		current = deeper

	out = [s for s in found.values() if s is not None and (s.indirect or not s.func.pointer_recv)]
	return sorted(out, key=lambda s: s.name)


def intuitive_method_set(node: tn.TypeNode) -> List[Selection]:
	"""
	Methods callable on a `node` value or on a pointer to it.

	Interfaces and pointers to concrete types just use their standard method
	set. For a concrete value type the value-receiver selection wins; methods
	only the pointer has come back with `pointer_recv` set.
	"""
	if tn.is_interface(node) or (isinstance(node, tn.Pointer) and not tn.is_interface(node.elem)):
		return method_set(node)
	by_value = {s.name: s for s in method_set(node)}
	out: List[Selection] = []
	for sel in method_set(node, pointer=True):
		v = by_value.get(sel.name)
		out.append(v if v is not None else replace(sel, pointer_recv=True))
	return out


def needs_method_table(named: tn.Named) -> bool:
	"""True when a named concrete type declares or promotes any method."""
	if named.underlying is None or tn.is_interface(named):
		return False
	if named.methods:
		return True
	under = tn.underlying(named)
	return isinstance(under, tn.Struct) and any(f.embedded for f in under.fields)


def materialize_methods(node: tn.TypeNode, rt: RType, registry: "TypeRegistry") -> MethodTable:
	"""Build and install the method table of `rt` (the handle materialized for `node`)."""
	entries: List[MethodDescriptor] = []
	for sel in intuitive_method_set(node):
		fn = sel.func
		try:
			sig = to_type(fn.signature, registry)
		except ReifyError as err:
			raise UnknownTypeError(f"method `{fn.name}`", err) from err
		thunk: Optional[Thunk]
		if sel.promoted:
			thunk = _forward(sel)
		else:
			thunk = registry.lookup_method(MethodIdentity(recv=node, func=fn, type=rt, signature=sig))  # type: ignore[arg-type]
			if thunk is None:
				logger.debug("no implementation for method %s.%s", rt, fn.name)
		entries.append(
			MethodDescriptor(
				name=fn.name,
				signature=sig,
				func=thunk,
				pointer_recv=sel.pointer_recv,
				pkg_path="" if fn.exported else (fn.pkg_path or ""),
			)
		)
	table = MethodTable.build(entries)
	set_methods(rt, table)
	logger.debug("%s: %d method(s), %d on the value", rt, table.mcount, table.vcount)
	return table


def _forward(sel: Selection) -> Thunk:
	"""Thunk for a promoted method: walk the embedding path, then call by name."""
	path = sel.path
	name = sel.name

	def forward(args: List["Value"]) -> List["Value"]:
		v = args[0]
		for i in path:
			while v.kind is Kind.POINTER:
				if v.is_nil():
					raise NilDereferenceError()
				v = v.elem()
			v = v.field(i)
		return invoke_method(v, name, args[1:])

	return forward


__all__ = [
	"Selection",
	"MethodIdentity",
	"method_set",
	"intuitive_method_set",
	"needs_method_table",
	"materialize_methods",
]
