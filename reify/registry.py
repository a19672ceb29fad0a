# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-16
"""
Named-type registry: one authoritative identity map per compilation session.

Named types are keyed by (lexical scope, package path, name). The first
resolution of a key registers a placeholder handle *before* converting the
underlying type, so any path that loops back to the same declaration gets the
placeholder instead of recursing. Once the underlying structure is known the
placeholder is patched in place (its identity never changes) and every handle
in the same scope that was built against the unpatched placeholder is
refreshed.

The registry is plain shared mutable state with no locking. Run one
conversion pipeline at a time per registry; if several threads must share
one, wrap the whole registry in a single external lock (patch propagation
touches every entry of a scope at once).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from reify.convert import BASIC_KINDS, to_type
from reify.core import type_nodes as tn
from reify.core.errors import NamedTypeError, RegistryClosedError, ReifyError
from reify.method_set import MethodIdentity, materialize_methods, needs_method_table
from reify.runtime.rtype import BASIC_TYPES, RType, Thunk, new_placeholder, patch_named

logger = logging.getLogger(__name__)


FindExternalType = Callable[[str, str], Optional[RType]]
LookupMethod = Callable[[MethodIdentity], Optional[Thunk]]


@dataclass(frozen=True)
class ScopeKey:
	scope: Optional[tn.Scope]
	pkg_path: str
	name: str


class TypeRegistry:
	"""
	Scoped cache of named runtime types for one session.

	Hooks (all optional, keyword-only):
	  - find_external_type(pkg_path, name) -> RType | None: pre-bind checker
	    named types to handles the host already has. Consulted before anything
	    else; results are never cached or patched here.
	  - lookup_method(MethodIdentity) -> thunk | None: implementation bodies
	    for declared methods. A missing body leaves the method inspectable but
	    calling it raises UnimplementedError.
	  - basic_types: checker BasicKind -> RType table; defaults to the
	    runtime's predeclared handles.
	"""

	def __init__(
		self,
		*,
		find_external_type: Optional[FindExternalType] = None,
		lookup_method: Optional[LookupMethod] = None,
		basic_types: Optional[Mapping[tn.BasicKind, RType]] = None,
	) -> None:
		self._find_external_type = find_external_type
		self._lookup_method = lookup_method
		if basic_types is None:
			basic_types = {bk: BASIC_TYPES[k] for bk, k in BASIC_KINDS.items()}
		self.basic_types: Dict[tn.BasicKind, RType] = dict(basic_types)
		self._scopes: Dict[Optional[tn.Scope], Dict[Tuple[str, str], RType]] = {}
		self._failed: Dict[ScopeKey, NamedTypeError] = {}
		self._closed = False

	# -- session lifetime ------------------------------------------------

	def close(self) -> None:
		"""Tear down the session; handles already returned stay usable."""
		self._scopes.clear()
		self._failed.clear()
		self._closed = True

	def __enter__(self) -> "TypeRegistry":
		return self

	def __exit__(self, *exc: object) -> None:
		self.close()

	def _check_open(self) -> None:
		if self._closed:
			raise RegistryClosedError("type registry is closed")

	# -- entry points ----------------------------------------------------

	def to_type(self, node: tn.TypeNode) -> RType:
		"""Materialize any type node against this registry."""
		self._check_open()
		return to_type(node, self)

	def resolve(self, named: tn.Named) -> RType:
		"""Handle for a named type; the same object for the same scope key."""
		self._check_open()
		pkg_path = named.pkg_path or ""
		if self._find_external_type is not None:
			ext = self._find_external_type(pkg_path, named.name)
			if ext is not None:
				logger.debug("named type %s.%s bound to external %s", pkg_path, named.name, ext)
				return ext

		key = ScopeKey(named.scope, pkg_path, named.name)
		failed = self._failed.get(key)
		if failed is not None:
			raise failed
		entries = self._scopes.setdefault(named.scope, {})
		existing = entries.get((pkg_path, named.name))
		if existing is not None:
			return existing

		placeholder = new_placeholder(pkg_path, named.name, named.scope)
		entries[(pkg_path, named.name)] = placeholder
		logger.debug("placeholder for %s.%s in %r", pkg_path, named.name, named.scope)

		try:
			if named.underlying is None:
				raise ReifyError("missing underlying type")
			under = to_type(named.underlying, self)
		except ReifyError as err:
			wrapped = NamedTypeError(named.name, err)
			self._failed[key] = wrapped
			raise wrapped from err

		patch_named(placeholder, under)
		self._propagate(named.scope, placeholder)
		if needs_method_table(named):
			materialize_methods(named, placeholder, self)
		return placeholder

	def lookup(self, pkg_path: str, name: str, scope: Optional[tn.Scope] = None) -> Optional[RType]:
		"""Already-registered handle (complete or not), without resolving anything."""
		self._check_open()
		return self._scopes.get(scope, {}).get((pkg_path, name))

	def scope_types(self, scope: Optional[tn.Scope] = None) -> Dict[Tuple[str, str], RType]:
		return dict(self._scopes.get(scope, {}))

	def lookup_method(self, identity: MethodIdentity) -> Optional[Thunk]:
		if self._lookup_method is None:
			return None
		return self._lookup_method(identity)

	# -- patch propagation -----------------------------------------------

	def _propagate(self, scope: Optional[tn.Scope], finalized: RType) -> None:
		"""
		Refresh derived facts of every handle in `scope` that reaches `finalized`.

		Handles built while `finalized` was still an empty placeholder (an
		array or struct holding it by value, say) computed those facts from
		the placeholder; post-order walk so parents see refreshed children.
		"""
		reaches: Dict[int, bool] = {}
		refreshed: List[RType] = []

		def visit(t: RType) -> bool:
			key = id(t)
			if key in reaches:
				return reaches[key]
			# in progress: a cycle back here only counts if it is the finalized handle
			reaches[key] = t is finalized
			hit = t is finalized
			for child in t.children():
				if visit(child):
					hit = True
			if hit and t.refresh():
				refreshed.append(t)
			reaches[key] = hit
			return hit

		for t in list(self._scopes.get(scope, {}).values()):
			visit(t)
		if refreshed:
			logger.debug("patch of %s refreshed %d handle(s)", finalized, len(refreshed))


__all__ = ["TypeRegistry", "ScopeKey", "FindExternalType", "LookupMethod"]
