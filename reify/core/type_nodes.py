# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-13
"""
Checker-side type graph.

These nodes are what an external type checker hands us. They describe types
before any runtime representation exists. Everything except `Named` and
`Scope` is a frozen value; named types are identity objects because the
checker has to create them before their underlying type is known (that is
how it expresses forward references and cycles).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple, Union


class BasicKind(Enum):
	"""Kinds of predeclared (basic) types, including the untyped ones."""

	INVALID = auto()

	BOOL = auto()
	INT = auto()
	INT8 = auto()
	INT16 = auto()
	INT32 = auto()
	INT64 = auto()
	UINT = auto()
	UINT8 = auto()
	UINT16 = auto()
	UINT32 = auto()
	UINT64 = auto()
	UINTPTR = auto()
	FLOAT32 = auto()
	FLOAT64 = auto()
	COMPLEX64 = auto()
	COMPLEX128 = auto()
	STRING = auto()
	UNSAFE_POINTER = auto()

	UNTYPED_BOOL = auto()
	UNTYPED_INT = auto()
	UNTYPED_RUNE = auto()
	UNTYPED_FLOAT = auto()
	UNTYPED_COMPLEX = auto()
	UNTYPED_STRING = auto()
	UNTYPED_NIL = auto()


class ChanDir(Enum):
	SEND_RECV = auto()
	SEND_ONLY = auto()
	RECV_ONLY = auto()


class Scope:
	"""
	Lexical region in which names are declared (universe, package, function body).

	Scopes compare by identity: two function bodies that both declare `T` are
	different scopes even though nothing else distinguishes them.
	"""

	def __init__(self, parent: Optional["Scope"] = None, comment: str = "") -> None:
		self.parent = parent
		self.comment = comment
		self.children: List[Scope] = []
		self._names: Dict[str, object] = {}
		if parent is not None:
			parent.children.append(self)

	def insert(self, name: str, obj: object) -> Optional[object]:
		"""Declare `name`; returns the previous object when the name is taken."""
		prev = self._names.get(name)
		if prev is not None:
			return prev
		self._names[name] = obj
		return None

	def lookup_local(self, name: str) -> Optional[object]:
		return self._names.get(name)

	def lookup(self, name: str) -> Optional[object]:
		"""Resolve `name` walking outward through enclosing scopes."""
		scope: Optional[Scope] = self
		while scope is not None:
			obj = scope._names.get(name)
			if obj is not None:
				return obj
			scope = scope.parent
		return None

	def names(self) -> List[str]:
		return sorted(self._names)

	def __repr__(self) -> str:
		return f"Scope({self.comment or hex(id(self))})"


@dataclass(frozen=True)
class Basic:
	kind: BasicKind
	name: str = ""


@dataclass(frozen=True)
class Pointer:
	elem: "TypeNode"


@dataclass(frozen=True)
class Slice:
	elem: "TypeNode"


@dataclass(frozen=True)
class Array:
	elem: "TypeNode"
	length: int  # negative when the checker could not compute it


@dataclass(frozen=True)
class Map:
	key: "TypeNode"
	elem: "TypeNode"


@dataclass(frozen=True)
class Chan:
	elem: "TypeNode"
	dir: ChanDir = ChanDir.SEND_RECV


@dataclass(frozen=True)
class Field:
	"""Struct field as the checker sees it."""

	name: str
	type: "TypeNode"
	tag: str = ""
	embedded: bool = False
	pkg_path: Optional[str] = None  # declaring package


@dataclass(frozen=True)
class Struct:
	fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class Signature:
	params: Tuple["TypeNode", ...] = ()
	results: Tuple["TypeNode", ...] = ()
	variadic: bool = False  # last param is a Slice collecting the rest


@dataclass(frozen=True, eq=False)
class Func:
	"""
	A method: either declared on a named type (`recv` set) or required by an
	interface (`recv` is None).
	"""

	name: str
	signature: Signature
	pkg_path: Optional[str] = None
	recv: Optional["TypeNode"] = None

	@property
	def pointer_recv(self) -> bool:
		return isinstance(self.recv, Pointer)

	@property
	def exported(self) -> bool:
		return is_exported(self.name)


@dataclass(frozen=True)
class Interface:
	methods: Tuple[Func, ...] = ()
	embedded: Tuple["TypeNode", ...] = ()

	def all_methods(self) -> List[Func]:
		"""
		Complete method set: explicit methods plus those of embedded interfaces.

		Embedded interfaces may still be under construction while the checker
		works, so this is computed on demand rather than at creation time.
		"""
		by_name: Dict[str, Func] = {}
		self._collect(by_name, set())
		return [by_name[n] for n in sorted(by_name)]

	def _collect(self, by_name: Dict[str, Func], seen: set[int]) -> None:
		if id(self) in seen:
			return
		seen.add(id(self))
		for m in self.methods:
			by_name.setdefault(m.name, m)
		for emb in self.embedded:
			under = underlying(emb)
			if isinstance(under, Interface):
				under._collect(by_name, seen)


@dataclass(eq=False)
class Named:
	"""
	A declared type. `underlying` and `methods` are completed by the checker
	after the node exists, so the graph may loop back through here.
	"""

	pkg_path: Optional[str]
	name: str
	underlying: Optional["TypeNode"] = None
	methods: List[Func] = field(default_factory=list)
	scope: Optional[Scope] = None

	def add_method(self, fn: Func) -> None:
		self.methods.append(fn)

	def __repr__(self) -> str:
		if self.pkg_path:
			return f"Named({self.pkg_path}.{self.name})"
		return f"Named({self.name})"


TypeNode = Union[Basic, Pointer, Slice, Array, Map, Chan, Struct, Named, Interface, Signature]


def underlying(node: TypeNode) -> TypeNode:
	"""Strip named types down to their structural definition."""
	seen = 0
	while isinstance(node, Named):
		if node.underlying is None:
			raise ValueError(f"named type {node.name} has no underlying type yet")
		node = node.underlying
		seen += 1
		if seen > 64:
			raise ValueError("named type chain does not terminate")
	return node


def is_interface(node: TypeNode) -> bool:
	return isinstance(underlying(node), Interface)


def is_exported(name: str) -> bool:
	return bool(name) and name[0].isupper()


__all__ = [
	"BasicKind",
	"ChanDir",
	"Scope",
	"Basic",
	"Pointer",
	"Slice",
	"Array",
	"Map",
	"Chan",
	"Field",
	"Struct",
	"Signature",
	"Func",
	"Interface",
	"Named",
	"TypeNode",
	"underlying",
	"is_interface",
	"is_exported",
]
