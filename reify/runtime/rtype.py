# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-15
"""
Runtime type handles.

An `RType` is the runtime-usable description of a type: what values look
like (kind, element/key/field types, length) and which methods they carry.
Composite handles (`ptr_to`, `slice_of`, `struct_of`, ...) are built fresh on
every call and compare structurally. Named handles (including the basic
ones) are unique objects and compare by identity; they are the only handles
that are ever mutated, and only by `patch_named`/`set_methods` while a
registry finalizes them.

Method tables hold `MethodDescriptor`s. A descriptor's `func` is a thunk
taking the positional argument list (receiver first) and returning the
positional result list; the type works out which descriptors are visible on
a value versus a pointer and adapts the receiver before calling.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from reify.core.errors import UnimplementedError
from reify.core.type_nodes import is_exported

if TYPE_CHECKING:
	from reify.runtime.value import Value


Thunk = Callable[[List["Value"]], Optional[List["Value"]]]


class RuntimeTypeError(TypeError):
	"""Misuse of a runtime handle or value (bad argument types, unaddressable set, ...)."""


class NilDereferenceError(RuntimeError):
	"""A nil pointer or nil interface was dereferenced."""

	def __init__(self, message: str = "invalid memory address or nil pointer dereference") -> None:
		super().__init__(message)


class Kind(Enum):
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
	ARRAY = auto()
	CHAN = auto()
	FUNC = auto()
	INTERFACE = auto()
	MAP = auto()
	POINTER = auto()
	SLICE = auto()
	STRUCT = auto()


INT_KINDS = frozenset({Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64})
UINT_KINDS = frozenset({Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64, Kind.UINTPTR})
FLOAT_KINDS = frozenset({Kind.FLOAT32, Kind.FLOAT64})
COMPLEX_KINDS = frozenset({Kind.COMPLEX64, Kind.COMPLEX128})
SCALAR_KINDS = INT_KINDS | UINT_KINDS | FLOAT_KINDS | COMPLEX_KINDS | {Kind.BOOL, Kind.STRING, Kind.UNSAFE_POINTER}
NILABLE_KINDS = frozenset(
	{Kind.POINTER, Kind.SLICE, Kind.MAP, Kind.FUNC, Kind.CHAN, Kind.INTERFACE, Kind.UNSAFE_POINTER}
)


class ChanDir(Enum):
	RECV = 1
	SEND = 2
	BOTH = 3


@dataclass(frozen=True)
class StructField:
	name: str
	type: "RType"
	tag: str = ""
	anonymous: bool = False
	pkg_path: str = ""  # set for unexported names only
	index: int = 0

	@property
	def exported(self) -> bool:
		return not self.pkg_path


@dataclass(frozen=True)
class MethodDescriptor:
	"""One method table entry. `signature` excludes the receiver."""

	name: str
	signature: "RType"
	func: Optional[Thunk] = None
	pointer_recv: bool = False
	pkg_path: str = ""


@dataclass(frozen=True)
class MethodTable:
	"""
	Method table of a concrete or interface type.

	Entries are ordered value-receiver methods first (`vcount` of them, visible
	on both the value and the pointer) followed by pointer-receiver methods
	(visible only on the pointer). Interfaces keep all entries in the value
	part.
	"""

	entries: Tuple[MethodDescriptor, ...] = ()
	vcount: int = 0

	@staticmethod
	def build(entries: Iterable[MethodDescriptor]) -> "MethodTable":
		value = sorted((e for e in entries if not e.pointer_recv), key=lambda e: e.name)
		ptr = sorted((e for e in entries if e.pointer_recv), key=lambda e: e.name)
		return MethodTable(entries=tuple(value + ptr), vcount=len(value))

	@property
	def mcount(self) -> int:
		return len(self.entries)


@dataclass(frozen=True)
class Method:
	"""A method as seen through a handle: `type` includes the receiver for concrete types."""

	name: str
	pkg_path: str
	type: "RType"
	func: Optional[Thunk]
	index: int


class RType:
	"""Runtime type handle."""

	def __init__(
		self,
		kind: Kind,
		*,
		name: str = "",
		pkg_path: str = "",
		scope: object = None,
		elem: Optional["RType"] = None,
		key: Optional["RType"] = None,
		length: int = 0,
		fields: Sequence[StructField] = (),
		params: Sequence["RType"] = (),
		results: Sequence["RType"] = (),
		variadic: bool = False,
		dir: ChanDir = ChanDir.BOTH,
		mtable: Optional[MethodTable] = None,
	) -> None:
		self.kind = kind
		self.name = name
		self.pkg_path = pkg_path
		self.scope = scope
		self.elem = elem
		self.key = key
		self.length = length
		self.fields: Tuple[StructField, ...] = tuple(fields)
		self.params: Tuple[RType, ...] = tuple(params)
		self.results: Tuple[RType, ...] = tuple(results)
		self.variadic = variadic
		self.dir = dir
		self.mtable = mtable or MethodTable()
		self.complete = True
		self.comparable = True
		self.refresh()

	# -- structure -------------------------------------------------------

	def children(self) -> List["RType"]:
		"""Component types (not method signatures)."""
		out: List[RType] = []
		if self.key is not None:
			out.append(self.key)
		if self.elem is not None:
			out.append(self.elem)
		out.extend(f.type for f in self.fields)
		out.extend(self.params)
		out.extend(self.results)
		return out

	def refresh(self) -> bool:
		"""Recompute facts derived from component types; True when something changed."""
		k = self.kind
		if k in (Kind.SLICE, Kind.MAP, Kind.FUNC):
			comparable = False
		elif k is Kind.ARRAY:
			comparable = self.elem is not None and self.elem.comparable
		elif k is Kind.STRUCT:
			comparable = all(f.type.comparable for f in self.fields)
		else:
			comparable = True
		changed = comparable != self.comparable
		self.comparable = comparable
		return changed

	def field(self, i: int) -> StructField:
		if self.kind is not Kind.STRUCT:
			raise RuntimeTypeError(f"field of non-struct type {self}")
		return self.fields[i]

	def field_by_name(self, name: str) -> Optional[StructField]:
		if self.kind is not Kind.STRUCT:
			raise RuntimeTypeError(f"field_by_name of non-struct type {self}")
		for f in self.fields:
			if f.name == name:
				return f
		return None

	def num_field(self) -> int:
		return len(self.fields) if self.kind is Kind.STRUCT else 0

	# -- methods ---------------------------------------------------------

	def _method_view(self) -> Tuple[MethodDescriptor, ...]:
		if self.kind is Kind.INTERFACE:
			return self.mtable.entries
		if self.kind is Kind.POINTER and not self.name and self.elem is not None:
			if self.elem.kind is Kind.INTERFACE:
				return ()
			return self.elem.mtable.entries
		return self.mtable.entries[: self.mtable.vcount]

	def _visible(self) -> List[MethodDescriptor]:
		view = self._method_view()
		if self.kind is not Kind.INTERFACE:
			view = tuple(d for d in view if is_exported(d.name))
		return sorted(view, key=lambda d: d.name)

	def num_method(self) -> int:
		"""Exported methods for concrete types; every method for interfaces."""
		return len(self._visible())

	def method(self, i: int) -> Method:
		return self._method(self._visible()[i], i)

	def method_by_name(self, name: str) -> Optional[Method]:
		for i, d in enumerate(self._visible()):
			if d.name == name:
				return self._method(d, i)
		return None

	def lookup_descriptor(self, name: str) -> Optional[MethodDescriptor]:
		"""Find `name` in this handle's method set, exported or not."""
		for d in self._method_view():
			if d.name == name:
				return d
		return None

	def _method(self, desc: MethodDescriptor, index: int) -> Method:
		if self.kind is Kind.INTERFACE:
			return Method(desc.name, desc.pkg_path, desc.signature, None, index)
		sig = desc.signature
		mtype = func_of((self, *sig.params), sig.results, sig.variadic)
		return Method(desc.name, desc.pkg_path, mtype, self.method_func(desc), index)

	def method_func(self, desc: MethodDescriptor) -> Thunk:
		"""
		Callable for `desc` taking this handle's values as receiver.

		Value-receiver methods get a copy of the receiver (dereferenced first
		when called through a pointer).
		"""
		thunk = desc.func
		recv_type = self
		if thunk is None:

			def unimplemented(args: List["Value"]) -> List["Value"]:
				raise UnimplementedError(desc.name, recv_type)

			return unimplemented
		if desc.pointer_recv or self.kind is Kind.INTERFACE:
			return thunk
		if self.kind is Kind.POINTER and not self.name:

			def through_pointer(args: List["Value"]) -> Optional[List["Value"]]:
				if args[0].is_nil():
					raise NilDereferenceError()
				return thunk([args[0].elem().copy(), *args[1:]])

			return through_pointer

		def by_value(args: List["Value"]) -> Optional[List["Value"]]:
			return thunk([args[0].copy(), *args[1:]])

		return by_value

	def implements(self, u: "RType") -> bool:
		if u.kind is not Kind.INTERFACE:
			raise RuntimeTypeError(f"implements: {u} is not an interface type")
		have = {d.name: d for d in self._method_view()}
		for want in u.mtable.entries:
			got = have.get(want.name)
			if got is None:
				return False
			if not is_exported(want.name) and got.pkg_path != want.pkg_path:
				return False
			if not identical(got.signature, want.signature):
				return False
		return True

	def assignable_to(self, u: "RType") -> bool:
		if identical(self, u):
			return True
		if (not self.name or not u.name) and _identical_underlying(self, u):
			return True
		return u.kind is Kind.INTERFACE and self.implements(u)

	# -- identity --------------------------------------------------------

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, RType):
			return NotImplemented
		return identical(self, other)

	def __hash__(self) -> int:
		if self.name:
			return object.__hash__(self)
		names = tuple(f.name for f in self.fields)
		if self.kind is Kind.INTERFACE:
			names += tuple(d.name for d in self.mtable.entries)
		return hash((self.kind, self.length, self.variadic, self.dir, names, tuple(hash(c) for c in self.children())))

	def __str__(self) -> str:
		if self.name:
			if self.pkg_path:
				return f"{self.pkg_path.rsplit('/', 1)[-1]}.{self.name}"
			return self.name
		return _literal(self)

	def __repr__(self) -> str:
		return f"<RType {self}>"


def _quote(tag: str) -> str:
	return '"' + tag.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _signature_str(params: Sequence[RType], results: Sequence[RType], variadic: bool) -> str:
	ps = [str(p) for p in params]
	if variadic and ps:
		ps[-1] = f"...{params[-1].elem}"
	out = "(" + ", ".join(ps) + ")"
	if len(results) == 1:
		out += f" {results[0]}"
	elif results:
		out += " (" + ", ".join(str(r) for r in results) + ")"
	return out


def _literal(t: RType) -> str:
	k = t.kind
	if k is Kind.POINTER:
		return f"*{t.elem}"
	if k is Kind.SLICE:
		return f"[]{t.elem}"
	if k is Kind.ARRAY:
		return f"[{t.length}]{t.elem}"
	if k is Kind.MAP:
		return f"map[{t.key}]{t.elem}"
	if k is Kind.CHAN:
		if t.dir is ChanDir.SEND:
			return f"chan<- {t.elem}"
		if t.dir is ChanDir.RECV:
			return f"<-chan {t.elem}"
		return f"chan {t.elem}"
	if k is Kind.FUNC:
		return "func" + _signature_str(t.params, t.results, t.variadic)
	if k is Kind.STRUCT:
		if not t.fields:
			return "struct {}"
		parts = []
		for f in t.fields:
			s = str(f.type) if f.anonymous else f"{f.name} {f.type}"
			if f.tag:
				s += " " + _quote(f.tag)
			parts.append(s)
		return "struct { " + "; ".join(parts) + " }"
	if k is Kind.INTERFACE:
		if not t.mtable.entries:
			return "interface {}"
		sigs = [d.name + _signature_str(d.signature.params, d.signature.results, d.signature.variadic) for d in t.mtable.entries]
		return "interface { " + "; ".join(sigs) + " }"
	return k.name.lower()


def identical(a: RType, b: RType) -> bool:
	"""Type identity: named handles by object identity, the rest structurally."""
	if a is b:
		return True
	if a.name or b.name:
		return False
	if a.kind is not b.kind:
		return False
	return _same_structure(a, b)


def _identical_underlying(a: RType, b: RType) -> bool:
	if a.kind is not b.kind:
		return False
	if a.kind in SCALAR_KINDS:
		return True
	return _same_structure(a, b)


def _same_structure(a: RType, b: RType) -> bool:
	k = a.kind
	if k in (Kind.POINTER, Kind.SLICE):
		return identical(a.elem, b.elem)  # type: ignore[arg-type]
	if k is Kind.ARRAY:
		return a.length == b.length and identical(a.elem, b.elem)  # type: ignore[arg-type]
	if k is Kind.MAP:
		return identical(a.key, b.key) and identical(a.elem, b.elem)  # type: ignore[arg-type]
	if k is Kind.CHAN:
		return a.dir is b.dir and identical(a.elem, b.elem)  # type: ignore[arg-type]
	if k is Kind.FUNC:
		return (
			a.variadic == b.variadic
			and len(a.params) == len(b.params)
			and len(a.results) == len(b.results)
			and all(identical(x, y) for x, y in zip(a.params, b.params))
			and all(identical(x, y) for x, y in zip(a.results, b.results))
		)
	if k is Kind.STRUCT:
		if len(a.fields) != len(b.fields):
			return False
		for x, y in zip(a.fields, b.fields):
			if (x.name, x.tag, x.anonymous, x.pkg_path) != (y.name, y.tag, y.anonymous, y.pkg_path):
				return False
			if not identical(x.type, y.type):
				return False
		return True
	if k is Kind.INTERFACE:
		xs, ys = a.mtable.entries, b.mtable.entries
		if len(xs) != len(ys):
			return False
		for x, y in zip(xs, ys):
			if x.name != y.name or (not is_exported(x.name) and x.pkg_path != y.pkg_path):
				return False
			if not identical(x.signature, y.signature):
				return False
		return True
	return True


# -- constructors -----------------------------------------------------------


def ptr_to(elem: RType) -> RType:
	return RType(Kind.POINTER, elem=elem)


def slice_of(elem: RType) -> RType:
	return RType(Kind.SLICE, elem=elem)


def array_of(length: int, elem: RType) -> RType:
	if length < 0:
		raise RuntimeTypeError(f"array_of: negative length {length}")
	return RType(Kind.ARRAY, elem=elem, length=length)


def map_of(key: RType, elem: RType) -> RType:
	if not key.comparable:
		raise RuntimeTypeError(f"map_of: invalid key type {key}")
	return RType(Kind.MAP, key=key, elem=elem)


def chan_of(dir: ChanDir, elem: RType) -> RType:
	return RType(Kind.CHAN, elem=elem, dir=dir)


def func_of(params: Sequence[RType], results: Sequence[RType], variadic: bool = False) -> RType:
	if variadic and (not params or params[-1].kind is not Kind.SLICE):
		raise RuntimeTypeError("func_of: last parameter of a variadic func must be a slice")
	return RType(Kind.FUNC, params=params, results=results, variadic=variadic)


def struct_of(fields: Iterable[StructField]) -> RType:
	out: List[StructField] = []
	seen: set[str] = set()
	for i, f in enumerate(fields):
		if not f.name:
			raise RuntimeTypeError(f"struct_of: field {i} has no name")
		if f.name != "_":
			if f.name in seen:
				raise RuntimeTypeError(f"struct_of: duplicate field {f.name}")
			seen.add(f.name)
		out.append(replace(f, index=i))
	return RType(Kind.STRUCT, fields=out)


def interface_of(methods: Iterable[MethodDescriptor]) -> RType:
	ms = sorted(methods, key=lambda d: d.name)
	for x, y in zip(ms, ms[1:]):
		if x.name == y.name:
			raise RuntimeTypeError(f"interface_of: duplicate method {x.name}")
	return RType(Kind.INTERFACE, mtable=MethodTable(entries=tuple(ms), vcount=len(ms)))


def new_placeholder(pkg_path: str, name: str, scope: object = None) -> RType:
	"""A named handle with an empty interface structure, to be patched later."""
	t = RType(Kind.INTERFACE, name=name, pkg_path=pkg_path, scope=scope)
	t.complete = False
	return t


def patch_named(named: RType, underlying: RType) -> RType:
	"""Give `named` the structure of `underlying` in place; identity is unchanged."""
	if not named.name:
		raise RuntimeTypeError(f"patch_named: {named} is not a named type")
	named.kind = underlying.kind
	named.elem = underlying.elem
	named.key = underlying.key
	named.length = underlying.length
	named.fields = underlying.fields
	named.params = underlying.params
	named.results = underlying.results
	named.variadic = underlying.variadic
	named.dir = underlying.dir
	named.mtable = underlying.mtable if underlying.kind is Kind.INTERFACE else MethodTable()
	named.complete = True
	named.refresh()
	return named


def named_of(pkg_path: str, name: str, underlying: RType, scope: object = None) -> RType:
	return patch_named(new_placeholder(pkg_path, name, scope), underlying)


def set_methods(t: RType, table: MethodTable) -> None:
	if t.kind is Kind.INTERFACE:
		raise RuntimeTypeError(f"set_methods: interface type {t} carries its own method set")
	t.mtable = table


_BASIC_NAMES = [
	(Kind.BOOL, "bool"),
	(Kind.INT, "int"),
	(Kind.INT8, "int8"),
	(Kind.INT16, "int16"),
	(Kind.INT32, "int32"),
	(Kind.INT64, "int64"),
	(Kind.UINT, "uint"),
	(Kind.UINT8, "uint8"),
	(Kind.UINT16, "uint16"),
	(Kind.UINT32, "uint32"),
	(Kind.UINT64, "uint64"),
	(Kind.UINTPTR, "uintptr"),
	(Kind.FLOAT32, "float32"),
	(Kind.FLOAT64, "float64"),
	(Kind.COMPLEX64, "complex64"),
	(Kind.COMPLEX128, "complex128"),
	(Kind.STRING, "string"),
]

BASIC_TYPES: Dict[Kind, RType] = {kind: RType(kind, name=name) for kind, name in _BASIC_NAMES}
BASIC_TYPES[Kind.UNSAFE_POINTER] = RType(Kind.UNSAFE_POINTER, name="Pointer", pkg_path="unsafe")

EMPTY_INTERFACE = RType(Kind.INTERFACE)
ERROR_INTERFACE = RType(
	Kind.INTERFACE,
	name="error",
	mtable=MethodTable(
		entries=(MethodDescriptor("Error", func_of((), (BASIC_TYPES[Kind.STRING],))),),
		vcount=1,
	),
)


__all__ = [
	"Kind",
	"ChanDir",
	"Thunk",
	"RuntimeTypeError",
	"NilDereferenceError",
	"StructField",
	"MethodDescriptor",
	"MethodTable",
	"Method",
	"RType",
	"identical",
	"ptr_to",
	"slice_of",
	"array_of",
	"map_of",
	"chan_of",
	"func_of",
	"struct_of",
	"interface_of",
	"new_placeholder",
	"patch_named",
	"named_of",
	"set_methods",
	"BASIC_TYPES",
	"EMPTY_INTERFACE",
	"ERROR_INTERFACE",
	"INT_KINDS",
	"UINT_KINDS",
	"FLOAT_KINDS",
	"COMPLEX_KINDS",
	"SCALAR_KINDS",
	"NILABLE_KINDS",
]
