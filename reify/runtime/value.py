# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-15
"""
Runtime values for materialized types.

A `Value` pairs a type handle with the `Cell` holding its storage. Cells are
the unit of addressability: a pointer's storage is the cell it points at,
struct and array storage is a list of cells (one per field/element), and a
slice is a list of cells shared between slices of the same backing list.
Everything else stores a plain Python object (int, float, str, callable,
dict) or None for nil.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from reify.runtime.rtype import (
	BASIC_TYPES,
	COMPLEX_KINDS,
	FLOAT_KINDS,
	INT_KINDS,
	NILABLE_KINDS,
	SCALAR_KINDS,
	UINT_KINDS,
	Kind,
	MethodDescriptor,
	NilDereferenceError,
	RType,
	RuntimeTypeError,
	ptr_to,
)


class Cell:
	__slots__ = ("value",)

	def __init__(self, value: Any = None) -> None:
		self.value = value


def zero_storage(t: RType) -> Any:
	k = t.kind
	if k is Kind.BOOL:
		return False
	if k in INT_KINDS or k in UINT_KINDS:
		return 0
	if k in FLOAT_KINDS:
		return 0.0
	if k in COMPLEX_KINDS:
		return 0j
	if k is Kind.STRING:
		return ""
	if k is Kind.STRUCT:
		return [Cell(zero_storage(f.type)) for f in t.fields]
	if k is Kind.ARRAY:
		return [Cell(zero_storage(t.elem)) for _ in range(t.length)]  # type: ignore[arg-type]
	return None


def copy_storage(t: RType, s: Any) -> Any:
	"""Copy with value semantics: structs and arrays are copied deeply, the rest shared."""
	if t.kind is Kind.STRUCT:
		return [Cell(copy_storage(f.type, c.value)) for f, c in zip(t.fields, s)]
	if t.kind is Kind.ARRAY:
		return [Cell(copy_storage(t.elem, c.value)) for c in s]  # type: ignore[arg-type]
	return s


def _map_key(t: RType, s: Any) -> Hashable:
	if t.kind is Kind.STRUCT:
		return tuple(_map_key(f.type, c.value) for f, c in zip(t.fields, s))
	if t.kind is Kind.ARRAY:
		return tuple(_map_key(t.elem, c.value) for c in s)  # type: ignore[arg-type]
	if t.kind is Kind.INTERFACE:
		if s is None:
			return None
		return (s.type, _map_key(s.type, s._cell.value))
	return s


class Value:
	"""A typed runtime value."""

	__slots__ = ("type", "_cell", "_addressable")

	def __init__(self, typ: Optional[RType] = None, cell: Optional[Cell] = None, addressable: bool = False) -> None:
		self.type = typ
		self._cell = cell if cell is not None else Cell()
		self._addressable = addressable

	@property
	def kind(self) -> Kind:
		return self.type.kind if self.type is not None else Kind.INVALID

	def is_valid(self) -> bool:
		return self.type is not None

	def can_addr(self) -> bool:
		return self._addressable

	def is_nil(self) -> bool:
		if self.kind not in NILABLE_KINDS:
			raise RuntimeTypeError(f"is_nil of non-nilable {self.type}")
		return self._cell.value is None

	def _need(self, *kinds: Kind) -> None:
		if self.kind not in kinds:
			want = "/".join(k.name.lower() for k in kinds)
			raise RuntimeTypeError(f"value of type {self.type} used as {want}")

	def _need_settable(self) -> None:
		if not self._addressable:
			raise RuntimeTypeError(f"assignment to unaddressable value of type {self.type}")

	# -- navigation ------------------------------------------------------

	def elem(self) -> "Value":
		"""Pointee of a pointer or dynamic value of an interface; invalid Value for nil."""
		if self.kind is Kind.POINTER:
			target = self._cell.value
			if target is None:
				return Value()
			return Value(self.type.elem, target, True)  # type: ignore[union-attr]
		if self.kind is Kind.INTERFACE:
			dyn = self._cell.value
			return dyn if dyn is not None else Value()
		raise RuntimeTypeError(f"elem of non-pointer type {self.type}")

	def num_field(self) -> int:
		self._need(Kind.STRUCT)
		return len(self.type.fields)  # type: ignore[union-attr]

	def field(self, i: int) -> "Value":
		self._need(Kind.STRUCT)
		f = self.type.fields[i]  # type: ignore[union-attr]
		return Value(f.type, self._cell.value[i], self._addressable)

	def field_by_name(self, name: str) -> "Value":
		self._need(Kind.STRUCT)
		f = self.type.field_by_name(name)  # type: ignore[union-attr]
		if f is None:
			raise AttributeError(f"type {self.type} has no field {name}")
		return self.field(f.index)

	def index(self, i: int) -> "Value":
		self._need(Kind.ARRAY, Kind.SLICE)
		cells = self._cell.value or []
		if not 0 <= i < len(cells):
			raise IndexError(f"index {i} out of range [0:{len(cells)}]")
		addressable = self._addressable or self.kind is Kind.SLICE
		return Value(self.type.elem, cells[i], addressable)  # type: ignore[union-attr]

	def len(self) -> int:
		if self.kind is Kind.STRING:
			return len(self._cell.value)
		self._need(Kind.ARRAY, Kind.SLICE, Kind.MAP)
		return len(self._cell.value or ())

	def addr(self) -> "Value":
		if not self._addressable:
			raise RuntimeTypeError(f"addr of unaddressable value of type {self.type}")
		return Value(ptr_to(self.type), Cell(self._cell))  # type: ignore[arg-type]

	def copy(self) -> "Value":
		"""Unaddressable copy with value semantics."""
		if self.type is None:
			return Value()
		return Value(self.type, Cell(copy_storage(self.type, self._cell.value)))

	# -- mutation --------------------------------------------------------

	def set(self, x: "Value") -> None:
		self._need_settable()
		if x.type is None or not x.type.assignable_to(self.type):  # type: ignore[arg-type]
			raise RuntimeTypeError(f"value of type {x.type} is not assignable to type {self.type}")
		self._cell.value = assign_storage(self.type, x)  # type: ignore[arg-type]

	def set_int(self, n: int) -> None:
		self._need(*(INT_KINDS | UINT_KINDS))
		self._need_settable()
		self._cell.value = int(n)

	def set_float(self, x: float) -> None:
		self._need(*FLOAT_KINDS)
		self._need_settable()
		self._cell.value = float(x)

	def set_complex(self, x: complex) -> None:
		self._need(*COMPLEX_KINDS)
		self._need_settable()
		self._cell.value = complex(x)

	def set_bool(self, b: bool) -> None:
		self._need(Kind.BOOL)
		self._need_settable()
		self._cell.value = bool(b)

	def set_string(self, s: str) -> None:
		self._need(Kind.STRING)
		self._need_settable()
		self._cell.value = str(s)

	def map_index(self, key: "Value") -> "Value":
		"""Element stored under `key`, or an invalid Value when absent."""
		self._need(Kind.MAP)
		entries = self._cell.value or {}
		hit = entries.get(_map_key(self.type.key, assign_storage(self.type.key, key)))  # type: ignore[union-attr, arg-type]
		if hit is None:
			return Value()
		return Value(self.type.elem, Cell(hit[1]))  # type: ignore[union-attr]

	def set_map_index(self, key: "Value", elem: "Value") -> None:
		self._need(Kind.MAP)
		entries = self._cell.value
		if entries is None:
			raise RuntimeTypeError("assignment to entry in nil map")
		ks = assign_storage(self.type.key, key)  # type: ignore[union-attr, arg-type]
		entries[_map_key(self.type.key, ks)] = (ks, assign_storage(self.type.elem, elem))  # type: ignore[union-attr, arg-type]

	def map_keys(self) -> List["Value"]:
		self._need(Kind.MAP)
		return [Value(self.type.key, Cell(ks)) for ks, _ in (self._cell.value or {}).values()]  # type: ignore[union-attr]

	# -- extraction ------------------------------------------------------

	def int(self) -> int:
		self._need(*(INT_KINDS | UINT_KINDS))
		return self._cell.value

	def float(self) -> float:
		self._need(*FLOAT_KINDS)
		return self._cell.value

	def complex(self) -> complex:
		self._need(*COMPLEX_KINDS)
		return self._cell.value

	def bool(self) -> bool:
		self._need(Kind.BOOL)
		return self._cell.value

	def string(self) -> str:
		if self.kind is Kind.STRING:
			return self._cell.value
		return f"<{self.type} Value>"

	def interface(self) -> Any:
		"""Python-level payload: primitives for scalar kinds, the Value itself otherwise."""
		if self.kind is Kind.INTERFACE:
			dyn = self._cell.value
			return None if dyn is None else dyn.interface()
		if self.kind in SCALAR_KINDS:
			return self._cell.value
		return self

	# -- methods and calls -----------------------------------------------

	def num_method(self) -> int:
		return self.type.num_method() if self.type is not None else 0

	def method_by_name(self, name: str) -> Optional["Value"]:
		"""Bound method from the exported method set, or None."""
		if self.kind is Kind.INTERFACE:
			dyn = self.elem()
			if not dyn.is_valid():
				raise NilDereferenceError("method call on nil interface value")
			return dyn.method_by_name(name)
		m = self.type.method_by_name(name) if self.type is not None else None
		if m is None:
			return None
		return self.bind(self.type.lookup_descriptor(name))  # type: ignore[union-attr, arg-type]

	def bind(self, desc: MethodDescriptor) -> "Value":
		"""Method value for `desc` with this value as receiver."""
		fn = self.type.method_func(desc)  # type: ignore[union-attr]
		recv = self

		def bound(args: List[Value]) -> Optional[List[Value]]:
			return fn([recv, *args])

		return Value(desc.signature, Cell(bound))

	def call(self, args: Sequence["Value"] = ()) -> List["Value"]:
		"""Call a func value with positional arguments, checked against its signature."""
		self._need(Kind.FUNC)
		fn = self._cell.value
		if fn is None:
			raise RuntimeTypeError("call of nil function")
		ft = self.type
		params = ft.params  # type: ignore[union-attr]
		args = list(args)
		if ft.variadic:  # type: ignore[union-attr]
			fixed = len(params) - 1
			if len(args) < fixed:
				raise RuntimeTypeError(f"call with too few input arguments: have {len(args)}, want at least {fixed}")
			rest = args[fixed:]
			packed = make_slice(params[-1], 0)
			if rest:
				packed._cell.value = [Cell(assign_storage(params[-1].elem, _check_arg(a, params[-1].elem))) for a in rest]  # type: ignore[arg-type]
			args = args[:fixed] + [packed]
		elif len(args) != len(params):
			raise RuntimeTypeError(f"call with wrong argument count: have {len(args)}, want {len(params)}")
		in_ = [_coerce(_check_arg(a, p), p) for a, p in zip(args, params)]
		out = fn(in_) or []
		if len(out) != len(ft.results):  # type: ignore[union-attr]
			raise RuntimeTypeError(f"function returned {len(out)} values, want {len(ft.results)}")  # type: ignore[union-attr]
		return list(out)

	def __repr__(self) -> str:
		if self.type is None:
			return "<invalid Value>"
		if self.kind in SCALAR_KINDS:
			return f"<{self.type} Value {self._cell.value!r}>"
		return f"<{self.type} Value>"


def _check_arg(a: Value, p: RType) -> Value:
	if a.type is None or not a.type.assignable_to(p):
		raise RuntimeTypeError(f"call using {a.type} as type {p}")
	return a


def _coerce(a: Value, p: RType) -> Value:
	if p.kind is Kind.INTERFACE and a.kind is not Kind.INTERFACE:
		return Value(p, Cell(a.copy()))
	return a


def assign_storage(dst: RType, x: Value) -> Any:
	"""Storage to place in a `dst`-typed cell when assigning `x`."""
	if dst.kind is Kind.INTERFACE and x.kind is not Kind.INTERFACE:
		return x.copy()
	return copy_storage(x.type, x._cell.value)  # type: ignore[arg-type]


def new(t: RType) -> Value:
	"""Pointer to a fresh zero value of `t`."""
	return Value(ptr_to(t), Cell(Cell(zero_storage(t))))


def zero(t: RType) -> Value:
	return Value(t, Cell(zero_storage(t)))


def make_slice(t: RType, length: int) -> Value:
	if t.kind is not Kind.SLICE:
		raise RuntimeTypeError(f"make_slice of non-slice type {t}")
	return Value(t, Cell([Cell(zero_storage(t.elem)) for _ in range(length)]))  # type: ignore[arg-type]


def make_map(t: RType) -> Value:
	if t.kind is not Kind.MAP:
		raise RuntimeTypeError(f"make_map of non-map type {t}")
	entries: Dict[Hashable, Any] = {}
	return Value(t, Cell(entries))


def make_func(t: RType, fn: Callable[[List[Value]], Optional[List[Value]]]) -> Value:
	if t.kind is not Kind.FUNC:
		raise RuntimeTypeError(f"make_func of non-func type {t}")
	return Value(t, Cell(fn))


def append(s: Value, *xs: Value) -> Value:
	"""Slice holding the elements of `s` followed by `xs` (shares `s`'s cells)."""
	s._need(Kind.SLICE)
	elem = s.type.elem  # type: ignore[union-attr]
	cells = list(s._cell.value or [])
	for x in xs:
		cells.append(Cell(assign_storage(elem, _check_arg(x, elem))))  # type: ignore[arg-type]
	return Value(s.type, Cell(cells))


def value_of(x: Any) -> Value:
	"""Wrap a Python primitive (or pass a Value through)."""
	if isinstance(x, Value):
		return x
	if isinstance(x, bool):
		return Value(BASIC_TYPES[Kind.BOOL], Cell(x))
	if isinstance(x, int):
		return Value(BASIC_TYPES[Kind.INT], Cell(x))
	if isinstance(x, float):
		return Value(BASIC_TYPES[Kind.FLOAT64], Cell(x))
	if isinstance(x, complex):
		return Value(BASIC_TYPES[Kind.COMPLEX128], Cell(x))
	if isinstance(x, str):
		return Value(BASIC_TYPES[Kind.STRING], Cell(x))
	raise RuntimeTypeError(f"value_of: no runtime type for {type(x).__name__}")


__all__ = [
	"Cell",
	"Value",
	"new",
	"zero",
	"make_slice",
	"make_map",
	"make_func",
	"append",
	"value_of",
	"zero_storage",
	"copy_storage",
	"assign_storage",
]
