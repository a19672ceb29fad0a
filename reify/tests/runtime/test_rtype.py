# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Runtime type handles: identity, structure, method views."""

import pytest

from reify.runtime import (
	BASIC_TYPES,
	EMPTY_INTERFACE,
	ERROR_INTERFACE,
	ChanDir,
	Kind,
	MethodDescriptor,
	MethodTable,
	RuntimeTypeError,
	StructField,
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

INT = BASIC_TYPES[Kind.INT]
STRING = BASIC_TYPES[Kind.STRING]
BOOL = BASIC_TYPES[Kind.BOOL]


def test_composite_handles_compare_structurally():
	assert ptr_to(INT) == ptr_to(INT)
	assert hash(ptr_to(INT)) == hash(ptr_to(INT))
	assert {map_of(STRING, slice_of(INT)): 1}[map_of(STRING, slice_of(INT))] == 1
	assert slice_of(INT) != slice_of(STRING)
	assert array_of(2, INT) != array_of(3, INT)
	assert chan_of(ChanDir.SEND, INT) != chan_of(ChanDir.BOTH, INT)


def test_named_handles_compare_by_identity():
	a = named_of("p", "T", INT)
	b = named_of("p", "T", INT)
	assert a != b
	assert a == a
	assert not identical(a, INT)
	assert ptr_to(a) != ptr_to(b)


def test_type_strings():
	assert str(INT) == "int"
	assert str(slice_of(ptr_to(STRING))) == "[]*string"
	assert str(array_of(4, BASIC_TYPES[Kind.UINT8])) == "[4]uint8"
	assert str(map_of(STRING, INT)) == "map[string]int"
	assert str(chan_of(ChanDir.RECV, INT)) == "<-chan int"
	assert str(chan_of(ChanDir.SEND, INT)) == "chan<- int"
	assert str(func_of([INT, slice_of(STRING)], [BOOL, ERROR_INTERFACE], True)) == "func(int, ...string) (bool, error)"
	assert str(struct_of([StructField("X", INT), StructField("y", STRING, tag='json:"y"', pkg_path="p")])) == (
		'struct { X int; y string "json:\\"y\\"" }'
	)
	assert str(named_of("example.com/geo", "Point", INT)) == "geo.Point"
	assert str(BASIC_TYPES[Kind.UNSAFE_POINTER]) == "unsafe.Pointer"
	assert str(EMPTY_INTERFACE) == "interface {}"


def test_constructor_validation():
	with pytest.raises(RuntimeTypeError):
		map_of(slice_of(INT), INT)
	with pytest.raises(RuntimeTypeError):
		array_of(-1, INT)
	with pytest.raises(RuntimeTypeError):
		func_of([INT], [], variadic=True)
	with pytest.raises(RuntimeTypeError):
		struct_of([StructField("X", INT), StructField("X", STRING)])
	with pytest.raises(RuntimeTypeError):
		interface_of([MethodDescriptor("M", func_of([], [])), MethodDescriptor("M", func_of([], []))])
	blanks = struct_of([StructField("_", INT), StructField("_", INT)])
	assert [f.index for f in blanks.fields] == [0, 1]


def test_comparability():
	assert INT.comparable
	assert not slice_of(INT).comparable
	assert not struct_of([StructField("S", slice_of(INT))]).comparable
	assert array_of(2, INT).comparable
	assert not array_of(2, map_of(INT, INT)).comparable


def test_placeholder_is_patched_in_place():
	t = new_placeholder("p", "T")
	assert not t.complete
	assert t.kind is Kind.INTERFACE
	p = ptr_to(t)
	same = patch_named(t, struct_of([StructField("Next", p)]))
	assert same is t
	assert t.complete
	assert t.kind is Kind.STRUCT
	assert t.field(0).type.elem is t


def test_refresh_recomputes_stale_comparability():
	t = new_placeholder("p", "T")
	arr = array_of(1, t)
	assert arr.comparable
	patch_named(t, slice_of(INT))
	assert arr.comparable
	assert arr.refresh()
	assert not arr.comparable
	assert not arr.refresh()


def test_method_views_value_and_pointer():
	t = named_of("p", "T", struct_of([]))
	sig = func_of([], [STRING])
	set_methods(
		t,
		MethodTable.build(
			[
				MethodDescriptor("String", sig),
				MethodDescriptor("Set", func_of([INT], []), pointer_recv=True),
				MethodDescriptor("hidden", sig, pkg_path="p"),
			]
		),
	)
	assert t.mtable.vcount == 2
	assert [d.name for d in t.mtable.entries] == ["String", "hidden", "Set"]

	assert t.num_method() == 1
	assert t.method(0).name == "String"
	assert str(t.method(0).type) == "func(p.T) string"
	assert t.method_by_name("hidden") is None
	assert t.method_by_name("Set") is None
	assert t.lookup_descriptor("hidden") is not None

	pt = ptr_to(t)
	assert pt.num_method() == 2
	assert [pt.method(i).name for i in range(pt.num_method())] == ["Set", "String"]
	assert str(pt.method_by_name("Set").type) == "func(*p.T, int)"


def test_set_methods_rejects_interfaces():
	with pytest.raises(RuntimeTypeError):
		set_methods(EMPTY_INTERFACE, MethodTable())


def test_implements_and_assignability():
	t = named_of("p", "T", struct_of([]))
	sig = func_of([], [STRING])
	set_methods(
		t,
		MethodTable.build(
			[
				MethodDescriptor("String", sig),
				MethodDescriptor("Set", func_of([INT], []), pointer_recv=True),
				MethodDescriptor("hidden", sig, pkg_path="p"),
			]
		),
	)
	stringer = interface_of([MethodDescriptor("String", func_of([], [STRING]))])
	setter = interface_of([MethodDescriptor("Set", func_of([INT], []))])
	assert t.implements(stringer)
	assert not t.implements(setter)
	assert ptr_to(t).implements(setter)
	assert t.implements(interface_of([MethodDescriptor("hidden", sig, pkg_path="p")]))
	assert not t.implements(interface_of([MethodDescriptor("hidden", sig, pkg_path="q")]))
	assert t.assignable_to(stringer)
	assert t.assignable_to(EMPTY_INTERFACE)
	assert not t.assignable_to(setter)
	with pytest.raises(RuntimeTypeError):
		t.implements(INT)


def test_assignability_between_named_and_unnamed():
	ints = named_of("p", "Ints", slice_of(INT))
	assert slice_of(INT).assignable_to(ints)
	assert ints.assignable_to(slice_of(INT))
	other = named_of("p", "Other", slice_of(INT))
	assert not ints.assignable_to(other)


def test_error_interface():
	assert str(ERROR_INTERFACE) == "error"
	assert ERROR_INTERFACE.num_method() == 1
	m = ERROR_INTERFACE.method(0)
	assert m.name == "Error"
	assert str(m.type) == "func() string"
