# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Round trips through materialized method tables and the call-by-name bridge."""

import pytest

from reify.core.errors import UnimplementedError
from reify.frontend import load_package
from reify.invoke import call, field, field_addr, invoke, method_by_name
from reify.registry import TypeRegistry
from reify.runtime import Cell, NilDereferenceError, RuntimeTypeError, Value, new, value_of, zero

SRC = """
package main

type Point struct {
	X, Y int
}

func (p Point) String() string
func (p *Point) Set(x int, y int)

type Inner struct {
	N int
}

func (i Inner) Get() int
func (i *Inner) Inc()

type ByValue struct {
	Inner
}

type ByPtr struct {
	*Inner
}

type Reader interface {
	Read() int
}

type Wrapper struct {
	Reader
}

type Source struct {
	N int
}

func (s Source) Read() int

type Num int

func (n Num) Add(o Num) Num
func (n Num) Sum(xs ...int) int
func (n Num) secret() int
"""


def _point_string(args):
	p = args[0]
	return [value_of(f"({p.field(0).int()},{p.field(1).int()})")]


def _point_set(args):
	p = args[0].elem()
	p.field(0).set_int(args[1].int())
	p.field(1).set_int(args[2].int())
	return []


def _inner_get(args):
	return [value_of(args[0].field(0).int())]


def _inner_inc(args):
	n = args[0].elem().field(0)
	n.set_int(n.int() + 1)
	return []


def _num_add(args):
	return [Value(args[0].type, Cell(args[0].int() + args[1].int()))]


def _num_sum(args):
	xs = args[1]
	return [value_of(args[0].int() + sum(xs.index(i).int() for i in range(xs.len())))]


def _num_secret(args):
	return [value_of(42)]


IMPLS = {
	("Point", "String"): _point_string,
	("Point", "Set"): _point_set,
	("Inner", "Get"): _inner_get,
	("Inner", "Inc"): _inner_inc,
	("Num", "Add"): _num_add,
	("Num", "Sum"): _num_sum,
	("Num", "secret"): _num_secret,
	("Source", "Read"): _inner_get,
}


@pytest.fixture(scope="module")
def pkg():
	return load_package(SRC)


@pytest.fixture
def reg():
	with TypeRegistry(lookup_method=lambda ident: IMPLS.get((ident.recv.name, ident.name))) as r:
		yield r


def test_set_then_string_round_trip(pkg, reg):
	point = reg.resolve(pkg.lookup("Point"))
	p = new(point)
	assert invoke(p, "Set", [value_of(100), value_of(200)]) == []
	out = invoke(p, "String")
	assert len(out) == 1
	assert out[0].string() == "(100,200)"


def test_value_receiver_gets_an_unaddressable_copy(pkg):
	seen = []

	def string(args):
		seen.append(args[0].can_addr())
		return [value_of("")]

	with TypeRegistry(lookup_method=lambda ident: string if ident.name == "String" else None) as r:
		point = r.resolve(pkg.lookup("Point"))
		invoke(new(point), "String")
		invoke(new(point).elem(), "String")
	assert seen == [False, False]


def test_addressable_value_reaches_pointer_methods(pkg, reg):
	point = reg.resolve(pkg.lookup("Point"))
	v = new(point).elem()
	invoke(v, "Set", [value_of(1), value_of(2)])
	assert invoke(v, "String")[0].string() == "(1,2)"
	with pytest.raises(AttributeError):
		method_by_name(zero(point), "Set")


def test_exported_method_lookup_on_value(pkg, reg):
	point = reg.resolve(pkg.lookup("Point"))
	v = new(point).elem()
	assert v.method_by_name("Set") is None
	m = v.method_by_name("String")
	assert call(m)[0].string() == "(0,0)"


def test_wrong_arguments_surface_runtime_errors(pkg, reg):
	p = new(reg.resolve(pkg.lookup("Point")))
	with pytest.raises(RuntimeTypeError, match="call using string as type int"):
		invoke(p, "Set", [value_of("x"), value_of(2)])
	with pytest.raises(RuntimeTypeError):
		invoke(p, "Set", [value_of(1)])
	with pytest.raises(AttributeError):
		invoke(p, "Missing")


def test_promoted_through_value_embedding(pkg, reg):
	by_value = reg.resolve(pkg.lookup("ByValue"))
	pv = new(by_value)
	invoke(pv, "Inc")
	invoke(pv, "Inc")
	assert invoke(pv, "Get")[0].int() == 2
	assert invoke(pv.elem(), "Get")[0].int() == 2
	assert field(pv, 0).field(0).int() == 2


def test_promoted_through_pointer_embedding(pkg, reg):
	by_ptr = reg.resolve(pkg.lookup("ByPtr"))
	inner = new(reg.resolve(pkg.lookup("Inner")))
	bp = new(by_ptr)
	bp.elem().field(0).set(inner)
	invoke(bp.elem(), "Inc")
	invoke(bp.elem().copy(), "Inc")
	assert inner.elem().field(0).int() == 2
	assert invoke(bp, "Get")[0].int() == 2


def test_promoted_through_nil_pointer(pkg, reg):
	by_ptr = reg.resolve(pkg.lookup("ByPtr"))
	with pytest.raises(NilDereferenceError):
		invoke(zero(by_ptr), "Get")


def test_promoted_through_embedded_interface(pkg, reg):
	wrapper = reg.resolve(pkg.lookup("Wrapper"))
	source = reg.resolve(pkg.lookup("Source"))
	src = new(source)
	src.elem().field(0).set_int(7)
	w = new(wrapper).elem()
	w.field(0).set(src.elem())
	assert invoke(w, "Read")[0].int() == 7
	assert invoke(w.field(0), "Read")[0].int() == 7
	with pytest.raises(NilDereferenceError):
		invoke(zero(wrapper), "Read")


def test_add_returns_a_fresh_value(pkg, reg):
	num = reg.resolve(pkg.lookup("Num"))
	a = new(num).elem()
	a.set_int(1)
	b = new(num).elem()
	b.set_int(2)
	out = invoke(a, "Add", [b])
	assert out[0].type is num
	assert out[0].int() == 3
	assert a.int() == 1
	with pytest.raises(RuntimeTypeError):
		invoke(a, "Add", [value_of(2)])


def test_variadic_method(pkg, reg):
	num = reg.resolve(pkg.lookup("Num"))
	assert str(num.method_by_name("Sum").type) == "func(main.Num, ...int) int"
	n = new(num).elem()
	n.set_int(10)
	assert invoke(n, "Sum")[0].int() == 10
	assert invoke(n, "Sum", [value_of(1), value_of(2), value_of(3)])[0].int() == 16


def test_unexported_methods_are_callable_by_name(pkg, reg):
	num = reg.resolve(pkg.lookup("Num"))
	assert num.num_method() == 2
	assert num.method_by_name("secret") is None
	assert invoke(zero(num), "secret")[0].int() == 42


def test_missing_implementation_raises_unimplemented(pkg):
	with TypeRegistry() as bare:
		point = bare.resolve(pkg.lookup("Point"))
		assert point.num_method() == 1
		with pytest.raises(UnimplementedError):
			invoke(zero(point), "String")
		with pytest.raises(UnimplementedError):
			invoke(new(point), "Set", [value_of(1), value_of(2)])


def test_field_helpers(pkg, reg):
	point = reg.resolve(pkg.lookup("Point"))
	p = new(point)
	pp = new(p.type)
	pp.elem().set(p)
	field(pp, 1).set_int(9)
	assert p.elem().field(1).int() == 9
	fa = field_addr(p, 0)
	fa.elem().set_int(4)
	assert p.elem().field(0).int() == 4
	with pytest.raises(NilDereferenceError):
		field(zero(p.type), 0)
	with pytest.raises(NilDereferenceError):
		field_addr(zero(p.type), 0)
