# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Named-type registry: scoped identity, cycles, overrides, failures."""

import logging

import pytest

from reify.core import type_nodes as tn
from reify.core.errors import NamedTypeError, RegistryClosedError, UnknownLengthError
from reify.frontend import load_package
from reify.registry import TypeRegistry
from reify.runtime import BASIC_TYPES, Kind, named_of, ptr_to, struct_of

INT = tn.Basic(tn.BasicKind.INT, "int")


def test_same_scope_key_gives_same_handle(registry):
	scope = tn.Scope(comment="package m")
	a = tn.Named("m", "T", tn.Struct((tn.Field("X", INT),)), scope=scope)
	b = tn.Named("m", "T", tn.Struct((tn.Field("X", INT),)), scope=scope)
	assert registry.resolve(a) is registry.resolve(a)
	assert registry.resolve(b) is registry.resolve(a)
	assert registry.lookup("m", "T", scope) is registry.resolve(a)


def test_same_name_in_different_scopes_is_distinct(registry):
	pkg = tn.Scope(comment="package m")
	f1 = tn.Scope(pkg, comment="func f")
	f2 = tn.Scope(pkg, comment="func g")
	t1 = registry.resolve(tn.Named("m", "T", INT, scope=f1))
	t2 = registry.resolve(tn.Named("m", "T", INT, scope=f2))
	assert t1 is not t2
	assert t1 != t2
	assert str(t1) == str(t2) == "m.T"


def test_distinct_local_types_from_source(registry):
	pkg = load_package(
		"""
package main

func a() {
	type T struct { X int }
}

func b() {
	type T struct { Y string }
	{
		type T int
	}
}
"""
	)
	nodes = pkg.lookup_nested("T")
	assert len(nodes) == 3
	handles = [registry.resolve(n) for n in nodes]
	assert len({id(h) for h in handles}) == 3
	assert [h.kind for h in handles] == [Kind.STRUCT, Kind.STRUCT, Kind.INT]
	assert handles[0].field(0).name == "X"
	assert handles[1].field(0).name == "Y"
	assert registry.scope_types(nodes[0].scope) == {("main", "T"): handles[0]}


def test_self_referential_struct_terminates(registry):
	pkg = load_package(
		"""
package main

type T struct {
	*T
	Name string
}
"""
	)
	rt = registry.resolve(pkg.lookup("T"))
	assert rt.complete
	assert rt.field(0).anonymous
	assert rt.field(0).type.elem is rt
	assert str(rt.field(0).type) == "*main.T"


def test_mutually_recursive_types(registry):
	pkg = load_package(
		"""
package main

type N struct {
	Next *T
	Vals []N
}

type T struct {
	Owner *N
}
"""
	)
	n = registry.resolve(pkg.lookup("N"))
	t = registry.resolve(pkg.lookup("T"))
	assert n.field(0).type.elem is t
	assert t.field(0).type.elem is n
	assert n.field(1).type.elem is n


def test_self_referential_pointer_slice_func_and_interface(registry):
	pkg = load_package(
		"""
package main

type P *P
type S []S
type F func(string) F
type I interface {
	Next() I
}
"""
	)
	p = registry.resolve(pkg.lookup("P"))
	assert p.kind is Kind.POINTER
	assert p.elem is p
	assert ptr_to(p).assignable_to(p)
	assert p.assignable_to(ptr_to(p))

	s = registry.resolve(pkg.lookup("S"))
	assert s.elem is s

	f = registry.resolve(pkg.lookup("F"))
	assert f.params[0] is BASIC_TYPES[Kind.STRING]
	assert f.results[0] is f

	i = registry.resolve(pkg.lookup("I"))
	assert i.num_method() == 1
	assert i.method(0).type.results[0] is i


def test_child_scope_element_identity(registry):
	pkg = load_package(
		"""
package main

type Scope struct {
	parent   *Scope
	children []*Scope
}
"""
	)
	rt = registry.resolve(pkg.lookup("Scope"))
	assert rt.field(1).type.elem.elem is rt
	assert rt.field(0).type == rt.field(1).type.elem


def test_patch_refreshes_handles_built_against_placeholder(registry):
	pkg = load_package(
		"""
package main

type A struct {
	p *[1]A
	s []int
}
"""
	)
	a = registry.resolve(pkg.lookup("A"))
	arr = a.field(0).type.elem
	assert arr.elem is a
	assert not a.comparable
	assert not arr.comparable


def test_external_types_take_precedence():
	geo = named_of("example.com/geo", "Point", struct_of([]))
	seen = []

	def find(pkg_path, name):
		seen.append((pkg_path, name))
		if (pkg_path, name) == ("example.com/geo", "Point"):
			return geo
		return None

	lib = load_package("package geo\ntype Point struct { X int }\n", path="example.com/geo")
	main = load_package(
		"""
package main

import "example.com/geo"

type Shape struct {
	Origin geo.Point
}
""",
		imports={"example.com/geo": lib},
	)
	with TypeRegistry(find_external_type=find) as reg:
		assert reg.resolve(lib.lookup("Point")) is geo
		shape = reg.resolve(main.lookup("Shape"))
		assert shape.field(0).type is geo
		assert reg.lookup("example.com/geo", "Point", lib.scope) is None
	assert ("main", "Shape") in seen


def test_failed_resolution_is_reraised(registry):
	scope = tn.Scope()
	bad = tn.Named("m", "Bad", tn.Array(INT, -1), scope=scope)
	with pytest.raises(NamedTypeError) as first:
		registry.resolve(bad)
	assert isinstance(first.value.cause, UnknownLengthError)
	with pytest.raises(NamedTypeError) as second:
		registry.resolve(bad)
	assert second.value is first.value
	placeholder = registry.lookup("m", "Bad", scope)
	assert placeholder is not None
	assert not placeholder.complete


def test_closed_registry_refuses_work():
	reg = TypeRegistry()
	with reg:
		reg.to_type(INT)
	with pytest.raises(RegistryClosedError):
		reg.resolve(tn.Named("m", "T", INT))
	with pytest.raises(RegistryClosedError):
		reg.to_type(INT)


def test_placeholder_creation_is_logged(registry, caplog):
	caplog.set_level(logging.DEBUG, logger="reify.registry")
	registry.resolve(tn.Named("m", "T", INT, scope=tn.Scope()))
	assert any("placeholder for m.T" in r.getMessage() for r in caplog.records)
