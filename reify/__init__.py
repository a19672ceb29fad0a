# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-12
"""
reify: materialize runtime types from a statically-checked type graph.

Pipeline:
  - reify.core: checker-side type graph (TypeNodes, scopes) and errors
  - reify.convert: TypeNode -> runtime type handle
  - reify.registry: named-type identity per lexical scope, cycle breaking
  - reify.method_set: method sets, promotion, method-table materialization
  - reify.invoke: call methods by name with positional arguments
  - reify.runtime: the host runtime (type handles, values)
  - reify.frontend: Go-like declaration front end producing TypeNodes
"""

from reify.core.errors import (
	NamedTypeError,
	RegistryClosedError,
	ReifyError,
	UnimplementedError,
	UnknownLengthError,
	UnknownTypeError,
	UntypedKindError,
)
from reify.convert import to_type, to_type_list
from reify.invoke import call, field, field_addr, invoke, method_by_name
from reify.method_set import MethodIdentity, Selection, intuitive_method_set, method_set
from reify.registry import TypeRegistry

__all__ = [
	"NamedTypeError",
	"RegistryClosedError",
	"ReifyError",
	"UnimplementedError",
	"UnknownLengthError",
	"UnknownTypeError",
	"UntypedKindError",
	"to_type",
	"to_type_list",
	"call",
	"field",
	"field_addr",
	"invoke",
	"method_by_name",
	"MethodIdentity",
	"Selection",
	"intuitive_method_set",
	"method_set",
	"TypeRegistry",
]
