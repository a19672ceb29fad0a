# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-18
"""Syntax tree for the declaration front end."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


# -- type expressions -------------------------------------------------------


@dataclass
class TypeName:
	name: str
	loc: Located
	pkg: Optional[str] = None  # qualifier of `pkg.Name`


@dataclass
class PointerType:
	elem: "TypeExpr"


@dataclass
class SliceType:
	elem: "TypeExpr"


@dataclass
class ArrayType:
	length: int
	elem: "TypeExpr"


@dataclass
class MapType:
	key: "TypeExpr"
	elem: "TypeExpr"


@dataclass
class ChanType:
	elem: "TypeExpr"
	dir: str = "both"  # "both" | "send" | "recv"


@dataclass
class Param:
	name: Optional[str]
	type_expr: "TypeExpr"
	variadic: bool = False


@dataclass
class SignatureExpr:
	params: List[Param] = field(default_factory=list)
	results: List[Param] = field(default_factory=list)


@dataclass
class FuncType:
	sig: SignatureExpr


@dataclass
class FieldDecl:
	names: List[str]
	type_expr: "TypeExpr"
	loc: Located
	tag: str = ""
	embedded: bool = False


@dataclass
class StructType:
	fields: List[FieldDecl] = field(default_factory=list)


@dataclass
class InterfaceMethod:
	name: str
	sig: SignatureExpr
	loc: Located


@dataclass
class InterfaceType:
	methods: List[InterfaceMethod] = field(default_factory=list)
	embedded: List[TypeName] = field(default_factory=list)


TypeExpr = Union[TypeName, PointerType, SliceType, ArrayType, MapType, ChanType, FuncType, StructType, InterfaceType]


# -- declarations -----------------------------------------------------------


@dataclass
class ImportDecl:
	path: str
	loc: Located
	alias: Optional[str] = None


@dataclass
class TypeSpec:
	name: str
	type_expr: TypeExpr
	loc: Located
	alias: bool = False  # `type A = B`


@dataclass
class VarDecl:
	name: str
	type_expr: TypeExpr
	loc: Located


@dataclass
class Receiver:
	type_name: str
	loc: Located
	name: Optional[str] = None
	pointer: bool = False


@dataclass
class Block:
	"""Function body or nested block; each one is its own lexical scope."""

	stmts: List[Union[TypeSpec, VarDecl, "Block"]] = field(default_factory=list)


@dataclass
class FuncDecl:
	name: str
	sig: SignatureExpr
	loc: Located
	recv: Optional[Receiver] = None
	body: Optional[Block] = None


Decl = Union[ImportDecl, TypeSpec, VarDecl, FuncDecl]


@dataclass
class SourceFile:
	package: str
	decls: List[Decl] = field(default_factory=list)

	@property
	def imports(self) -> List[ImportDecl]:
		return [d for d in self.decls if isinstance(d, ImportDecl)]


__all__ = [
	"Located",
	"TypeName",
	"PointerType",
	"SliceType",
	"ArrayType",
	"MapType",
	"ChanType",
	"Param",
	"SignatureExpr",
	"FuncType",
	"FieldDecl",
	"StructType",
	"InterfaceMethod",
	"InterfaceType",
	"TypeExpr",
	"ImportDecl",
	"TypeSpec",
	"VarDecl",
	"Receiver",
	"Block",
	"FuncDecl",
	"Decl",
	"SourceFile",
]
