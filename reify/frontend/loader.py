# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-19
"""
Declaration loader: parsed source -> checker-side type graph.

This is the stand-in for a real type checker. It builds `reify.core`
TypeNodes with the scoping a checker would give them:

  - a fresh universe scope per load (basic types, `byte`, `rune`, `any`,
    `error`), the package scope below it, and one child scope per function
    body or nested block;
  - package-level type names are all declared before any of them is
    resolved, so they may refer to each other in any order;
  - local declarations are sequential: a local type is visible from its own
    declaration on (so it may refer to itself) but not before;
  - methods attach to the receiver's named type, which must be declared at
    package level in this package.

Named-type chains (`type A B`) are flattened so every Named's `underlying`
is a structural node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from reify.core import type_nodes as tn

from . import ast
from .parser import parse_source

logger = logging.getLogger(__name__)


class LoadError(ValueError):
	"""Source that parses but does not type-check (unknown names, redeclarations, ...)."""

	def __init__(self, message: str, *, loc: Optional[ast.Located] = None) -> None:
		if loc is not None:
			message = f"{loc.line}:{loc.column}: {message}"
		super().__init__(message)
		self.loc = loc


@dataclass
class Var:
	name: str
	type: tn.TypeNode


@dataclass
class FuncObj:
	name: str
	signature: tn.Signature


@dataclass
class _PendingAlias:
	spec: ast.TypeSpec
	resolving: bool = False
	resolved: Optional[tn.TypeNode] = None


ScopeObj = Union[tn.TypeNode, Var, FuncObj, _PendingAlias]


_BASICS = {
	"bool": tn.BasicKind.BOOL,
	"int": tn.BasicKind.INT,
	"int8": tn.BasicKind.INT8,
	"int16": tn.BasicKind.INT16,
	"int32": tn.BasicKind.INT32,
	"int64": tn.BasicKind.INT64,
	"uint": tn.BasicKind.UINT,
	"uint8": tn.BasicKind.UINT8,
	"uint16": tn.BasicKind.UINT16,
	"uint32": tn.BasicKind.UINT32,
	"uint64": tn.BasicKind.UINT64,
	"uintptr": tn.BasicKind.UINTPTR,
	"float32": tn.BasicKind.FLOAT32,
	"float64": tn.BasicKind.FLOAT64,
	"complex64": tn.BasicKind.COMPLEX64,
	"complex128": tn.BasicKind.COMPLEX128,
	"string": tn.BasicKind.STRING,
	"byte": tn.BasicKind.UINT8,
	"rune": tn.BasicKind.INT32,
}

_CHAN_DIRS = {"both": tn.ChanDir.SEND_RECV, "send": tn.ChanDir.SEND_ONLY, "recv": tn.ChanDir.RECV_ONLY}


def universe() -> tn.Scope:
	"""A fresh universe scope."""
	scope = tn.Scope(comment="universe")
	for name, kind in _BASICS.items():
		scope.insert(name, tn.Basic(kind, name))
	err = tn.Named(pkg_path=None, name="error", scope=scope)
	err.underlying = tn.Interface(
		methods=(tn.Func("Error", tn.Signature(results=(tn.Basic(tn.BasicKind.STRING, "string"),))),)
	)
	scope.insert("error", err)
	scope.insert("any", tn.Interface())
	return scope


@dataclass
class Package:
	path: str
	name: str
	scope: tn.Scope
	types: Dict[str, tn.TypeNode] = field(default_factory=dict)
	vars: Dict[str, tn.TypeNode] = field(default_factory=dict)
	funcs: Dict[str, tn.Signature] = field(default_factory=dict)

	def lookup(self, name: str) -> tn.TypeNode:
		"""Package-level type (or the type of a package-level var)."""
		obj = self.scope.lookup_local(name)
		if obj is None:
			raise KeyError(name)
		return _as_type(obj)

	def lookup_nested(self, name: str) -> List[tn.TypeNode]:
		"""Every local declaration of `name`, one per block scope, in source order."""
		out: List[tn.TypeNode] = []

		def walk(scope: tn.Scope) -> None:
			for child in scope.children:
				obj = child.lookup_local(name)
				if obj is not None:
					out.append(_as_type(obj))
				walk(child)

		walk(self.scope)
		return out


def _as_type(obj: object) -> tn.TypeNode:
	if isinstance(obj, Var):
		return obj.type
	if isinstance(obj, FuncObj):
		return obj.signature
	if isinstance(obj, _PendingAlias):
		if obj.resolved is None:
			raise LoadError(f"type alias {obj.spec.name} is not resolved yet", loc=obj.spec.loc)
		return obj.resolved
	return obj  # type: ignore[return-value]


def load_package(
	source: str,
	path: Optional[str] = None,
	imports: Optional[Mapping[str, Package]] = None,
) -> Package:
	"""
	Parse and resolve one source file as a package.

	`imports` maps import paths to already-loaded packages; `import` declarations
	in the source bind them to local names. `unsafe` needs no entry.
	"""
	sf = parse_source(source)
	return _Loader(sf, path or sf.package, imports or {}).load()


class _Loader:
	def __init__(self, sf: ast.SourceFile, path: str, imports: Mapping[str, Package]) -> None:
		self.sf = sf
		self.path = path
		self.imports = imports
		self.qualifiers: Dict[str, Optional[Package]] = {}
		self.scope = tn.Scope(universe(), comment=f"package {sf.package}")
		self.pkg = Package(path=path, name=sf.package, scope=self.scope)

	def load(self) -> Package:
		for d in self.sf.decls:
			if isinstance(d, ast.ImportDecl):
				self._import(d)

		specs = [d for d in self.sf.decls if isinstance(d, ast.TypeSpec)]
		named: List[tn.Named] = []
		for spec in specs:
			obj: ScopeObj
			if spec.alias:
				obj = _PendingAlias(spec)
			else:
				obj = tn.Named(pkg_path=self.path, name=spec.name, scope=self.scope)
				named.append(obj)
			self._declare(self.scope, spec.name, obj, spec.loc)
		for spec in specs:
			if spec.alias:
				self.pkg.types[spec.name] = self._resolve_alias(self.scope, spec.name)
		for spec, n in zip([s for s in specs if not s.alias], named):
			n.underlying = self._type(spec.type_expr, self.scope)
			self.pkg.types[spec.name] = n
		for n in named:
			self._flatten(n, specs)

		funcs = [d for d in self.sf.decls if isinstance(d, ast.FuncDecl)]
		for d in self.sf.decls:
			if isinstance(d, ast.VarDecl):
				typ = self._type(d.type_expr, self.scope)
				self._declare(self.scope, d.name, Var(d.name, typ), d.loc)
				self.pkg.vars[d.name] = typ
		for fd in funcs:
			sig = self._signature(fd.sig, self.scope)
			if fd.recv is not None:
				self._method(fd, fd.recv, sig)
			else:
				self._declare(self.scope, fd.name, FuncObj(fd.name, sig), fd.loc)
				self.pkg.funcs[fd.name] = sig
			if fd.body is not None:
				self._block(fd.body, tn.Scope(self.scope, comment=f"func {fd.name}"))
		logger.debug(
			"loaded package %s: %d type(s), %d func(s)", self.path, len(self.pkg.types), len(self.pkg.funcs)
		)
		return self.pkg

	# -- declarations ----------------------------------------------------

	def _import(self, d: ast.ImportDecl) -> None:
		if d.path == "unsafe":
			self.qualifiers[d.alias or "unsafe"] = None
			return
		pkg = self.imports.get(d.path)
		if pkg is None:
			raise LoadError(f"could not import {d.path}", loc=d.loc)
		local = d.alias or pkg.name
		if local in self.qualifiers:
			raise LoadError(f"{local} redeclared in this block", loc=d.loc)
		self.qualifiers[local] = pkg

	def _declare(self, scope: tn.Scope, name: str, obj: ScopeObj, loc: ast.Located) -> None:
		if name == "_":
			return
		if scope.insert(name, obj) is not None:
			raise LoadError(f"{name} redeclared in this block", loc=loc)

	def _method(self, fd: ast.FuncDecl, recv: ast.Receiver, sig: tn.Signature) -> None:
		base = self.scope.lookup_local(recv.type_name)
		if isinstance(base, _PendingAlias):
			base = base.resolved
		if not isinstance(base, tn.Named):
			if base is None and self.scope.lookup(recv.type_name) is None:
				raise LoadError(f"undefined: {recv.type_name}", loc=recv.loc)
			raise LoadError(f"cannot define new methods on non-local type {recv.type_name}", loc=recv.loc)
		if isinstance(base.underlying, (tn.Pointer, tn.Interface)):
			raise LoadError(f"invalid receiver type {recv.type_name}", loc=recv.loc)
		if any(m.name == fd.name for m in base.methods):
			raise LoadError(f"method {recv.type_name}.{fd.name} already declared", loc=fd.loc)
		node: tn.TypeNode = tn.Pointer(base) if recv.pointer else base
		base.add_method(tn.Func(fd.name, sig, pkg_path=self.path, recv=node))

	def _block(self, block: ast.Block, scope: tn.Scope) -> None:
		for stmt in block.stmts:
			if isinstance(stmt, ast.Block):
				self._block(stmt, tn.Scope(scope, comment="block"))
			elif isinstance(stmt, ast.VarDecl):
				self._declare(scope, stmt.name, Var(stmt.name, self._type(stmt.type_expr, scope)), stmt.loc)
			elif stmt.alias:
				self._declare(scope, stmt.name, self._type(stmt.type_expr, scope), stmt.loc)
			else:
				n = tn.Named(pkg_path=self.path, name=stmt.name, scope=scope)
				self._declare(scope, stmt.name, n, stmt.loc)
				n.underlying = self._type(stmt.type_expr, scope)
				self._flatten(n, [stmt])

	def _resolve_alias(self, scope: tn.Scope, name: str) -> tn.TypeNode:
		pending = scope.lookup_local(name)
		if not isinstance(pending, _PendingAlias):
			return _as_type(pending)  # type: ignore[arg-type]
		if pending.resolved is not None:
			return pending.resolved
		if pending.resolving:
			raise LoadError(f"invalid recursive type alias {name}", loc=pending.spec.loc)
		pending.resolving = True
		typ = self._type(pending.spec.type_expr, scope)
		pending.resolved = typ
		return typ

	def _flatten(self, n: tn.Named, specs: List[ast.TypeSpec]) -> None:
		if not isinstance(n.underlying, tn.Named):
			return
		try:
			n.underlying = tn.underlying(n.underlying)
		except ValueError as err:
			loc = next((s.loc for s in specs if s.name == n.name), None)
			raise LoadError(f"invalid recursive type {n.name}", loc=loc) from err

	# -- type expressions ------------------------------------------------

	def _type(self, expr: ast.TypeExpr, scope: tn.Scope) -> tn.TypeNode:
		if isinstance(expr, ast.TypeName):
			return self._type_name(expr, scope)
		if isinstance(expr, ast.PointerType):
			return tn.Pointer(self._type(expr.elem, scope))
		if isinstance(expr, ast.SliceType):
			return tn.Slice(self._type(expr.elem, scope))
		if isinstance(expr, ast.ArrayType):
			return tn.Array(self._type(expr.elem, scope), expr.length)
		if isinstance(expr, ast.MapType):
			return tn.Map(self._type(expr.key, scope), self._type(expr.elem, scope))
		if isinstance(expr, ast.ChanType):
			return tn.Chan(self._type(expr.elem, scope), _CHAN_DIRS[expr.dir])
		if isinstance(expr, ast.FuncType):
			return self._signature(expr.sig, scope)
		if isinstance(expr, ast.StructType):
			return self._struct(expr, scope)
		if isinstance(expr, ast.InterfaceType):
			return self._interface(expr, scope)
		raise LoadError(f"unsupported type expression {expr!r}")

	def _type_name(self, expr: ast.TypeName, scope: tn.Scope) -> tn.TypeNode:
		if expr.pkg is not None:
			return self._qualified(expr)
		obj = scope.lookup(expr.name)
		if obj is None:
			raise LoadError(f"undefined: {expr.name}", loc=expr.loc)
		if isinstance(obj, _PendingAlias):
			return self._resolve_alias(self.scope, expr.name)
		if isinstance(obj, (Var, FuncObj)):
			raise LoadError(f"{expr.name} is not a type", loc=expr.loc)
		return obj

	def _qualified(self, expr: ast.TypeName) -> tn.TypeNode:
		if expr.pkg not in self.qualifiers:
			raise LoadError(f"undefined: {expr.pkg}", loc=expr.loc)
		pkg = self.qualifiers[expr.pkg]
		if pkg is None:
			if expr.name != "Pointer":
				raise LoadError(f"undefined: unsafe.{expr.name}", loc=expr.loc)
			return tn.Basic(tn.BasicKind.UNSAFE_POINTER, "unsafe.Pointer")
		if not tn.is_exported(expr.name):
			raise LoadError(f"name {expr.name} not exported by package {pkg.name}", loc=expr.loc)
		typ = pkg.types.get(expr.name)
		if typ is None:
			raise LoadError(f"undefined: {expr.pkg}.{expr.name}", loc=expr.loc)
		return typ

	def _signature(self, sig: ast.SignatureExpr, scope: tn.Scope) -> tn.Signature:
		params: List[tn.TypeNode] = []
		variadic = False
		for i, p in enumerate(sig.params):
			typ = self._type(p.type_expr, scope)
			if p.variadic:
				if i != len(sig.params) - 1:
					raise LoadError("can only use ... with final parameter in list")
				typ = tn.Slice(typ)
				variadic = True
			params.append(typ)
		results = []
		for r in sig.results:
			if r.variadic:
				raise LoadError("cannot use ... in result list")
			results.append(self._type(r.type_expr, scope))
		return tn.Signature(params=tuple(params), results=tuple(results), variadic=variadic)

	def _struct(self, expr: ast.StructType, scope: tn.Scope) -> tn.Struct:
		fields: List[tn.Field] = []
		seen: Dict[str, ast.Located] = {}
		for fd in expr.fields:
			typ = self._type(fd.type_expr, scope)
			for name in fd.names:
				if name != "_" and name in seen:
					raise LoadError(f"{name} redeclared", loc=fd.loc)
				seen[name] = fd.loc
				fields.append(tn.Field(name, typ, tag=fd.tag, embedded=fd.embedded, pkg_path=self.path))
		return tn.Struct(tuple(fields))

	def _interface(self, expr: ast.InterfaceType, scope: tn.Scope) -> tn.Interface:
		methods: List[tn.Func] = []
		for m in expr.methods:
			if any(x.name == m.name for x in methods):
				raise LoadError(f"duplicate method {m.name}", loc=m.loc)
			methods.append(tn.Func(m.name, self._signature(m.sig, scope), pkg_path=self.path))
		embedded = [self._type_name(e, scope) for e in expr.embedded]
		return tn.Interface(methods=tuple(methods), embedded=tuple(embedded))


__all__ = ["LoadError", "Package", "Var", "FuncObj", "load_package", "universe"]
