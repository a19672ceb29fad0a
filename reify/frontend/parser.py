# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-18
"""
Parser for the declaration front end.

The grammar lives in `grammar.lark` next to this file; lark builds the parse
tree and the `_build_*` functions below turn it into `reify.frontend.ast`
nodes. Syntax errors surface as lark's own `UnexpectedInput` exceptions.
"""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
	ArrayType,
	Block,
	ChanType,
	FieldDecl,
	FuncDecl,
	FuncType,
	ImportDecl,
	InterfaceMethod,
	InterfaceType,
	Located,
	MapType,
	Param,
	PointerType,
	Receiver,
	SignatureExpr,
	SliceType,
	SourceFile,
	StructType,
	TypeExpr,
	TypeName,
	TypeSpec,
	VarDecl,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_source(source: str) -> SourceFile:
	tree = _PARSER.parse(source)
	return _build_source(tree)


def _build_source(tree: Tree) -> SourceFile:
	pkg_clause = next(c for c in _trees(tree) if _name(c) == "package_clause")
	out = SourceFile(package=_tokens(pkg_clause, "NAME")[0].value)
	for child in _trees(tree):
		kind = _name(child)
		if kind == "import_decl":
			out.decls.append(_build_import(child))
		elif kind == "type_decl":
			out.decls.extend(_build_type_decl(child))
		elif kind == "var_decl":
			out.decls.append(_build_var_decl(child))
		elif kind == "func_decl":
			out.decls.append(_build_func_decl(child))
	return out


def _build_import(tree: Tree) -> ImportDecl:
	alias = _tokens(tree, "NAME")
	path = _decode_string_token(_tokens(tree, "STRING")[0])
	return ImportDecl(path=path, loc=_loc(tree), alias=alias[0].value if alias else None)


def _build_type_decl(tree: Tree) -> List[TypeSpec]:
	specs: List[TypeSpec] = []
	for spec in _trees(tree):
		name_tok = _tokens(spec, "NAME")[0]
		specs.append(
			TypeSpec(
				name=name_tok.value,
				type_expr=_build_type_expr(_trees(spec)[0]),
				loc=_loc_from_token(name_tok),
				alias=_name(spec) == "type_alias",
			)
		)
	return specs


def _build_var_decl(tree: Tree) -> VarDecl:
	name_tok = _tokens(tree, "NAME")[0]
	return VarDecl(name=name_tok.value, type_expr=_build_type_expr(_trees(tree)[0]), loc=_loc_from_token(name_tok))


def _build_func_decl(tree: Tree) -> FuncDecl:
	name_tok = _tokens(tree, "NAME")[0]
	recv_node = _child(tree, "receiver")
	body_node = _child(tree, "block")
	sig_node = next(c for c in _trees(tree) if _name(c) == "signature")
	return FuncDecl(
		name=name_tok.value,
		sig=_build_signature(sig_node),
		loc=_loc_from_token(name_tok),
		recv=_build_receiver(recv_node) if recv_node is not None else None,
		body=_build_block(body_node) if body_node is not None else None,
	)


def _build_receiver(tree: Tree) -> Receiver:
	# '(' [NAME] ['*'] NAME ')': the base type name is always last.
	names = _tokens(tree, "NAME")
	return Receiver(
		type_name=names[-1].value,
		loc=_loc(tree),
		name=names[0].value if len(names) > 1 else None,
		pointer=bool(_tokens(tree, "STAR")),
	)


def _build_block(tree: Tree) -> Block:
	block = Block()
	for child in _trees(tree):
		kind = _name(child)
		if kind == "type_decl":
			block.stmts.extend(_build_type_decl(child))
		elif kind == "var_decl":
			block.stmts.append(_build_var_decl(child))
		elif kind == "block":
			block.stmts.append(_build_block(child))
	return block


def _build_signature(tree: Tree) -> SignatureExpr:
	sig = SignatureExpr(params=_build_params(_trees(tree)[0]))
	result = _child(tree, "result")
	if result is not None:
		inner = _trees(result)[0]
		if _name(inner) == "parameters":
			sig.results = _build_params(inner)
		else:
			sig.results = [Param(name=None, type_expr=_build_type_expr(inner))]
	return sig


def _build_params(tree: Tree) -> List[Param]:
	params: List[Param] = []
	for p in _trees(tree):
		names = _tokens(p, "NAME")
		params.append(
			Param(
				name=names[0].value if names else None,
				type_expr=_build_type_expr(_trees(p)[0]),
				variadic=bool(_tokens(p, "ELLIPSIS")),
			)
		)
	return params


def _build_type_expr(tree: Tree) -> TypeExpr:
	kind = _name(tree)
	if kind == "type_name":
		return _build_type_name(tree)
	if kind == "pointer_type":
		return PointerType(elem=_build_type_expr(_trees(tree)[0]))
	if kind == "slice_type":
		return SliceType(elem=_build_type_expr(_trees(tree)[0]))
	if kind == "array_type":
		return ArrayType(length=int(_tokens(tree, "INT")[0].value), elem=_build_type_expr(_trees(tree)[0]))
	if kind == "map_type":
		key, elem = _trees(tree)
		return MapType(key=_build_type_expr(key), elem=_build_type_expr(elem))
	if kind in {"chan_both", "chan_send", "chan_recv"}:
		return ChanType(elem=_build_type_expr(_trees(tree)[0]), dir=kind[len("chan_") :])
	if kind == "func_type":
		return FuncType(sig=_build_signature(_trees(tree)[0]))
	if kind == "struct_type":
		return StructType(fields=[_build_field(f) for f in _trees(tree)])
	if kind == "interface_type":
		iface = InterfaceType()
		for elem in _trees(tree):
			if _name(elem) == "iface_method":
				name_tok = _tokens(elem, "NAME")[0]
				iface.methods.append(
					InterfaceMethod(name=name_tok.value, sig=_build_signature(_trees(elem)[0]), loc=_loc_from_token(name_tok))
				)
			else:
				iface.embedded.append(_build_type_name(elem))
		return iface
	raise ValueError(f"unexpected type node {kind}")


def _build_type_name(tree: Tree) -> TypeName:
	names = _tokens(tree, "NAME")
	if len(names) == 2:
		return TypeName(name=names[1].value, loc=_loc(tree), pkg=names[0].value)
	return TypeName(name=names[0].value, loc=_loc(tree))


def _build_field(tree: Tree) -> FieldDecl:
	tag_node = _child(tree, "tag")
	tag = _decode_tag(tag_node) if tag_node is not None else ""
	if _name(tree) == "embedded_field":
		tname = _build_type_name(_child(tree, "type_name"))  # type: ignore[arg-type]
		texpr: TypeExpr = PointerType(elem=tname) if _tokens(tree, "STAR") else tname
		return FieldDecl(names=[tname.name], type_expr=texpr, loc=_loc(tree), tag=tag, embedded=True)
	type_node = next(c for c in _trees(tree) if _name(c) != "tag")
	return FieldDecl(
		names=[t.value for t in _tokens(tree, "NAME")],
		type_expr=_build_type_expr(type_node),
		loc=_loc(tree),
		tag=tag,
	)


def _decode_tag(tree: Tree) -> str:
	(tok,) = [c for c in tree.children if isinstance(c, Token)]
	if tok.type == "RAW_STRING":
		return tok.value[1:-1]
	return _decode_string_token(tok)


def _decode_string_token(tok: Token) -> str:
	return codecs.decode(tok.value[1:-1], "unicode_escape")


# -- tree helpers -----------------------------------------------------------


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _tokens(tree: Tree, kind: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == kind]


def _child(tree: Tree, kind: str) -> Optional[Tree]:
	return next((c for c in _trees(tree) if _name(c) == kind), None)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["parse_source"]
