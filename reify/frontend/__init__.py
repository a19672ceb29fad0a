# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-19
"""
reify.frontend: a small Go-like declaration front end.

Parses package source (type, var and func declarations) with lark and loads
it into the checker-side type graph of `reify.core.type_nodes`, with the
lexical scopes and forward references a real checker would produce.
"""

from .loader import FuncObj, LoadError, Package, Var, load_package, universe
from .parser import parse_source

__all__ = ["FuncObj", "LoadError", "Package", "Var", "load_package", "parse_source", "universe"]
