# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-12
"""
reify.core: checker-side type graph and the error hierarchy shared by all stages.

Modules:
  - type_nodes: TypeNode variants, Scope, Func
  - errors: materialization errors (ReifyError and friends)
"""

__all__ = [
	"type_nodes",
	"errors",
]
