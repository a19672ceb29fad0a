# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-13
"""
Errors raised while materializing runtime types.

Conversion errors are fail-fast: the first failure deep inside a type is
wrapped once per enclosing position on the way out, so the message reads
outermost-first, e.g.

	named type `T` - unknown struct field `x` type - unknown array length

Each wrapper keeps the inner error in `cause` (and in `__cause__` via
`raise ... from`).
"""

from __future__ import annotations

from typing import Optional


class ReifyError(ValueError):
	"""Base class for materialization failures."""


class UntypedKindError(ReifyError):
	"""A basic kind with no runtime representation (untyped int, nil, ...)."""

	def __init__(self, kind: object) -> None:
		super().__init__("untyped type")
		self.kind = kind


class UnknownLengthError(ReifyError):
	"""Array length was not known when the type was converted."""

	def __init__(self, length: int = -1) -> None:
		super().__init__("unknown array length")
		self.length = length


class UnknownTypeError(ReifyError):
	"""A component of a composite type failed to convert."""

	def __init__(self, position: str, cause: Exception) -> None:
		super().__init__(f"unknown {position} type - {cause}")
		self.position = position
		self.cause = cause


class NamedTypeError(ReifyError):
	"""The underlying structure of a named type failed to convert."""

	def __init__(self, name: str, cause: Exception) -> None:
		super().__init__(f"named type `{name}` - {cause}")
		self.name = name
		self.cause = cause


class UnimplementedError(ReifyError):
	"""A method table entry was called but no implementation was attached."""

	def __init__(self, name: str, receiver: Optional[object] = None) -> None:
		if receiver is not None:
			msg = f"method {receiver}.{name} is not implemented"
		else:
			msg = f"method {name} is not implemented"
		super().__init__(msg)
		self.name = name
		self.receiver = receiver


class RegistryClosedError(ReifyError):
	"""The registry's session has been torn down."""


def root_cause(err: BaseException) -> BaseException:
	"""Follow `cause` links down to the innermost error."""
	while isinstance(getattr(err, "cause", None), BaseException):
		err = err.cause  # type: ignore[attr-defined]
	return err


__all__ = [
	"ReifyError",
	"UntypedKindError",
	"UnknownLengthError",
	"UnknownTypeError",
	"NamedTypeError",
	"UnimplementedError",
	"RegistryClosedError",
	"root_cause",
]
