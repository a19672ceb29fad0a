# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from reify.core.errors import (
	NamedTypeError,
	ReifyError,
	UnimplementedError,
	UnknownLengthError,
	UnknownTypeError,
	UntypedKindError,
	root_cause,
)


def test_errors_are_value_errors():
	assert issubclass(ReifyError, ValueError)
	for cls in (UntypedKindError, UnknownLengthError, UnknownTypeError, NamedTypeError, UnimplementedError):
		assert issubclass(cls, ReifyError)


def test_wrapped_messages_read_outermost_first():
	inner = UnknownLengthError()
	field = UnknownTypeError("struct field `x`", inner)
	named = NamedTypeError("T", field)
	assert str(named) == "named type `T` - unknown struct field `x` type - unknown array length"
	assert named.cause is field
	assert root_cause(named) is inner


def test_untyped_kind_message():
	err = UntypedKindError("untyped int")
	assert str(err) == "untyped type"
	assert err.kind == "untyped int"


def test_unimplemented_message():
	assert str(UnimplementedError("String", "main.Point")) == "method main.Point.String is not implemented"
	assert str(UnimplementedError("String")) == "method String is not implemented"
