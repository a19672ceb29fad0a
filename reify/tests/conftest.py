# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: reify contributors; created: 2026-10-19
import pytest

from reify.registry import TypeRegistry


@pytest.fixture
def registry():
	"""A fresh registry session, closed after the test."""
	with TypeRegistry() as reg:
		yield reg
