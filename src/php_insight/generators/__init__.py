"""Generators that write new files into the analyzed project."""

from .test_stubs import TestStubGenerator, render_test_class

__all__ = ["TestStubGenerator", "render_test_class"]
