from .parser import RubySyntaxError, parse
from .unparser import unparse

__all__ = ["RubySyntaxError", "parse", "unparse"]
