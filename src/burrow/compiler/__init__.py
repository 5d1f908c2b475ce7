"""Compiler layer: document compilers and layout composition.

Turns a document route into text by running its source file and each
of its layouts through the compiler registered for their extension.
"""

from burrow.compiler.compiler import Compiler, DocumentCompilers, normalize_extension
from burrow.compiler.target import CompileTarget

__all__ = ["CompileTarget", "Compiler", "DocumentCompilers", "normalize_extension"]
