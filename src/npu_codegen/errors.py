"""Error taxonomy for lowering and compilation.

Every error raised while lowering a function is a `CodegenError`. Errors
detected at a particular IR node carry that node so the diagnostic can point
at it; the whole per-function compilation is abandoned on the first one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from npu_codegen.ir import Expr


class CodegenError(Exception):
    """Fatal, optionally node-attributed, lowering diagnostic."""

    def __init__(self, message: str, node: Expr | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.node = node

    def __str__(self) -> str:
        if self.node is None:
            return self.message
        return f"{self.message} (at {self.node!r})"


class UnsupportedOperatorError(CodegenError):
    """The operator has no registered translator."""


class InvalidAttributeError(CodegenError):
    """A translator rejected the call's arguments or attributes."""


class AcceleratorRejectedError(CodegenError):
    """The accelerator graph builder refused the requested configuration."""


class CompilationError(CodegenError):
    """The accelerator compiler produced no candidates."""


class ReconciliationError(CodegenError):
    """A compiled buffer refers to an operation never recorded during construction."""
