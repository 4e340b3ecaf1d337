"""Copy documentation comments from C declarations into aliased Rust declarations."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
