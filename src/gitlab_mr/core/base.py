"""Base classes for configuration and state models.

This module holds the foundations shared by every gitlab-mr model:
- Closeable Protocol for resource cleanup
- BaseCloseable for automatic cleanup cascade
- BaseConfig for preference sections
- BaseState for per-workflow runtime sections

Kept apart from config.py so that log.py can import it without a
circular dependency.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

# ============================================================
# CLOSEABLE PROTOCOL AND BASE CLASS
# ============================================================

@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable children.

    Any model inheriting from BaseCloseable becomes a context manager
    and, on close(), walks its fields calling close() on every child
    that has one. A failing child does not stop the others.

    Cleanup cascade:
    State.__exit__() → Config.close() → Logger.close() → Sink.close()
    """

    def close(self):
        """Close all closeable child objects."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    msg = f"Warning: Error closing {field_name}: {e}"
                    print(msg, file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


# ============================================================
# BASE CLASSES (semantic markers for readers)
# ============================================================

class BaseConfig(BaseCloseable):
    """Base class for preference sections.

    Marks a model as configuration (loaded from YAML/env/CLI and
    read-only for the rest of the invocation).
    """
    pass


class BaseState(BaseCloseable):
    """Base class for runtime state sections.

    Marks a model as runtime state, written by workflow nodes while a
    graph runs and discarded when the invocation ends.
    """
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
