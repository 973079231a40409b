"""Ok/Err result type.

Release steps return ``Ok(value)`` or ``Err(error)`` instead of raising, so
the CLI layer is the only place where failures become exit codes:

    loaded = load_root_manifest(root)
    if isinstance(loaded, Err):
        return loaded
    manifest = loaded.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Never, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def unwrap(self) -> Never:
        raise ValueError(f"called unwrap on Err: {self.error!r}")


Result: TypeAlias = Ok[T] | Err[E]
