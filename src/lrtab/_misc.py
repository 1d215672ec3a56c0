"""Typing shims for older interpreters, plus the sentinel for "argument not given"."""

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, TypeVar

__all__ = ("MISSING", "TypeAlias", "override")


_CallableT = TypeVar("_CallableT", bound=Callable[..., Any])

if sys.version_info >= (3, 12):  # pragma: >=3.12 cover
    from typing import override
elif TYPE_CHECKING:
    from typing_extensions import override
else:  # pragma: <3.12 cover

    def override(method: _CallableT) -> _CallableT:
        try:
            method.__override__ = True  # pyright: ignore[reportFunctionMemberAccess]
        except AttributeError:  # pragma: no cover
            pass
        return method


if sys.version_info >= (3, 10):  # pragma: >=3.10 cover
    from typing import TypeAlias
elif TYPE_CHECKING:
    from typing_extensions import TypeAlias
else:  # pragma: <3.10 cover

    class TypeAlias:
        """Stand-in so module-level ``Name: TypeAlias = ...`` annotations evaluate on 3.9."""


class _Missing:
    __slots__ = ()

    @override
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[Any] = _Missing()
"""Default for keyword arguments whose ``None`` is a meaningful value, e.g. ``TableGenerator(debugfile=None)``."""
