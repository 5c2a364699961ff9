"""Decorators that mark classes for discovery and describe how they are built.

The markers only stamp attributes onto the decorated object; nothing is registered
globally. Discovery and :func:`sprig.descriptors.describe` read the attributes back.
"""

import inspect
from typing import Any, Callable, Optional

__all__ = [
    "component",
    "service",
    "repository",
    "configuration",
    "constructor",
    "implements",
    "stereotype_of",
    "is_concrete",
    "is_concrete_component",
    "declared_capabilities",
    "is_constructor",
]

STEREOTYPE_ATTR = "__sprig_stereotype__"
CONSTRUCTOR_ATTR = "__sprig_constructor__"
CAPABILITIES_ATTR = "__sprig_capabilities__"


def _stereotype(kind: str) -> Callable[[type], type]:
    def decorator(cls: type) -> type:
        if not inspect.isclass(cls):
            raise TypeError(f"@{kind} can only decorate a class, not {cls!r}")
        setattr(cls, STEREOTYPE_ATTR, kind)
        return cls

    decorator.__name__ = kind
    decorator.__doc__ = f"Mark a class as a {kind} to be picked up by discovery."
    return decorator


component = _stereotype("component")
service = _stereotype("service")
repository = _stereotype("repository")
configuration = _stereotype("configuration")


def constructor(method: Any) -> Any:
    """Mark a classmethod as an additional way to construct the component.

    Works on either side of ``@classmethod``:

        >>> @component
        ... class Client:
        ...     def __init__(self, transport: Transport): ...
        ...
        ...     @classmethod
        ...     @constructor
        ...     def with_defaults(cls) -> "Client": ...
    """
    func = method.__func__ if isinstance(method, classmethod) else method
    setattr(func, CONSTRUCTOR_ATTR, True)
    return method


def implements(*capabilities: type) -> Callable[[type], type]:
    """Declare types the decorated class satisfies without inheriting from them.

    This is how a class advertises a ``typing.Protocol`` it conforms to structurally.
    """

    def decorator(cls: type) -> type:
        existing = cls.__dict__.get(CAPABILITIES_ATTR, ())
        setattr(cls, CAPABILITIES_ATTR, tuple(existing) + capabilities)
        return cls

    return decorator


def stereotype_of(cls: type) -> Optional[str]:
    """Return the stereotype placed directly on ``cls``; inherited markers do not count."""
    return cls.__dict__.get(STEREOTYPE_ATTR)


def declared_capabilities(cls: type) -> list[type]:
    """Collect ``@implements`` declarations from ``cls`` and its base classes."""
    return [
        capability
        for klass in cls.__mro__
        for capability in klass.__dict__.get(CAPABILITIES_ATTR, ())
    ]


def is_constructor(func: Callable) -> bool:
    return getattr(func, CONSTRUCTOR_ATTR, False)


def is_concrete(cls: Any) -> bool:
    return (
        inspect.isclass(cls)
        and not inspect.isabstract(cls)
        and not getattr(cls, "_is_protocol", False)
    )


def is_concrete_component(cls: Any) -> bool:
    return is_concrete(cls) and stereotype_of(cls) is not None
