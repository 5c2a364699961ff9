"""The read-only registry of constructed components.

A :class:`BeanRegistry` is only ever created from a completed resolution. It maps bean
names to instances in construction order and offers no way to add, replace or remove
an entry, so it can be shared between threads without locking.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator, Optional

from sprig.domain import Bean

__all__ = ["BeanRegistry"]


class BeanRegistry(Mapping):
    """Immutable mapping from bean name to component instance.

    Lookups perform no type checking: a miss returns None from :meth:`get`, and a hit
    of an unexpected type is the caller's concern.

    Example:
        >>> registry.get("userService")
        <UserService ...>
        >>> registry.get("nothingHere") is None
        True
    """

    def __init__(self, beans: dict[str, Bean]):
        self._beans = MappingProxyType(dict(beans))

    def get(self, name: str, default: Any = None) -> Any:
        bean = self._beans.get(name)
        return default if bean is None else bean.instance

    def bean(self, name: str) -> Optional[Bean]:
        """Return the :class:`Bean` record for ``name``, including its descriptor."""
        return self._beans.get(name)

    def beans_of_type(self, required_type: type) -> list[Any]:
        """Instances whose component satisfies ``required_type``, in construction order."""
        return [
            bean.instance
            for bean in self._beans.values()
            if bean.descriptor.satisfies(required_type)
        ]

    def names(self) -> list[str]:
        return list(self._beans)

    def __getitem__(self, name: str) -> Any:
        return self._beans[name].instance

    def __iter__(self) -> Iterator[str]:
        return iter(self._beans)

    def __len__(self) -> int:
        return len(self._beans)

    def __repr__(self) -> str:
        return f"BeanRegistry({self.names()})"
