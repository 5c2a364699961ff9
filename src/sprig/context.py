"""The application context: discovery, resolution and lookup behind one object.

An :class:`ApplicationContext` is created for a base package, initialised once, and
then only read. Initialisation either produces a complete registry or leaves the
context failed; there is no partially initialised state a caller can observe.
"""

import enum
import logging
from typing import Any, Callable, Iterable, Optional, Union

from sprig.bean_registry import BeanRegistry
from sprig.discovery import scan
from sprig.domain import ComponentDescriptor
from sprig.errors import ContextStateError
from sprig.instantiator import Instantiator
from sprig.resolver import Resolver
from sprig.settings import ContextSettings

__all__ = ["ApplicationContext", "ContextState", "BeanKey"]

logger = logging.getLogger(__name__)


BeanKey = Union[str, type]
"""Type alias for keys used to look up components in a context.

Components can be retrieved by bean name or by a type that exactly one of them
satisfies.

Example:
    >>> context["userService"]   # Lookup by name
    >>> context[UserService]     # Lookup by type
"""


class ContextState(enum.Enum):
    NEW = "new"
    READY = "ready"
    FAILED = "failed"


class ApplicationContext:
    """Discovers the components of a package and holds their singletons.

    Args:
        base_package: Dotted name of the package to scan.
        discover: Produces the candidates for a package; defaults to :func:`sprig.discovery.scan`.
        instantiator: Builds instances; defaults to calling the class.
        settings: Resolution policies; defaults to :meth:`ContextSettings.from_env`.

    Example:
        >>> context = ApplicationContext("myapp")
        >>> context.init()
        >>> context.get("orderService")
    """

    def __init__(
        self,
        base_package: str,
        *,
        discover: Callable[[str], Iterable[ComponentDescriptor]] = scan,
        instantiator: Optional[Instantiator] = None,
        settings: Optional[ContextSettings] = None,
    ):
        self.base_package = base_package
        self._discover = discover
        self._instantiator = instantiator
        self._settings = settings
        self._registry: Optional[BeanRegistry] = None
        self.state = ContextState.NEW

    def init(self) -> None:
        """Discover and construct every component.

        Raises:
            ContextStateError: If the context has already been initialised.
            DependencyError: If discovery fails or the dependency graph cannot be
                resolved; the context is unusable afterwards.
            ConstructionFault: If a component's constructor raises; the context is
                unusable afterwards.
        """
        if self.state is not ContextState.NEW:
            raise ContextStateError(
                f"Context for '{self.base_package}' is {self.state.value} and cannot be initialised again"
            )

        try:
            settings = self._settings or ContextSettings.from_env()
            candidates = self._discover(self.base_package)
            resolver = Resolver(candidates, self._instantiator, settings)
            registry = resolver.resolve()
        except Exception:
            self.state = ContextState.FAILED
            logger.error("Context for '%s' failed to initialise", self.base_package)
            raise

        self._registry = registry
        self.state = ContextState.READY

    @property
    def registry(self) -> BeanRegistry:
        """The frozen registry. Only available once the context is ready."""
        if self.state is not ContextState.READY:
            raise ContextStateError(
                f"Context for '{self.base_package}' is {self.state.value}, not ready"
            )
        return self._registry

    def get(self, name: str) -> Any:
        """Return the component registered as ``name``, or None if there is none."""
        return self.registry.get(name)

    def names(self) -> list[str]:
        return self.registry.names()

    def __getitem__(self, key: BeanKey) -> Any:
        if not isinstance(key, type):
            return self.registry[key]
        matches = self.registry.beans_of_type(key)
        if len(matches) != 1:
            raise KeyError(
                f"Expected exactly one bean of type {key.__qualname__}, found {len(matches)}"
            )
        return matches[0]

    def __contains__(self, name: str) -> bool:
        return name in self.registry
