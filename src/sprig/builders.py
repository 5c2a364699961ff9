"""High level entry points for resolving components."""

from typing import Iterable, Optional

from sprig.bean_registry import BeanRegistry
from sprig.context import ApplicationContext
from sprig.domain import ComponentDescriptor
from sprig.instantiator import Instantiator
from sprig.resolver import Resolver
from sprig.settings import ContextSettings

__all__ = ["make_registry", "make_context"]


def make_registry(
    candidates: Iterable[ComponentDescriptor],
    instantiator: Optional[Instantiator] = None,
    settings: Optional[ContextSettings] = None,
) -> BeanRegistry:
    """Resolve a set of candidates directly, without discovery.

    Args:
        candidates: Descriptors in discovery order, e.g. a :class:`~sprig.descriptors.CandidateSet`.
        instantiator: Optional instantiator; defaults to calling each class.
        settings: Optional resolution policies; defaults to rejecting ambiguity
            and duplicate bean names.

    Returns:
        The frozen :class:`BeanRegistry`.

    Raises:
        DependencyError: If the graph is ambiguous, has duplicate names, or cannot
            be resolved.
        ConstructionFault: If a constructor raises.

    Example:
        >>> candidates = CandidateSet()
        >>> candidates.add(Repo)
        >>> candidates.add(Service)
        >>> make_registry(candidates)["service"]
    """
    return Resolver(candidates, instantiator, settings).resolve()


def make_context(
    base_package: str,
    instantiator: Optional[Instantiator] = None,
    settings: Optional[ContextSettings] = None,
) -> ApplicationContext:
    """Create and initialise an :class:`ApplicationContext` for ``base_package``."""
    context = ApplicationContext(base_package, instantiator=instantiator, settings=settings)
    context.init()
    return context
