"""Capability index over a candidate set.

Before any component is built, the index checks that bean names are unique and that
every unqualified dependency type names at most one provider. Afterwards it answers
the resolver's question "which component, if any, may be injected here?", so the
outcome never depends on the order in which instances happen to be registered.
"""

import logging
from typing import Container, Iterable, Optional

from sprig.domain import ComponentDescriptor, Dependency
from sprig.errors import AmbiguousDependencyError, DuplicateBeanNameError
from sprig.settings import AmbiguityPolicy, ContextSettings, DuplicatePolicy

__all__ = ["ProviderIndex", "make_provider_index"]

logger = logging.getLogger(__name__)


class ProviderIndex:
    """Maps dependencies to the components allowed to satisfy them.

    Attributes:
        descriptors: The candidates in discovery order.
        descriptors_by_name: The component registered under each bean name. Under
            :attr:`DuplicatePolicy.OVERWRITE` the last colliding component wins.
    """

    def __init__(
        self,
        descriptors: list[ComponentDescriptor],
        descriptors_by_name: dict[str, ComponentDescriptor],
    ):
        self.descriptors = descriptors
        self.descriptors_by_name = descriptors_by_name

    def candidates_for(
        self, required_type: type, dependent: Optional[ComponentDescriptor] = None
    ) -> list[ComponentDescriptor]:
        """All components satisfying ``required_type``, in discovery order.

        A component is never a candidate for its own dependencies.
        """
        return [
            d for d in self.descriptors if d is not dependent and d.satisfies(required_type)
        ]

    def provider_for(
        self,
        dependent: ComponentDescriptor,
        dependency: Dependency,
        built: Optional[Container[type]] = None,
    ) -> Optional[ComponentDescriptor]:
        """Return the component to inject for ``dependency``, or None if nothing can satisfy it.

        When ``built`` is given only components already constructed are considered, and
        the first of them in discovery order is chosen.
        """
        if dependency.qualifier is not None:
            named = self.descriptors_by_name.get(dependency.qualifier)
            if named is None or named is dependent or not named.satisfies(dependency.declared_type):
                return None
            candidates = [named]
        else:
            candidates = self.candidates_for(dependency.declared_type, dependent)

        if built is not None:
            candidates = [c for c in candidates if c.identity in built]
        return candidates[0] if candidates else None


def make_provider_index(
    descriptors: Iterable[ComponentDescriptor], settings: ContextSettings
) -> ProviderIndex:
    """Validate a candidate set and index it for resolution.

    Validates that:
      - Each component derives a unique bean name (unless duplicates may overwrite).
      - No unqualified dependency type is satisfied by more than one component
        (unless the first discovered one may be chosen).

    Args:
        descriptors: The candidates, in discovery order.
        settings: The ambiguity and duplicate-name policies to apply.

    Returns:
        The :class:`ProviderIndex` for the candidates.

    Raises:
        DuplicateBeanNameError: If two components derive the same bean name.
        AmbiguousDependencyError: If a dependency type has several providers.
    """
    descriptors = list(descriptors)
    index = ProviderIndex(descriptors, _descriptors_by_unique_name(descriptors, settings))
    _check_ambiguity(index, settings)
    return index


def _descriptors_by_unique_name(
    descriptors: list[ComponentDescriptor], settings: ContextSettings
) -> dict[str, ComponentDescriptor]:
    descriptors_by_name: dict[str, ComponentDescriptor] = {}

    for descriptor in descriptors:
        existing = descriptors_by_name.get(descriptor.name)
        if existing is not None:
            if settings.duplicates is DuplicatePolicy.REJECT:
                raise DuplicateBeanNameError(
                    descriptor.name, [existing.identity, descriptor.identity]
                )
            logger.warning(
                "Bean name '%s' of %s overwrites %s", descriptor.name, descriptor, existing
            )
        descriptors_by_name[descriptor.name] = descriptor

    return descriptors_by_name


def _check_ambiguity(index: ProviderIndex, settings: ContextSettings) -> None:
    seen: set[tuple[type, Dependency]] = set()

    for dependent in index.descriptors:
        for signature in dependent.constructors:
            for dependency in signature.dependencies:
                key = (dependent.identity, dependency)
                if dependency.qualifier is not None or key in seen:
                    continue
                seen.add(key)

                candidates = index.candidates_for(dependency.declared_type, dependent)
                if len(candidates) <= 1:
                    continue
                if settings.ambiguity is AmbiguityPolicy.REJECT:
                    raise AmbiguousDependencyError(
                        dependency.declared_type,
                        [c.identity for c in candidates],
                        [f"{dependent.name}.{dependency.parameter_name}"],
                    )
                logger.warning(
                    "%s.%s: %d components provide %s, injecting the first one built, starting with %s",
                    dependent,
                    dependency.parameter_name,
                    len(candidates),
                    dependency.declared_type.__qualname__,
                    candidates[0],
                )
