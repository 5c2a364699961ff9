"""Fixed-point resolution of a candidate set into constructed components.

The resolver makes repeated passes over the components still pending. In each pass it
tries every pending component's constructors, from most to fewest parameters, and
builds a component as soon as one constructor's dependencies have all been built.
A pass that builds nothing while components remain pending ends resolution with an
:class:`~sprig.errors.UnresolvableGraphError`: the remaining components are either
part of a cycle or depend on something no candidate provides. Since every other pass
shrinks the pending set, resolution takes at most one pass per candidate plus one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sprig.bean_registry import BeanRegistry
from sprig.domain import Bean, ComponentDescriptor, ConstructorSignature
from sprig.errors import ConstructionFault, ResolutionStateError, UnresolvableGraphError
from sprig.instantiator import DefaultInstantiator, Instantiator
from sprig.provider_index import ProviderIndex, make_provider_index
from sprig.settings import ContextSettings

__all__ = ["PassReport", "Resolver"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassReport:
    """Outcome of one pass over the pending components.

    Attributes:
        number: 1-based pass number.
        built: Bean names constructed during the pass, in order.
        pending: How many components were still pending after the pass.
    """

    number: int
    built: tuple[str, ...]
    pending: int


class Resolver:
    """Builds every candidate exactly once, injecting constructor dependencies by type.

    A resolver is single-use: it owns the state of one resolution, and the registry it
    returns is the only result. If resolution fails no registry is produced.

    Attributes:
        passes: One :class:`PassReport` per completed pass.
    """

    def __init__(
        self,
        candidates: Iterable[ComponentDescriptor],
        instantiator: Optional[Instantiator] = None,
        settings: Optional[ContextSettings] = None,
    ):
        self._candidates = list(candidates)
        self._instantiator = instantiator or DefaultInstantiator()
        self._settings = settings or ContextSettings()
        self._started = False
        self.passes: list[PassReport] = []

    def resolve(self) -> BeanRegistry:
        """Construct all candidates and return the frozen registry.

        Returns:
            A :class:`BeanRegistry` holding one instance per bean name.

        Raises:
            DuplicateBeanNameError: If two candidates derive the same bean name.
            AmbiguousDependencyError: If a dependency type has several providers.
            UnresolvableGraphError: If a pass makes no progress; lists every
                component left unconstructed.
            ConstructionFault: If a constructor raises. Resolution stops at once.
            ResolutionStateError: If this resolver has already been used.
        """
        if self._started:
            raise ResolutionStateError("A Resolver can only resolve once")
        self._started = True

        index = make_provider_index(self._candidates, self._settings)
        pending = list(index.descriptors)
        built: dict[type, Bean] = {}

        while pending:
            built_this_pass = []
            still_pending = []

            for descriptor in pending:
                bean = self._try_build(descriptor, index, built)
                if bean is None:
                    still_pending.append(descriptor)
                else:
                    built[descriptor.identity] = bean
                    built_this_pass.append(bean.name)

            pending = still_pending
            report = PassReport(len(self.passes) + 1, tuple(built_this_pass), len(pending))
            self.passes.append(report)
            logger.debug(
                "Pass %d built %s, %d pending", report.number, list(report.built), report.pending
            )

            if not built_this_pass:
                raise UnresolvableGraphError([d.identity for d in pending])

        logger.info("Resolved %d components in %d passes", len(built), len(self.passes))
        return BeanRegistry(_registry_entries(index, built))

    def _try_build(
        self,
        descriptor: ComponentDescriptor,
        index: ProviderIndex,
        built: dict[type, Bean],
    ) -> Optional[Bean]:
        """Build ``descriptor`` with its most specific satisfiable constructor, if any."""
        for signature in descriptor.constructors:
            args = _satisfy(descriptor, signature, index, built)
            if args is None:
                continue

            try:
                instance = self._instantiator.instantiate(descriptor, signature, args)
            except Exception as e:
                raise ConstructionFault(descriptor.identity) from e

            logger.debug("Built %s with %d dependencies", descriptor, signature.arity)
            return Bean(descriptor.name, descriptor, instance)

        return None


def _satisfy(
    descriptor: ComponentDescriptor,
    signature: ConstructorSignature,
    index: ProviderIndex,
    built: dict[type, Bean],
) -> Optional[list[Any]]:
    args = []
    for dependency in signature.dependencies:
        provider = index.provider_for(descriptor, dependency, built)
        if provider is None:
            return None
        args.append(built[provider.identity].instance)
    return args


def _registry_entries(index: ProviderIndex, built: dict[type, Bean]) -> dict[str, Bean]:
    # with overwriting allowed, the index decides which colliding bean keeps the name
    return {
        bean.name: bean
        for bean in built.values()
        if index.descriptors_by_name[bean.name] is bean.descriptor
    }
