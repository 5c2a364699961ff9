"""Exceptions raised while discovering, resolving and accessing components."""

__all__ = [
    "DependencyError",
    "UnresolvableGraphError",
    "AmbiguousDependencyError",
    "DuplicateBeanNameError",
    "DiscoveryError",
    "ConstructionFault",
    "ContextStateError",
    "ResolutionStateError",
]


def _type_name(t: type) -> str:
    return getattr(t, "__qualname__", str(t))


class DependencyError(Exception):
    """Raised when a component's dependency cannot be resolved or is misannotated."""

    pass


class UnresolvableGraphError(DependencyError):
    """Raised when a resolution pass makes no progress while components remain pending.

    The algorithm does not tell a cycle apart from a missing dependency: both leave
    the same components stuck, and ``remaining`` lists all of them in discovery order.
    """

    def __init__(self, remaining: list[type]):
        self.remaining = list(remaining)
        super().__init__(
            "Circular or unsatisfiable dependencies: "
            f"{[_type_name(t) for t in self.remaining]}"
        )


class AmbiguousDependencyError(DependencyError):
    """Raised when more than one component could satisfy an unqualified dependency."""

    def __init__(self, required_type: type, candidates: list[type], dependents: list[str]):
        self.required_type = required_type
        self.candidates = list(candidates)
        self.dependents = list(dependents)
        super().__init__(
            f"Dependencies {', '.join(self.dependents)} depend on type "
            f"{_type_name(required_type)}, but multiple components provide this type: "
            f"{[_type_name(c) for c in self.candidates]}"
        )


class DuplicateBeanNameError(DependencyError):
    """Raised when two components derive the same bean name."""

    def __init__(self, name: str, identities: list[type]):
        self.name = name
        self.identities = list(identities)
        super().__init__(
            f"Duplicate bean name '{name}' "
            f"for components {[_type_name(t) for t in self.identities]}"
        )


class DiscoveryError(DependencyError):
    """Raised when the base package cannot be scanned."""

    pass


class ConstructionFault(Exception):
    """Raised when a component's constructor fails. Always chained to the original error."""

    def __init__(self, identity: type):
        self.identity = identity
        super().__init__(f"Failed to construct component {_type_name(identity)}")


class ContextStateError(Exception):
    """Raised when an ApplicationContext is used outside the READY state."""

    pass


class ResolutionStateError(Exception):
    """Raised when a Resolver is asked to resolve more than once."""

    pass
