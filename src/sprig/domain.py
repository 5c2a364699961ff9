"""Domain models used throughout the framework."""

from dataclasses import dataclass, field
from typing import Any, Optional

__all__ = [
    "Dependency",
    "ConstructorSignature",
    "ComponentDescriptor",
    "Bean",
    "bean_name",
]


def bean_name(simple_name: str) -> str:
    """Derive a bean name from a class's simple name.

    Only the first character is lower-cased; no other normalisation is applied,
    so ``URLParser`` becomes ``uRLParser`` and ``Repo``/``repo`` collide.

    Example:
        >>> bean_name("UserService")
        'userService'
    """
    if not simple_name:
        return simple_name
    return simple_name[0].lower() + simple_name[1:]


@dataclass(frozen=True)
class Dependency:
    """Represents a dependency required by a constructor.

    Attributes:
        parameter_name: The parameter name in the constructor's signature.
        declared_type: The type a component must satisfy to be injected.
        qualifier: Optional bean name, taken from ``Annotated[T, "name"]``, which
            restricts injection to the component with that name.
        keyword_only: Whether the parameter must be passed by keyword.
    """

    parameter_name: str
    declared_type: type
    qualifier: Optional[str] = None
    keyword_only: bool = False


@dataclass(frozen=True)
class ConstructorSignature:
    """One way of constructing a component.

    Attributes:
        dependencies: The constructor's parameters, in declaration order.
        factory_name: Name of a classmethod acting as the constructor, or None
            when the class itself is called.
    """

    dependencies: tuple[Dependency, ...]
    factory_name: Optional[str] = None

    @property
    def parameter_types(self) -> tuple[type, ...]:
        return tuple(d.declared_type for d in self.dependencies)

    @property
    def arity(self) -> int:
        return len(self.dependencies)


@dataclass(frozen=True)
class ComponentDescriptor:
    """Immutable metadata describing a class eligible for automatic construction.

    Attributes:
        identity: The concrete class.
        constructors: Signatures ordered from most to fewest parameters.
        capabilities: Every type an instance of ``identity`` satisfies.
    """

    identity: type
    constructors: tuple[ConstructorSignature, ...]
    capabilities: frozenset = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        return bean_name(self.identity.__name__)

    def satisfies(self, required_type: type) -> bool:
        return required_type in self.capabilities

    def __str__(self) -> str:
        return self.identity.__qualname__


@dataclass(frozen=True)
class Bean:
    """A constructed singleton and the descriptor it was built from."""

    name: str
    descriptor: ComponentDescriptor
    instance: Any
