from collections import Counter
from itertools import permutations
from typing import Annotated, Optional

import pytest

from sprig.builders import make_registry
from sprig.descriptors import CandidateSet, describe
from sprig.errors import (
    AmbiguousDependencyError,
    ConstructionFault,
    DependencyError,
    DuplicateBeanNameError,
    ResolutionStateError,
    UnresolvableGraphError,
)
from sprig.instantiator import DefaultInstantiator
from sprig.markers import constructor
from sprig.resolver import Resolver
from sprig.settings import AmbiguityPolicy, ContextSettings, DuplicatePolicy


class Repo:
    pass


class Svc:
    def __init__(self, repo: Repo):
        self.repo = repo


class Facade:
    def __init__(self, svc: Svc, repo: Repo):
        self.svc = svc
        self.repo = repo


class A:
    def __init__(self, b: "B"):
        self.b = b


class B:
    def __init__(self, a: A):
        self.a = a


class Missing:
    pass


class NeedsMissing:
    def __init__(self, missing: Missing):
        self.missing = missing


class Store:
    pass


class SqlStore(Store):
    pass


class FileStore(Store):
    pass


class Reporter:
    def __init__(self, store: Store):
        self.store = store


class RecordingInstantiator(DefaultInstantiator):
    def __init__(self):
        self.calls = []

    def instantiate(self, descriptor, signature, args):
        self.calls.append((descriptor.identity, signature))
        return super().instantiate(descriptor, signature, args)


def candidates_of(*classes) -> CandidateSet:
    return CandidateSet([describe(cls) for cls in classes])


@pytest.fixture
def instantiator() -> RecordingInstantiator:
    return RecordingInstantiator()


def test_linear_chain_is_resolved_and_shares_instances():
    resolver = Resolver(candidates_of(Facade, Svc, Repo))
    registry = resolver.resolve()

    assert registry.get("repo") is not None
    assert registry.get("svc") is not None
    assert registry.get("facade") is not None
    assert registry["facade"].svc is registry["svc"]
    assert registry["facade"].repo is registry["repo"]
    assert registry["svc"].repo is registry["repo"]
    assert len(resolver.passes) <= 3


def test_dependencies_built_earlier_in_a_pass_are_available_later_in_it():
    resolver = Resolver(candidates_of(Repo, Svc, Facade))
    resolver.resolve()

    assert [p.built for p in resolver.passes] == [("repo", "svc", "facade")]


@pytest.mark.parametrize("order", list(permutations([Repo, Svc, Facade])))
def test_outcome_is_independent_of_discovery_order(order):
    resolver = Resolver(candidates_of(*order))
    registry = resolver.resolve()

    assert set(registry) == {"repo", "svc", "facade"}
    assert registry["facade"].svc.repo is registry["repo"]
    assert len(resolver.passes) <= 3


def test_each_pass_strictly_shrinks_the_pending_set():
    resolver = Resolver(candidates_of(Facade, Svc, Repo))
    resolver.resolve()

    pending = [len(candidates_of(Facade, Svc, Repo))] + [p.pending for p in resolver.passes]
    assert all(after < before for before, after in zip(pending, pending[1:]))
    assert [p.number for p in resolver.passes] == [1, 2, 3]
    assert resolver.passes[-1].pending == 0


def test_cycle_is_reported_with_exactly_its_members():
    with pytest.raises(UnresolvableGraphError) as e:
        make_registry(candidates_of(Repo, A, B))

    assert e.value.remaining == [A, B]
    assert "Circular or unsatisfiable dependencies" in str(e.value)


def test_missing_dependency_is_reported():
    with pytest.raises(UnresolvableGraphError) as e:
        make_registry(candidates_of(NeedsMissing, Repo))

    assert e.value.remaining == [NeedsMissing]


def test_components_blocked_behind_a_missing_dependency_are_reported_too():
    class Downstream:
        def __init__(self, upstream: NeedsMissing):
            self.upstream = upstream

    with pytest.raises(UnresolvableGraphError) as e:
        make_registry(candidates_of(Downstream, NeedsMissing))

    assert set(e.value.remaining) == {Downstream, NeedsMissing}


def test_unresolvable_graph_is_a_dependency_error():
    with pytest.raises(DependencyError):
        make_registry(candidates_of(A, B))


def test_most_specific_satisfiable_constructor_is_used(instantiator):
    class Wide:
        def __init__(self):
            self.repo = None
            self.svc = None

        @classmethod
        @constructor
        def wired(cls, repo: Repo, svc: Svc):
            wide = cls()
            wide.repo = repo
            wide.svc = svc
            return wide

    registry = make_registry(candidates_of(Repo, Svc, Wide), instantiator)

    assert registry["wide"].svc is registry["svc"]
    assert registry["wide"].repo is registry["repo"]
    wide_calls = [signature for identity, signature in instantiator.calls if identity is Wide]
    assert [(s.factory_name, s.arity) for s in wide_calls] == [("wired", 2)]


def test_defaulted_parameters_are_injected_when_available():
    class Lenient:
        def __init__(self, repo: Optional[Repo] = None, svc: Optional[Svc] = None):
            self.repo = repo
            self.svc = svc

    registry = make_registry(candidates_of(Repo, Svc, Lenient))

    assert registry["lenient"].repo is registry["repo"]
    assert registry["lenient"].svc is registry["svc"]


def test_fewer_parameters_are_used_when_a_dependency_cannot_exist():
    class Tolerant:
        def __init__(self, repo: Repo, missing: Optional[Missing] = None):
            self.repo = repo
            self.missing = missing

    registry = make_registry(candidates_of(Tolerant, Repo))

    assert registry["tolerant"].repo is registry["repo"]
    assert registry["tolerant"].missing is None


def test_no_component_is_built_more_than_once(instantiator):
    make_registry(candidates_of(Facade, Svc, Repo), instantiator)

    counts = Counter(identity for identity, _ in instantiator.calls)
    assert counts == {Repo: 1, Svc: 1, Facade: 1}


def test_construction_fault_aborts_resolution_immediately(instantiator):
    class Exploding:
        def __init__(self):
            raise RuntimeError("boom")

    with pytest.raises(ConstructionFault) as e:
        make_registry(candidates_of(Exploding, Repo), instantiator)

    assert e.value.identity is Exploding
    assert isinstance(e.value.__cause__, RuntimeError)
    assert [identity for identity, _ in instantiator.calls] == [Exploding]


def test_dependency_errors_raised_by_constructors_are_construction_faults():
    class Picky:
        def __init__(self, repo: Repo):
            raise DependencyError("not this repo")

    with pytest.raises(ConstructionFault, match="Failed to construct component"):
        make_registry(candidates_of(Repo, Picky))


def test_ambiguous_dependency_is_rejected_by_default():
    with pytest.raises(AmbiguousDependencyError) as e:
        make_registry(candidates_of(SqlStore, FileStore, Reporter))

    assert e.value.required_type is Store
    assert e.value.candidates == [SqlStore, FileStore]
    assert "reporter.store" in str(e.value)


@pytest.mark.parametrize(
    "order, expected",
    [
        ((SqlStore, FileStore, Reporter), SqlStore),
        ((Reporter, FileStore, SqlStore), FileStore),
    ],
)
def test_first_discovered_policy_injects_first_candidate(order, expected):
    settings = ContextSettings(ambiguity=AmbiguityPolicy.FIRST_DISCOVERED)

    registry = make_registry(candidates_of(*order), settings=settings)

    assert type(registry["reporter"].store) is expected


def test_qualifier_selects_among_several_providers():
    class QualifiedReporter:
        def __init__(self, store: Annotated[Store, "fileStore"]):
            self.store = store

    registry = make_registry(candidates_of(SqlStore, FileStore, QualifiedReporter))

    assert registry["qualifiedReporter"].store is registry["fileStore"]


def test_qualifier_naming_no_component_leaves_dependent_unresolved():
    class Lost:
        def __init__(self, store: Annotated[Store, "mongoStore"]):
            self.store = store

    with pytest.raises(UnresolvableGraphError) as e:
        make_registry(candidates_of(SqlStore, Lost))

    assert e.value.remaining == [Lost]


def test_component_is_never_injected_into_itself():
    class CachingStore(Store):
        def __init__(self, inner: Store):
            self.inner = inner

    registry = make_registry(candidates_of(CachingStore, SqlStore))

    assert registry["cachingStore"].inner is registry["sqlStore"]


def test_keyword_only_dependencies_are_injected():
    class KeywordOnly:
        def __init__(self, *, repo: Repo):
            self.repo = repo

    registry = make_registry(candidates_of(KeywordOnly, Repo))

    assert registry["keywordOnly"].repo is registry["repo"]


def test_duplicate_bean_names_are_rejected_by_default():
    class repo:  # noqa: N801
        pass

    with pytest.raises(DuplicateBeanNameError, match="Duplicate bean name 'repo'"):
        make_registry(candidates_of(Repo, repo))


def test_overwrite_policy_keeps_the_later_component():
    class repo:  # noqa: N801
        pass

    settings = ContextSettings(duplicates=DuplicatePolicy.OVERWRITE)
    registry = make_registry(candidates_of(Repo, repo), settings=settings)

    assert list(registry) == ["repo"]
    assert type(registry["repo"]) is repo


def test_empty_candidate_set_resolves_to_empty_registry():
    resolver = Resolver(CandidateSet())

    assert len(resolver.resolve()) == 0
    assert resolver.passes == []


def test_resolver_can_only_resolve_once():
    resolver = Resolver(candidates_of(Repo))
    resolver.resolve()

    with pytest.raises(ResolutionStateError):
        resolver.resolve()


def test_first_discovered_policy_falls_back_to_a_built_candidate():
    class StuckStore(Store):
        def __init__(self, missing: Missing):
            self.missing = missing

    settings = ContextSettings(ambiguity=AmbiguityPolicy.FIRST_DISCOVERED)

    with pytest.raises(UnresolvableGraphError) as e:
        make_registry(candidates_of(StuckStore, FileStore, Reporter), settings=settings)

    assert e.value.remaining == [StuckStore]


def test_keyword_only_dependency_after_defaulted_parameter_is_injected():
    class Retrying:
        def __init__(self, retries: int = 3, *, repo: Repo):
            self.retries = retries
            self.repo = repo

    registry = make_registry(candidates_of(Repo, Retrying))

    assert registry["retrying"].repo is registry["repo"]
    assert registry["retrying"].retries == 3
