"""
This library provides descriptors, the declared dependencies of an artifact, and the
cache that makes sure each one is loaded only once per resolution run.
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from transitive.models import Artifact, DescriptorUnavailable
from transitive.utils import verbose_out

DeclaredDependency = Tuple[Optional[str], Artifact]
DescriptorSource = Callable[[Artifact], 'Descriptor']


class Descriptor(object):
    """
    Instances of this class represent the parsed descriptor of an artifact.  Each
    declared dependency carries the scope it was declared in; ``None`` means it was
    declared with no scope at all.
    """
    def __init__(self, declarations: Iterable[DeclaredDependency] = ()):
        """
        A function to create instances of the ``Descriptor`` class.

        :param declarations: the sequence of scope and artifact pairs, in declaration
        order.
        """
        self._declarations: List[DeclaredDependency] = list(declarations)

    def declared_dependencies(self, scopes: Sequence[Optional[str]]) -> List[Artifact]:
        """
        A function that returns the dependencies declared in any of the given scopes.
        Declaration order is preserved.

        :param scopes: the scopes of interest.  Include ``None`` to get the dependencies
        that were declared without a scope.
        :return: the list of declared dependencies, which may be empty.
        """
        return [artifact for scope, artifact in self._declarations if scope in scopes]


def _cache_key(artifact: Artifact) -> Tuple[str, str, str]:
    """
    A function that produces the key under which an artifact's descriptor is cached.
    Classifier and type do not change which descriptor an artifact has.

    :param artifact: the artifact to produce a key for.
    :return: the artifact's cache key.
    """
    return artifact.group, artifact.name, artifact.version


class DescriptorCache(object):
    """
    Instances of this class memoize descriptors for the length of a resolution run.
    An instance is meant to be owned by a single run; separate runs should use
    separate caches.
    """
    def __init__(self, source: DescriptorSource):
        """
        A function to create instances of the ``DescriptorCache`` class.

        :param source: the function to use to load a descriptor that is not yet cached.
        """
        self._source = source
        self._descriptors: Dict[Tuple[str, str, str], Descriptor] = {}

    def load(self, artifact: Artifact) -> Descriptor:
        """
        A function that returns the descriptor for the given artifact, loading it if it
        has not been seen before.  Failures are not cached.

        :param artifact: the artifact whose descriptor is wanted.
        :return: the artifact's descriptor.
        :raises DescriptorUnavailable: if the descriptor could not be loaded.
        """
        key = _cache_key(artifact)

        if key not in self._descriptors:
            verbose_out(f'Loading descriptor for {artifact}...')

            descriptor = self._source(artifact)

            if descriptor is None:
                raise DescriptorUnavailable(f'No descriptor could be found for {artifact}.')

            self._descriptors[key] = descriptor

        return self._descriptors[key]

    def __len__(self):
        return len(self._descriptors)
