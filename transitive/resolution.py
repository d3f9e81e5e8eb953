"""
This library provides the resolution of a project's dependency lists into their full
transitive closures.
"""
import time
from typing import Dict, List, Optional, Sequence

from transitive.cache import DependencyCaching, ResolvedSets, cache_sections
from transitive.conflicts import get_conflict_policy, resolve_conflicts
from transitive.descriptors import DescriptorCache, DescriptorSource
from transitive.graph import GraphExpander
from transitive.models import Artifact, split_entries
from transitive.pom import RepositoryDescriptorSource
from transitive.utils import global_options, verbose_out

# The descriptor scopes followed on each hop when resolving a project scope.
scope_transitions = {
    'compile': (None, 'compile'),
    'run': (None, 'compile', 'runtime'),
    'test': (None, 'compile', 'runtime')
}
# The dependency lists that receive the resolution of each project scope.
scope_targets = {
    'compile': ('compile',),
    'run': ('run',),
    'test': ('test', 'test_compile')
}
_scope_sections = {list_name: section for section, list_name in cache_sections.items()}


class ScopeOrchestrator(object):
    """
    Instances of this class resolve the scopes of a single project.  Each instance
    represents one resolution run and owns the descriptor cache for that run.
    """
    def __init__(self, project, descriptor_source: DescriptorSource):
        """
        A function to create instances of the ``ScopeOrchestrator`` class.

        :param project: the project whose scopes are to be resolved.
        :param descriptor_source: the function to use to load artifact descriptors.
        """
        self._project = project
        self._descriptors = DescriptorCache(descriptor_source)
        self._expander = GraphExpander(self._descriptors, project.artifact)
        self._policy = get_conflict_policy(project.transitive.conflicts)

    @property
    def descriptors(self) -> DescriptorCache:
        return self._descriptors

    def resolve_scope(self, scope: str) -> List[Artifact]:
        """
        A function that computes the resolved artifacts for one of the project's scopes.
        The project itself is not changed.

        :param scope: the scope to resolve; one of ``compile``, ``run`` or ``test``.
        :return: the resolved list of artifacts, one per logical artifact.
        :raises DescriptorUnavailable: if a needed descriptor cannot be loaded.
        :raises ConflictResolutionError: if a version conflict cannot be settled.
        :raises CyclicDependencyError: if a dependency depends on itself.
        """
        artifacts, _ = split_entries(self._project.get_dependencies(scope))
        flat = self._expander.expand(artifacts, scope_transitions[scope])

        verbose_out(f'Found {len(flat)} artifact(s) while expanding the {scope} dependencies.')

        return resolve_conflicts(flat, self._policy, bind=self._project.artifact,
                                 warn_on_conflict=self._project.transitive.warn)

    def resolve(self, scopes: Sequence[str]) -> Dict[str, List[Artifact]]:
        """
        A function that computes the resolved artifacts for each of the given scopes.
        Everything is computed before anything is returned, so a failure in any scope
        leaves no partial result behind.

        :param scopes: the scopes to resolve.
        :return: a dictionary of scope name to its resolved artifacts.
        """
        return {scope: self.resolve_scope(scope) for scope in scopes}

    def resolve_compile(self) -> List[Artifact]:
        return self.resolve_scope('compile')

    def resolve_run(self) -> List[Artifact]:
        return self.resolve_scope('run')

    def resolve_test(self) -> List[Artifact]:
        return self.resolve_scope('test')


def apply_resolution(project, resolved: Dict[str, List[Artifact]]):
    """
    A function that replaces the artifact portion of the project's dependency lists
    with resolved artifacts.  File dependencies already in each list are kept, in
    order, after the artifacts.

    :param project: the project to update.
    :param resolved: a dictionary of scope name to its resolved artifacts.
    """
    for scope, artifacts in resolved.items():
        for list_name in scope_targets[scope]:
            _, others = split_entries(project.get_dependencies(list_name))
            project.set_dependencies(list_name, list(artifacts) + others)


def _from_cache(cached: ResolvedSets, scopes: Sequence[str]) -> Dict[str, List[Artifact]]:
    return {scope: cached[_scope_sections[scope]] for scope in scopes}


def add_transitive_dependencies(project, descriptor_source: Optional[DescriptorSource] = None):
    """
    A function that replaces each of a project's configured scopes with its transitive
    closure.  When caching is turned on and a usable resolution cache exists, it is used
    and no descriptors are read at all.  Otherwise, the scopes are resolved and the cache
    is rewritten.

    :param project: the project to add transitive dependencies to.
    :param descriptor_source: the function to use to load artifact descriptors.  If not
    given, descriptors are read from the project's configured repository.
    """
    scopes = project.transitive_scopes

    if not scopes:
        return

    start = time.time()
    caching = DependencyCaching(project)
    cached = caching.read_cache() if project.cache_dependencies and not global_options.ignore_cache() else None

    if cached is None:
        if descriptor_source is None:
            descriptor_source = RepositoryDescriptorSource(project.repository.local, project.repository.remote)

        orchestrator = ScopeOrchestrator(project, descriptor_source)

        apply_resolution(project, orchestrator.resolve(scopes))

        verbose_out(f'Read {len(orchestrator.descriptors)} descriptor(s).')

        caching.write_cache()
    else:
        verbose_out(f'Using cached dependencies from {project.cache_path}.')
        apply_resolution(project, _from_cache(cached, scopes))

    verbose_out(f'Adding transitive dependencies took {time.time() - start:.3f} seconds')
