"""
This library provides the expansion of declared dependencies into the full, flat list
of everything they transitively depend on.
"""
from typing import Callable, List, Optional, Sequence

from transitive.descriptors import DescriptorCache
from transitive.models import Artifact, CyclicDependencyError
from transitive.utils import verbose_out

ArtifactBinder = Callable[[Artifact], Artifact]

_tree_leader = '└── '
_tree_spacer = ' ' * len(_tree_leader)


def is_excluded(excluding_dependency: Artifact, candidate: Artifact) -> bool:
    """
    A function that determines whether a candidate transitive artifact should be
    suppressed because of the exclusions carried by the dependency that declares it.
    Only group and name are considered; versions never matter.

    :param excluding_dependency: the dependency whose exclusions apply.
    :param candidate: the transitive artifact to test.
    :return: ``True`` if the candidate should not be expanded or ``False`` if it should.
    """
    return excluding_dependency.excludes(candidate)


def _format_path(path: Sequence[Artifact]) -> str:
    """
    A function that produces a dump of a dependency path as an indented tree, one
    artifact per line.

    :param path: the path of artifacts, starting with a declared dependency.
    :return: a multi-line string showing the path.
    """
    lines = [repr(artifact) for artifact in path]

    for index in range(1, len(lines)):
        lines[index] = _tree_spacer * (index - 1) + _tree_leader + lines[index]

    return '\n'.join(lines)


def _inherit_exclusions(parent: Artifact, child: Artifact) -> Artifact:
    """
    A function that makes sure the given child carries all the exclusions of its
    parent, so that an exclusion applies to the whole branch beneath the dependency
    that declared it.

    :param parent: the dependency being expanded.
    :param child: one of the parent's declared dependencies.
    :return: the child, carrying any extra exclusions it needs.
    """
    extra = [exclusion for exclusion in parent.exclusions if exclusion not in child.exclusions]

    return child.with_exclusions(child.exclusions + tuple(extra)) if extra else child


class GraphExpander(object):
    """
    Instances of this class walk the dependency graph beneath a set of declared
    dependencies.  Nothing is de-duplicated here; an artifact reachable along several
    paths appears once per path, each time with the depth at which that path found it.
    """
    def __init__(self, descriptors: DescriptorCache, bind: Optional[ArtifactBinder] = None):
        """
        A function to create instances of the ``GraphExpander`` class.

        :param descriptors: the descriptor cache to load descriptors through.
        :param bind: an optional function to turn a declared dependency into the
        project's canonical artifact for it.
        """
        self._descriptors = descriptors
        self._bind = bind or (lambda artifact: artifact)

    def expand(self, roots: Sequence[Artifact], scopes: Sequence[Optional[str]]) -> List[Artifact]:
        """
        A function that expands the given declared dependencies into a flat list of
        themselves and everything they depend on.  Dependencies are listed after all
        of their own dependencies and each carries the depth at which it was found.

        :param roots: the declared dependencies to expand.
        :param scopes: the descriptor scopes to follow on each hop.
        :return: the flat list of artifacts.
        :raises DescriptorUnavailable: if any descriptor along the way cannot be loaded.
        :raises CyclicDependencyError: if an artifact depends on itself.
        """
        result: List[Artifact] = []

        for root in roots:
            self._add_dependency(result, root, scopes, [], 0)

        return result

    def _add_dependency(self, result: List[Artifact], dependency: Artifact, scopes: Sequence[Optional[str]],
                        path: List[Artifact], depth: int):
        """
        A function that adds a dependency, preceded by its transitive dependencies, to
        the result list.

        :param result: the list to add artifacts to.
        :param dependency: the dependency to add.
        :param scopes: the descriptor scopes to follow.
        :param path: the artifacts between the declared dependency and this one.
        :param depth: the depth of this dependency.
        """
        path.append(dependency)

        if not dependency.ignore_transients:
            descriptor = self._descriptors.load(dependency)

            for scope in scopes:
                for declared in descriptor.declared_dependencies([scope]):
                    artifact = self._bind(declared)

                    if is_excluded(dependency, artifact):
                        verbose_out(f'Excluding {artifact} from {dependency}.')
                        continue

                    if artifact in path:
                        raise CyclicDependencyError(
                            f'Dependency path:\n{_format_path(path + [artifact])}\n'
                            f'The dependency, {artifact}, depends on itself.'
                        )

                    self._add_dependency(result, _inherit_exclusions(dependency, artifact), scopes, path, depth + 1)

        path.pop()
        result.append(dependency.with_depth(depth))
