"""
This library provides the means of settling version conflicts, where more than one
version of the same logical artifact is reachable.
"""
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Sequence

from transitive.models import Artifact, ConflictResolutionError, Version
from transitive.utils import warn


class ConflictPolicy(object):
    """
    The base for all conflict resolution policies.  A policy is handed every artifact
    found for one logical artifact, in discovery order, and picks the winning version.
    """
    name = ''

    def resolve(self, artifact_id: str, candidates: Sequence[Artifact]) -> str:
        """
        A function that returns the version that should be used for a logical artifact.

        :param artifact_id: the ID of the logical artifact.
        :param candidates: the artifacts found for it; there is always at least one.
        :return: the winning version.
        """
        raise NotImplementedError()


class NearestWinsPolicy(ConflictPolicy):
    """
    The conflict policy that favors the artifact declared nearest to the project.  When
    two are equally near, the first one found wins.
    """
    name = 'nearest'

    def resolve(self, artifact_id: str, candidates: Sequence[Artifact]) -> str:
        winner = candidates[0]

        for candidate in candidates[1:]:
            if candidate.depth < winner.depth:
                winner = candidate

        return winner.version


class HighestVersionPolicy(ConflictPolicy):
    """
    The conflict policy that favors the highest version, regardless of where in the
    graph it was found.  When two versions compare as equal, the first one found wins.
    """
    name = 'highest'

    def resolve(self, artifact_id: str, candidates: Sequence[Artifact]) -> str:
        winner = candidates[0]

        # Nothing to compare.
        if all(candidate.version == winner.version for candidate in candidates):
            return winner.version

        winning_version = self._to_version(artifact_id, winner)

        for candidate in candidates[1:]:
            version = self._to_version(artifact_id, candidate)

            if version > winning_version:
                winner, winning_version = candidate, version

        return winner.version

    @staticmethod
    def _to_version(artifact_id: str, artifact: Artifact) -> Version:
        try:
            return Version(artifact.version)
        except ValueError as error:
            raise ConflictResolutionError(f'Cannot compare versions of {artifact_id}: {error.args[0]}')


_policies: Dict[str, Callable[[], ConflictPolicy]] = {
    NearestWinsPolicy.name: NearestWinsPolicy,
    HighestVersionPolicy.name: HighestVersionPolicy
}
default_policy_name = NearestWinsPolicy.name


def get_conflict_policy(name: Optional[str] = None) -> ConflictPolicy:
    """
    A function that returns the named conflict policy.  If no name is given, the
    nearest-wins policy is returned.

    :param name: the name of the desired policy.
    :return: an instance of the policy.
    :raises ValueError: if there is no policy by that name.
    """
    name = name or default_policy_name

    if name not in _policies:
        raise ValueError(f'There is no conflict policy named {name}; use one of: {", ".join(_policies.keys())}.')

    return _policies[name]()


def group_by_id(artifacts: Sequence[Artifact]) -> Dict[str, List[Artifact]]:
    """
    A function that groups artifacts by their logical identity.  Groups come back in
    the order in which each was first seen.

    :param artifacts: the artifacts to group.
    :return: a dictionary of artifact ID to the artifacts that share it.
    """
    groups: Dict[str, List[Artifact]] = OrderedDict()

    for artifact in artifacts:
        groups.setdefault(artifact.id, []).append(artifact)

    return groups


def resolve_conflicts(artifacts: Sequence[Artifact], policy: ConflictPolicy,
                      bind: Optional[Callable[[Artifact], Artifact]] = None,
                      warn_on_conflict: bool = False) -> List[Artifact]:
    """
    A function that reduces a flat artifact list to exactly one artifact per logical
    identity, using the given policy to pick versions.

    :param artifacts: the flat list of artifacts, as produced by graph expansion.
    :param policy: the policy to settle conflicts with.
    :param bind: an optional function to turn each winner into the project's canonical
    artifact for it.
    :param warn_on_conflict: whether to warn when an artifact was found at more than one
    version.
    :return: the de-duplicated list of artifacts.
    :raises ConflictResolutionError: if the policy cannot compare versions.
    """
    bind = bind or (lambda artifact: artifact)
    result = []

    for artifact_id, candidates in group_by_id(artifacts).items():
        version = policy.resolve(artifact_id, candidates)

        if warn_on_conflict:
            losers = sorted({candidate.version for candidate in candidates if candidate.version != version})

            if losers:
                warn(f'Favoring version {version} over {", ".join(losers)} of {artifact_id}.')

        # Only a declared dependency's own exclusions survive; inherited ones belong
        # to the branch they were found on.
        declared = [candidate for candidate in candidates if candidate.depth == 0]
        exclusions = declared[0].exclusions if declared else ()

        result.append(bind(candidates[0].with_version(version).with_exclusions(exclusions).with_depth(0)))

    return result
