"""
This library provides our core data model.
"""
import re
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

_version_pattern = re.compile(r'^(\d+)(\.(\d+)(\.(\d+))?)?([-_.][\w.-]+)?$')
_tag_pattern = re.compile(r'.(\D*)(\d*)')
_default_type = 'jar'
_wildcard = '*'


class DescriptorUnavailable(ValueError):
    """
    Raised when the descriptor for an artifact cannot be located or parsed.
    """


class ConflictResolutionError(ValueError):
    """
    Raised when a version conflict cannot be settled, typically because a version
    string could not be parsed.
    """


class CyclicDependencyError(ValueError):
    """
    Raised when expanding a dependency leads back to an artifact already on the
    current expansion path.
    """


class CacheReadError(ValueError):
    """
    Raised when a resolution cache exists but cannot be read.
    """


def _compare_tags(tag1: Optional[str], tag2: Optional[str]) -> int:
    """
    A function that attempts proper ordering of the tag portion of a version.  A
    version with no tag is newer than the same version with a lettered one, so
    ``1.0-beta`` < ``1.0``.

    :param tag1: the first tag to look at.
    :param tag2: the second tag to look at.
    :return: the usual result of comparing.
    """
    # Simple equivalence
    if (not tag1 and not tag2) or tag1 == tag2:
        return 0

    # Normalize and drop the separator.
    t1_match = _tag_pattern.match(tag1.lower() if tag1 else '-0')
    t1_group_1 = t1_match.group(1).strip('-_.')
    t2_match = _tag_pattern.match(tag2.lower() if tag2 else '-0')
    t2_group_1 = t2_match.group(1).strip('-_.')

    if t1_group_1 and not t2_group_1:
        return -1
    if not t1_group_1 and t2_group_1:
        return 1
    # We have letter tags.
    if t1_group_1 and t1_group_1 != t2_group_1:
        return -1 if t1_group_1 < t2_group_1 else 1

    t1_number = int(t1_match.group(2)) if t1_match.group(2) else 0
    t2_number = int(t2_match.group(2)) if t2_match.group(2) else 0

    return t1_number - t2_number


class Version(object):
    """
    Instances of this class represent a dependency version that can be ordered.  Only
    the major, minor and micro numbers and an optional trailing tag are recognized;
    anything else is not a version.
    """
    def __init__(self, text: str):
        match = _version_pattern.match(text or '')
        if not match:
            raise ValueError(f'The text, "{text}", cannot be parsed as a version identifier.')

        self._major = int(match.group(1))
        self._minor = int(match.group(3)) if match.group(3) else 0
        self._micro = int(match.group(5)) if match.group(5) else 0
        self._tag = match.group(6) if match.group(6) else ''

    def _compare(self, other: 'Version'):
        diff = self._major - other._major

        if diff == 0:
            diff = self._minor - other._minor

        if diff == 0:
            diff = self._micro - other._micro

        if diff == 0 and self._tag != other._tag:
            diff = _compare_tags(self._tag, other._tag)

        return diff

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        return self._compare(other) == 0

    def __ne__(self, other):
        return not self == other

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        return self._compare(other) < 0

    def __le__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        return self._compare(other) <= 0

    def __gt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        return self._compare(other) > 0

    def __ge__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        return self._compare(other) >= 0

    def __str__(self) -> str:
        return f'{self._major}.{self._minor}.{self._micro}{self._tag}'


class Exclusion(object):
    """
    Instances of this class represent the exclusion of a logical artifact, by group
    and name, from a dependency's transitive closure.  Either part may be ``*`` to
    match anything.
    """
    @classmethod
    def parse(cls, text: str) -> 'Exclusion':
        """
        A function that creates an exclusion from text of the form, ``group:name``.

        :param text: the text to parse.
        :return: the resulting exclusion.
        """
        parts = [part.strip() for part in text.split(':')]

        if len(parts) != 2 or not all(parts):
            raise ValueError(f'The text, "{text}", is not a valid exclusion; it must be in the form, group:name.')

        return cls(parts[0], parts[1])

    def __init__(self, group: str, name: str):
        self._group = group
        self._name = name

    @property
    def group(self) -> str:
        return self._group

    @property
    def name(self) -> str:
        return self._name

    def matches(self, artifact: 'Artifact') -> bool:
        """
        A function that returns whether this exclusion matches the given artifact.
        Versions play no part in the match.

        :param artifact: the artifact to test.
        :return: ``True`` if the artifact is excluded by us or ``False`` if not.
        """
        return self._group in (_wildcard, artifact.group) and self._name in (_wildcard, artifact.name)

    def __repr__(self):
        return f'{self._group}:{self._name}'

    def __eq__(self, other):
        if not isinstance(other, Exclusion):
            return NotImplemented
        return repr(self) == repr(other)

    def __hash__(self):
        return hash(repr(self))


class Artifact(object):
    """
    Instances of this class represent a logical dependency at a specific version.
    Artifacts are immutable; use the ``with_*()`` functions to derive a changed copy.
    Two artifacts are equal if their coordinates (group, name, type, classifier and
    version) are; depth, exclusions and flags play no part in that.
    """
    @classmethod
    def parse(cls, spec: str, exclusions: Iterable[Exclusion] = (), ignore_transients: bool = False) -> 'Artifact':
        """
        A function that creates an artifact from a specification string.  We support
        the forms, ``group:name:version``, ``group:name:type:version`` and
        ``group:name:type:classifier:version``.

        :param spec: the specification to parse.
        :param exclusions: any exclusions that should accompany the artifact.
        :param ignore_transients: whether the artifact's own dependencies should be
        ignored.
        :return: the resulting artifact.
        :raises ValueError: if the specification is not valid.
        """
        parts = [part.strip() for part in spec.split(':')]

        if len(parts) < 3 or len(parts) > 5 or not all(parts):
            raise ValueError(f'Cannot make an artifact from the specification, "{spec}".')

        group = parts.pop(0)
        name = parts.pop(0)
        version = parts.pop()
        artifact_type = parts.pop(0) if parts else _default_type
        classifier = parts.pop(0) if parts else None

        return cls(group, name, version, artifact_type=artifact_type, classifier=classifier,
                   exclusions=exclusions, ignore_transients=ignore_transients)

    def __init__(self, group: str, name: str, version: str, artifact_type: Optional[str] = None,
                 classifier: Optional[str] = None, exclusions: Iterable[Exclusion] = (), depth: int = 0,
                 ignore_transients: bool = False):
        """
        A function to create an instance of the ``Artifact`` class.

        :param group: the group the artifact belongs to.
        :param name: the name (artifact ID) of the artifact.
        :param version: the version of the artifact.
        :param artifact_type: the type of the artifact; defaults to ``jar``.
        :param classifier: the optional classifier of the artifact.
        :param exclusions: the logical artifacts to drop from this one's transitive closure.
        :param depth: the number of hops from a declared dependency to this artifact.
        :param ignore_transients: whether the artifact's own dependencies should be ignored.
        """
        self._group = group
        self._name = name
        self._version = version
        self._type = artifact_type or _default_type
        self._classifier = classifier
        self._exclusions: Tuple[Exclusion, ...] = tuple(exclusions)
        self._depth = depth
        self._ignore_transients = ignore_transients

    @property
    def group(self) -> str:
        """
        A read-only property that returns the name of the group that the artifact
        belongs to.

        :return: the name of the artifact's group.
        """
        return self._group

    @property
    def name(self) -> str:
        """
        A read-only property that returns the name (artifact ID) of the artifact.

        :return: the name of the artifact.
        """
        return self._name

    @property
    def id(self) -> str:
        """
        A read-only property that returns the logical identity of the artifact.  This is
        a string made up of the group and name with a colon character, ``:``, in between.
        Versions of the same logical artifact share an ID.

        :return: the ID of the artifact.
        """
        return f'{self._group}:{self._name}'

    @property
    def version(self) -> str:
        return self._version

    @property
    def type(self) -> str:
        return self._type

    @property
    def classifier(self) -> Optional[str]:
        return self._classifier

    @property
    def exclusions(self) -> Tuple[Exclusion, ...]:
        """
        A read-only property that returns the exclusions that apply to the transitive
        dependencies of this artifact.

        :return: the artifact's exclusions, which may be empty.
        """
        return self._exclusions

    @property
    def depth(self) -> int:
        """
        A read-only property that returns the number of hops from a declared dependency
        to this artifact.  Declared dependencies have a depth of ``0``.

        :return: the artifact's depth.
        """
        return self._depth

    @property
    def ignore_transients(self) -> bool:
        return self._ignore_transients

    @property
    def coordinates(self) -> Tuple[str, str, str, Optional[str], str]:
        return self._group, self._name, self._type, self._classifier, self._version

    def _copy(self, **changes) -> 'Artifact':
        values = {
            'artifact_type': self._type,
            'classifier': self._classifier,
            'exclusions': self._exclusions,
            'depth': self._depth,
            'ignore_transients': self._ignore_transients
        }
        values.update(changes)
        version = values.pop('version', self._version)

        return Artifact(self._group, self._name, version, **values)

    def with_depth(self, depth: int) -> 'Artifact':
        return self._copy(depth=depth)

    def with_version(self, version: str) -> 'Artifact':
        return self._copy(version=version)

    def with_exclusions(self, exclusions: Iterable[Exclusion]) -> 'Artifact':
        return self._copy(exclusions=exclusions)

    def with_ignore_transients(self, ignore_transients: bool) -> 'Artifact':
        return self._copy(ignore_transients=ignore_transients)

    def excludes(self, candidate: 'Artifact') -> bool:
        """
        A function that returns whether the given artifact matches any of our exclusions.

        :param candidate: the artifact to test.
        :return: ``True`` if the candidate is excluded or ``False`` if not.
        """
        return any(exclusion.matches(candidate) for exclusion in self._exclusions)

    def __repr__(self):
        parts = [self._group, self._name, self._type]

        if self._classifier:
            parts.append(self._classifier)

        parts.append(self._version)

        return ':'.join(parts)

    def __eq__(self, other):
        if not isinstance(other, Artifact):
            return NotImplemented
        return self.coordinates == other.coordinates

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.coordinates)


class FileDependency(object):
    """
    Instances of this class represent a dependency on a file (or directory) that is
    produced by the build rather than resolved from a repository.  These are carried
    along untouched by resolution.
    """
    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def __repr__(self):
        return f'file:{self._path}'

    def __eq__(self, other):
        if not isinstance(other, FileDependency):
            return NotImplemented
        return self._path == other._path

    def __hash__(self):
        return hash(self._path)


DependencyEntry = Union[Artifact, FileDependency]


def is_artifact(entry: Any) -> bool:
    """
    A function that returns whether the given dependency list entry is an artifact,
    as opposed to a file-based build output.

    :param entry: the entry to check.
    :return: ``True`` if the entry is an artifact.
    """
    return isinstance(entry, Artifact)


def split_entries(entries: Sequence[DependencyEntry]) -> Tuple[list, list]:
    """
    A function that partitions a dependency list into its artifacts and its other
    (file) entries.  Relative order within each partition is preserved.

    :param entries: the dependency list to partition.
    :return: a tuple with the list of artifacts in the 1st position and the list of
    other entries in the 2nd.
    """
    artifacts = [entry for entry in entries if is_artifact(entry)]
    others = [entry for entry in entries if not is_artifact(entry)]

    return artifacts, others
