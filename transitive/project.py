"""
This library provides an object that represents a project.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from transitive.config import RepositoryConfiguration, TransitiveConfiguration, dependency_list_names, \
    project_schema
from transitive.models import Artifact, DependencyEntry, Exclusion, FileDependency
from transitive.schema import SchemaValidator

_project_file_schema = SchemaValidator(project_schema)

ArtifactSpec = Union[str, Artifact]


class ArtifactRegistry(object):
    """
    Instances of this class hold the canonical artifact for each set of coordinates a
    project has referred to.  Canonical artifacts never carry exclusions or flags, since
    those belong to a single occurrence of an artifact.  An artifact specification that
    carries exclusions or flags of its own gets its own copy; otherwise the canonical
    artifact is handed back.
    """
    def __init__(self):
        self._artifacts: Dict[tuple, Artifact] = {}

    def artifact(self, spec: ArtifactSpec) -> Artifact:
        """
        A function that returns the project-bound artifact for the given specification,
        registering it if it has not been seen before.

        :param spec: either an artifact specification string or an artifact.
        :return: the canonical artifact or, if the specification carries exclusions or
        flags, a copy of it that keeps them.
        :raises ValueError: if the specification string is not valid.
        """
        artifact = Artifact.parse(spec) if isinstance(spec, str) else spec
        key = artifact.coordinates

        if key not in self._artifacts:
            self._artifacts[key] = artifact.with_exclusions(()).with_ignore_transients(False).with_depth(0)

        if artifact.exclusions or artifact.ignore_transients:
            return artifact.with_depth(0)

        return self._artifacts[key]


class Project(object):
    """
    Instances of this class represent a project: its declared dependency lists and how
    their transitive dependencies should be resolved.
    """
    @classmethod
    def from_file(cls, path: Path) -> 'Project':
        """
        This class function creates a project object by reading and validating a
        ``project.yaml`` file.

        :param path: the path to the ``project.yaml`` file to read.
        :return: the resulting project object.
        :raises ValueError: if the project file cannot be read or validated.
        """
        directory = path.parent
        try:
            with path.open() as fd:
                content = yaml.full_load(fd) or {}
        except (OSError, yaml.YAMLError) as error:
            raise ValueError(f'Could not read the project file, {path}: {error}')
        if not _project_file_schema.validate(content):
            raise ValueError(f'Bad project file format: {_project_file_schema.error}')
        return cls(directory, content)

    @classmethod
    def from_dir(cls, path: Path, name: Optional[str] = None, version: Optional[str] = None) -> 'Project':
        """
        This class function creates a minimal project object from a directory.  The name
        of the project, if not specified, will be set to the simple name of the directory.
        The version, if not specified, will be set to ``0.0.1``.

        :param path: the project's directory.
        :param name: the name for the project.
        :param version: the version of the project.
        :return: the resulting project object.
        """
        info = {}
        if name is not None:
            info['name'] = name
        if version is not None:
            info['version'] = version
        return cls(path, {
            'info': info
        })

    def __init__(self, directory: Path, content: Dict[str, Any]):
        """
        A function to create an instance of the ``Project`` class.  Use either the
        ``Project.from_file()`` or ``Project.from_dir()`` functions to create instances;
        do not use this function directly.
        """
        self._directory = directory
        self._info = content['info'] if 'info' in content else {}
        if 'name' not in self._info:
            self._info['name'] = directory.name
        if 'version' not in self._info:
            self._info['version'] = '0.0.1'
        self._transitive = TransitiveConfiguration(content['transitive'] if 'transitive' in content else {})
        self._repository = RepositoryConfiguration(content['repository'] if 'repository' in content else {})
        self._registry = ArtifactRegistry()
        self._dependencies: Dict[str, List[DependencyEntry]] = {name: [] for name in dependency_list_names}

        declared = content['dependencies'] if 'dependencies' in content else {}

        for name, entries in declared.items():
            self._dependencies[name] = [self._to_entry(entry) for entry in entries]

    def _to_entry(self, entry: Union[str, Dict[str, Any]]) -> DependencyEntry:
        """
        A function that converts a dependency list entry from a project file into either
        a bound artifact or a file dependency.

        :param entry: the entry to convert.
        :return: the resulting dependency list entry.
        """
        if isinstance(entry, str):
            return self.artifact(entry)
        if 'file' in entry:
            return FileDependency(self._directory / entry['file'])

        exclusions = [Exclusion.parse(text) for text in entry['exclude']] if 'exclude' in entry else []
        ignore_transients = entry['ignore_transients'] if 'ignore_transients' in entry else False

        return self.artifact(Artifact.parse(entry['spec'], exclusions, ignore_transients))

    @property
    def name(self) -> str:
        """
        A read-only property that returns the name of the project.

        :return: the name of the project.
        """
        return self._info['name']

    @property
    def version(self) -> str:
        """
        A read-only property that returns the version of the project.

        :return: the version of the project.
        """
        return self._info['version']

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def transitive(self) -> TransitiveConfiguration:
        """
        A read-only property that returns how transitive dependencies should be handled
        for this project.
        """
        return self._transitive

    @property
    def repository(self) -> RepositoryConfiguration:
        """
        A read-only property that returns where descriptors for this project's
        dependencies should be found.
        """
        return self._repository

    @property
    def transitive_scopes(self) -> Sequence[str]:
        return self._transitive.scopes

    @property
    def cache_dependencies(self) -> bool:
        return self._transitive.cache

    @property
    def cache_path(self) -> Path:
        """
        A read-only property that returns the path to this project's resolution cache.
        """
        return self._directory / self._transitive.cache_file

    def artifact(self, spec: ArtifactSpec) -> Artifact:
        """
        A function that returns the artifact bound to this project for the given
        specification.

        :param spec: either an artifact specification string or an artifact.
        :return: the project's artifact for the specification.
        """
        return self._registry.artifact(spec)

    def get_dependencies(self, name: str) -> List[DependencyEntry]:
        """
        A function that returns a copy of one of the project's dependency lists.

        :param name: the name of the list; one of ``compile``, ``run``, ``test`` or
        ``test_compile``.
        :return: the entries in the named list.
        """
        return list(self._dependencies[name])

    def set_dependencies(self, name: str, entries: Sequence[DependencyEntry]):
        """
        A function that replaces one of the project's dependency lists.

        :param name: the name of the list to replace.
        :param entries: the new entries for the list.
        """
        if name not in self._dependencies:
            raise ValueError(f'There is no dependency list named {name}.')

        self._dependencies[name] = list(entries)


def get_project(directory: Path) -> Project:
    """
    A function to create a ``Project`` object from a directory.  If the directory
    contains a ``project.yaml`` file, it is read as the source of the project definition.
    Otherwise, a default project based on just the directory is created.

    :param directory: the directory to create the project object for.
    :return: the appropriately initialized project object.
    """
    project_file_path = directory / 'project.yaml'

    return Project.from_file(project_file_path)\
        if project_file_path.exists()\
        else Project.from_dir(directory)
