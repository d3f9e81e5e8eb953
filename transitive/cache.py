"""
This library provides the resolution cache: a record of a project's resolved
dependency sets so that later runs can skip resolving them again.
"""
from typing import Dict, List, Optional

import yaml

from transitive.models import Artifact, CacheReadError, split_entries
from transitive.utils import verbose_out, warn

# Maps the names used in a cache document to the project's dependency lists.
cache_sections = {
    'compile': 'compile',
    'runtime': 'run',
    'test': 'test'
}

ResolvedSets = Dict[str, List[Artifact]]


class DependencyCaching(object):
    """
    Instances of this class read and write the resolution cache of a project.  The
    cache is a YAML document holding, for each of the ``compile``, ``runtime`` and
    ``test`` sections, the list of resolved artifacts as specification strings.
    File dependencies are never cached.
    """
    def __init__(self, project):
        """
        A function to create instances of the ``DependencyCaching`` class.

        :param project: the project whose resolution cache we manage.
        """
        self._project = project

    def read_cache(self) -> Optional[ResolvedSets]:
        """
        A function that reads the project's resolution cache.  A missing cache or one
        that cannot be read is treated as no cache at all; the latter is reported as a
        warning.

        :return: a dictionary of cache section names to the artifacts in them or ``None``.
        """
        try:
            return self._load()
        except CacheReadError as error:
            warn(error.args[0])
            return None

    def _load(self) -> Optional[ResolvedSets]:
        """
        A function that loads and checks the cache document.

        :return: a dictionary of cache section names to the artifacts in them or ``None``,
        if there is no cache.
        :raises CacheReadError: if the cache exists but is not valid.
        """
        path = self._project.cache_path

        if not path.is_file():
            verbose_out(f'No dependency cache found at {path}.')
            return None

        try:
            with path.open() as fd:
                content = yaml.full_load(fd)
        except (OSError, yaml.YAMLError) as error:
            raise CacheReadError(f'Could not read the dependency cache, {path}: {error}')

        if not isinstance(content, dict):
            raise CacheReadError(f'The dependency cache, {path}, is not in the proper format.')

        result = {}

        for section in cache_sections:
            specs = content[section] if section in content else None

            if not isinstance(specs, list) or not all(isinstance(spec, str) for spec in specs):
                raise CacheReadError(f'The dependency cache, {path}, has no valid {section} section.')

            try:
                result[section] = [self._project.artifact(spec) for spec in specs]
            except ValueError as error:
                raise CacheReadError(f'The dependency cache, {path}, is not valid: {error.args[0]}')

        return result

    def write_cache(self):
        """
        A function that writes the current artifact portion of the project's ``compile``,
        ``run`` and ``test`` dependency lists to its resolution cache.

        :raises ValueError: if the cache could not be written.
        """
        path = self._project.cache_path
        content = {}

        for section, list_name in cache_sections.items():
            artifacts, _ = split_entries(self._project.get_dependencies(list_name))
            content[section] = [repr(artifact) for artifact in artifacts]

        verbose_out(f'Writing dependency cache to {path}.')

        try:
            with path.open('w') as fd:
                yaml.dump(content, fd, default_flow_style=False)
        except OSError as error:
            raise ValueError(f'Could not write the dependency cache, {path}: {error}')
