"""
This file provides all our needed config support.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from transitive.conflicts import default_policy_name
from transitive.schema import ArraySchema, BooleanSchema, ObjectSchema, OneOfSchema, StringSchema

scope_names = ('compile', 'run', 'test')
dependency_list_names = ('compile', 'run', 'test', 'test_compile')
default_cache_file = 'dependency.cache'
default_local_repository = '~/.m2/repository'

_scope_schema = StringSchema().enum(*scope_names)
_dependency_schema = OneOfSchema(
    StringSchema().min_length(1),
    ObjectSchema()
    .properties(
        spec=StringSchema().min_length(1),
        exclude=ArraySchema().items(StringSchema().pattern(r'^[^:]+:[^:]+$')),
        ignore_transients=BooleanSchema()
    )
    .required('spec')
    .additional_properties(False),
    ObjectSchema()
    .properties(
        file=StringSchema().min_length(1)
    )
    .required('file')
    .additional_properties(False)
)
transitive_schema = ObjectSchema() \
    .properties(
        scopes=OneOfSchema(
            _scope_schema,
            ArraySchema().items(_scope_schema)
        ),
        cache=BooleanSchema().default(False),
        conflicts=StringSchema().enum('nearest', 'highest').default(default_policy_name),
        warn=BooleanSchema().default(False),
        cache_file=StringSchema().min_length(1).default(default_cache_file)
    ) \
    .additional_properties(False)
repository_schema = ObjectSchema() \
    .properties(
        local=StringSchema().min_length(1).default(default_local_repository),
        remote=StringSchema().pattern(r'^https?://')
    ) \
    .additional_properties(False)
dependencies_schema = ObjectSchema() \
    .properties(**{name: ArraySchema().items(_dependency_schema) for name in dependency_list_names}) \
    .additional_properties(False)
project_schema = ObjectSchema() \
    .properties(
        info=ObjectSchema()
        .properties(
            name=StringSchema().pattern('[a-zA-Z0-9-_]+'),
            version=StringSchema().min_length(1)
        )
        .additional_properties(False),
        transitive=transitive_schema,
        repository=repository_schema,
        dependencies=dependencies_schema
    ) \
    .additional_properties(False)


class TransitiveConfiguration(object):
    """
    Instances of this class represent the ``transitive`` section of a project file; that
    is, how transitive dependencies should be handled for the project.
    """
    def __init__(self, data: Dict[str, Any]):
        """
        A function that creates instances of the ``TransitiveConfiguration`` class.

        :param data: the (already validated) data from the project file.
        """
        scopes = data['scopes'] if 'scopes' in data else []

        if isinstance(scopes, str):
            scopes = [scopes]

        self._scopes = [scope for scope in scope_names if scope in scopes]
        self._cache = data['cache'] if 'cache' in data else False
        self._conflicts = data['conflicts'] if 'conflicts' in data else default_policy_name
        self._warn = data['warn'] if 'warn' in data else False
        self._cache_file = data['cache_file'] if 'cache_file' in data else default_cache_file

    @property
    def scopes(self) -> Sequence[str]:
        """
        A read-only property that returns the scopes that should be resolved transitively.
        They always come back in ``compile``, ``run``, ``test`` order.

        :return: the scopes to resolve, which may be empty.
        """
        return self._scopes

    @property
    def cache(self) -> bool:
        """
        A read-only property that returns whether a previously cached resolution may be
        used in place of a full one.
        """
        return self._cache

    @property
    def conflicts(self) -> str:
        """
        A read-only property that returns the name of the conflict policy to use.
        """
        return self._conflicts

    @property
    def warn(self) -> bool:
        """
        A read-only property that returns whether settled conflicts should be reported.
        """
        return self._warn

    @property
    def cache_file(self) -> str:
        return self._cache_file

    def __str__(self) -> str:
        return f'Transitive[scopes={self._scopes}, cache={self._cache}, conflicts={self._conflicts}]'


class RepositoryConfiguration(object):
    """
    Instances of this class represent the ``repository`` section of a project file; that
    is, where descriptors are to be found.
    """
    def __init__(self, data: Dict[str, Any]):
        """
        A function that creates instances of the ``RepositoryConfiguration`` class.

        :param data: the (already validated) data from the project file.
        """
        local = data['local'] if 'local' in data else default_local_repository

        self._local = Path(local).expanduser()
        self._remote: Optional[str] = data['remote'] if 'remote' in data else None

    @property
    def local(self) -> Path:
        """
        A read-only property that returns the root of the local repository.
        """
        return self._local

    @property
    def remote(self) -> Optional[str]:
        """
        A read-only property that returns the base URL of the remote repository, if any.
        """
        return self._remote
