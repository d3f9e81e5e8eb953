"""
This file contains all the unit tests for resolving a project's scopes.
"""
from pathlib import Path
from typing import Any, Dict

# noinspection PyPackageRequirements
import pytest
import yaml

from transitive.models import Artifact, DescriptorUnavailable
from transitive.project import Project
from transitive.resolution import ScopeOrchestrator, add_transitive_dependencies, apply_resolution, \
    scope_transitions
from tests.test_support import FakeDescriptorSource, FakeEcho, Options, Regex, get_test_path, specs

_descriptors = {
    'g:a:1': [(None, 'g:b:1'), ('compile', 'g:c:1'), ('runtime', 'g:r:1'), ('test', 'g:t:1')],
    'g:b:1': [],
    'g:c:1': [],
    'g:r:1': [],
    'g:t:1': [],
    'g:x:1': ['g:c:1']
}


def _project(tmpdir, scopes, dependencies: Dict[str, Any], **transitive) -> Project:
    transitive['scopes'] = scopes
    return Project(Path(str(tmpdir)), {
        'transitive': transitive,
        'dependencies': dependencies
    })


def _failing_source(artifact: Artifact):
    raise AssertionError(f'No descriptor should have been loaded for {artifact}.')


class TestScopeTransitions(object):
    def test_transitions(self):
        assert scope_transitions['compile'] == (None, 'compile')
        assert scope_transitions['run'] == (None, 'compile', 'runtime')
        assert scope_transitions['test'] == (None, 'compile', 'runtime')


class TestScopeOrchestrator(object):
    def test_resolve_scope_does_not_change_the_project(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']})
        orchestrator = ScopeOrchestrator(project, FakeDescriptorSource(_descriptors))

        assert specs(orchestrator.resolve_compile()) == ['g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1']
        assert specs(project.get_dependencies('compile')) == ['g:a:jar:1']

    def test_resolve_run_and_test(self, tmpdir):
        project = _project(tmpdir, ['run', 'test'], {'run': ['g:a:1'], 'test': ['g:x:1', 'g:a:1']})
        orchestrator = ScopeOrchestrator(project, FakeDescriptorSource(_descriptors))

        assert specs(orchestrator.resolve_run()) == ['g:b:jar:1', 'g:c:jar:1', 'g:r:jar:1', 'g:a:jar:1']
        assert specs(orchestrator.resolve_test()) == [
            'g:c:jar:1', 'g:x:jar:1', 'g:b:jar:1', 'g:r:jar:1', 'g:a:jar:1'
        ]

    def test_descriptors_are_shared_across_scopes(self, tmpdir):
        source = FakeDescriptorSource(_descriptors)
        project = _project(tmpdir, ['compile', 'run'], {'compile': ['g:a:1'], 'run': ['g:a:1']})
        orchestrator = ScopeOrchestrator(project, source)

        orchestrator.resolve(['compile', 'run'])

        assert source.loads.count('g:a:1') == 1
        assert len(orchestrator.descriptors) == 4

    def test_runs_do_not_share_descriptors(self, tmpdir):
        source = FakeDescriptorSource(_descriptors)
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']})

        ScopeOrchestrator(project, source).resolve_compile()
        ScopeOrchestrator(project, source).resolve_compile()

        assert source.loads.count('g:a:1') == 2

    def test_nearest_wins(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1', 'g:d:1']})
        source = FakeDescriptorSource({
            'g:a:1': ['g:b:1'],
            'g:b:1': ['g:d:2'],
            'g:d:1': [],
            'g:d:2': []
        })

        assert specs(ScopeOrchestrator(project, source).resolve_compile()) == [
            'g:d:jar:1', 'g:b:jar:1', 'g:a:jar:1'
        ]

    def test_highest_wins(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1', 'g:d:1']}, conflicts='highest')
        source = FakeDescriptorSource({
            'g:a:1': ['g:b:1'],
            'g:b:1': ['g:d:2'],
            'g:d:1': [],
            'g:d:2': []
        })

        assert specs(ScopeOrchestrator(project, source).resolve_compile()) == [
            'g:d:jar:2', 'g:b:jar:1', 'g:a:jar:1'
        ]

    def test_conflict_warnings(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1', 'g:d:1']}, warn=True)
        source = FakeDescriptorSource({
            'g:a:1': ['g:d:2'],
            'g:d:1': [],
            'g:d:2': []
        })

        with FakeEcho.simple('Warning: Favoring version 1 over 2 of g:d.', fg='yellow'):
            ScopeOrchestrator(project, source).resolve_compile()

    def test_root_exclusions(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': [{'spec': 'g:a:1', 'exclude': ['g:b']}]})

        assert specs(ScopeOrchestrator(project, FakeDescriptorSource(_descriptors)).resolve_compile()) == [
            'g:c:jar:1', 'g:a:jar:1'
        ]

    def test_root_exclusions_stay_on_their_own_path(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': [{'spec': 'g:x:1', 'exclude': ['g:c']}, 'g:y:1']})
        source = FakeDescriptorSource({
            'g:x:1': ['g:c:1'],
            'g:y:1': ['g:x:1'],
            'g:c:1': []
        })

        assert specs(ScopeOrchestrator(project, source).resolve_compile()) == [
            'g:x:jar:1', 'g:c:jar:1', 'g:y:jar:1'
        ]

    def test_declared_exclusions_stay_on_their_own_path(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1', 'g:b:1']})
        source = FakeDescriptorSource({
            'g:a:1': [(None, 'g:x:1', ['g:c'])],
            'g:b:1': ['g:x:1'],
            'g:x:1': ['g:c:1'],
            'g:c:1': []
        })

        assert specs(ScopeOrchestrator(project, source).resolve_compile()) == [
            'g:x:jar:1', 'g:a:jar:1', 'g:c:jar:1', 'g:b:jar:1'
        ]

    def test_excluded_on_every_path(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1', 'g:b:1']})
        source = FakeDescriptorSource({
            'g:a:1': [(None, 'g:x:1', ['g:c'])],
            'g:b:1': [(None, 'g:x:1', ['g:c'])],
            'g:x:1': ['g:c:1'],
            'g:c:1': []
        })

        assert specs(ScopeOrchestrator(project, source).resolve_compile()) == [
            'g:x:jar:1', 'g:a:jar:1', 'g:b:jar:1'
        ]

    def test_resolved_artifacts_carry_no_inherited_exclusions(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']})
        source = FakeDescriptorSource({
            'g:a:1': [(None, 'g:x:1', ['g:c'])],
            'g:x:1': [],
        })

        resolved = ScopeOrchestrator(project, source).resolve_compile()

        assert resolved[0] is project.artifact('g:x:1')
        assert resolved[0].exclusions == ()


class TestApplyResolution(object):
    def test_files_are_kept_after_artifacts(self, tmpdir):
        project = _project(tmpdir, ['compile', 'test'], {
            'compile': [{'file': 'one.jar'}, 'g:a:1', {'file': 'two.jar'}],
            'test': ['g:a:1', {'file': 'three.jar'}],
            'test_compile': [{'file': 'four.jar'}]
        })
        directory = Path(str(tmpdir))
        resolved = [project.artifact('g:b:1'), project.artifact('g:a:1')]

        apply_resolution(project, {'compile': resolved, 'test': resolved})

        assert specs(project.get_dependencies('compile')) == [
            'g:b:jar:1', 'g:a:jar:1', f'file:{directory / "one.jar"}', f'file:{directory / "two.jar"}'
        ]
        assert specs(project.get_dependencies('test')) == [
            'g:b:jar:1', 'g:a:jar:1', f'file:{directory / "three.jar"}'
        ]
        assert specs(project.get_dependencies('test_compile')) == [
            'g:b:jar:1', 'g:a:jar:1', f'file:{directory / "four.jar"}'
        ]


class TestAddTransitiveDependencies(object):
    def test_no_scopes_does_nothing(self, tmpdir):
        project = _project(tmpdir, [], {'compile': ['g:a:1']})

        add_transitive_dependencies(project, _failing_source)

        assert specs(project.get_dependencies('compile')) == ['g:a:jar:1']
        assert not project.cache_path.exists()

    def test_compile_scope(self, tmpdir):
        project = _project(tmpdir, ['compile'], {
            'compile': ['g:a:1', {'file': 'lib/local.jar'}],
            'run': ['g:a:1']
        })

        add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert specs(project.get_dependencies('compile')) == [
            'g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1', f'file:{Path(str(tmpdir)) / "lib" / "local.jar"}'
        ]
        # Scopes that are not configured are left alone.
        assert specs(project.get_dependencies('run')) == ['g:a:jar:1']

    def test_test_scope_updates_both_lists(self, tmpdir):
        project = _project(tmpdir, ['test'], {
            'test': ['g:a:1'],
            'test_compile': [{'file': 'build/classes'}]
        })

        add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        expected = ['g:b:jar:1', 'g:c:jar:1', 'g:r:jar:1', 'g:a:jar:1']

        assert specs(project.get_dependencies('test')) == expected
        assert specs(project.get_dependencies('test_compile')) == \
            expected + [f'file:{Path(str(tmpdir)) / "build" / "classes"}']

    def test_failures_change_nothing(self, tmpdir):
        project = _project(tmpdir, ['compile', 'run'], {
            'compile': ['g:a:1'],
            'run': ['g:missing:1']
        })

        with pytest.raises(DescriptorUnavailable) as info:
            add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert info.value.args[0] == 'No descriptor could be found for g:missing:jar:1.'
        assert specs(project.get_dependencies('compile')) == ['g:a:jar:1']
        assert specs(project.get_dependencies('run')) == ['g:missing:jar:1']
        assert not project.cache_path.exists()

    def test_cache_is_always_written(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1'], 'test': ['g:t:1']})

        add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        with project.cache_path.open() as fd:
            content = yaml.full_load(fd)

        assert content == {
            'compile': ['g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1'],
            'runtime': [],
            'test': ['g:t:jar:1']
        }

    def test_cached_resolution_is_used(self, tmpdir):
        dependencies = {
            'compile': ['g:a:1', {'file': 'lib/local.jar'}],
            'run': ['g:a:1'],
            'test': ['g:a:1'],
            'test_compile': [{'file': 'build/classes'}]
        }
        first = _project(tmpdir, ['compile', 'run', 'test'], dependencies, cache=True)

        add_transitive_dependencies(first, FakeDescriptorSource(_descriptors))

        second = _project(tmpdir, ['compile', 'run', 'test'], dependencies, cache=True)

        add_transitive_dependencies(second, _failing_source)

        for name in ('compile', 'run', 'test', 'test_compile'):
            assert specs(second.get_dependencies(name)) == specs(first.get_dependencies(name))

    def test_cache_restores_only_configured_scopes(self, tmpdir):
        directory = Path(str(tmpdir))

        (directory / 'dependency.cache').write_text(
            'compile: [g:b:jar:1]\nruntime: [g:r:jar:1]\ntest: [g:t:jar:1]\n'
        )

        project = _project(tmpdir, ['run'], {'compile': ['g:a:1'], 'run': ['g:a:1', {'file': 'x.jar'}]},
                           cache=True)

        add_transitive_dependencies(project, _failing_source)

        assert specs(project.get_dependencies('compile')) == ['g:a:jar:1']
        assert specs(project.get_dependencies('run')) == ['g:r:jar:1', f'file:{directory / "x.jar"}']

    def test_cache_ignored_when_disabled(self, tmpdir):
        directory = Path(str(tmpdir))

        (directory / 'dependency.cache').write_text('compile: [g:z:jar:9]\nruntime: []\ntest: []\n')

        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']})

        add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert specs(project.get_dependencies('compile')) == ['g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1']

    def test_cache_ignored_when_asked(self, tmpdir):
        directory = Path(str(tmpdir))

        (directory / 'dependency.cache').write_text('compile: [g:z:jar:9]\nruntime: []\ntest: []\n')

        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']}, cache=True)

        with Options(ignore_cache=True):
            add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert specs(project.get_dependencies('compile')) == ['g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1']

    def test_bad_cache_is_a_miss(self, tmpdir):
        directory = Path(str(tmpdir))

        (directory / 'dependency.cache').write_text('compile: []\n')

        project = _project(tmpdir, ['compile'], {'compile': ['g:a:1']}, cache=True)

        with FakeEcho() as echo:
            add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert echo.lines == [Regex(r'Warning: The dependency cache, .*, has no valid runtime section\.')]
        assert specs(project.get_dependencies('compile')) == ['g:b:jar:1', 'g:c:jar:1', 'g:a:jar:1']

    def test_timing_is_reported(self, tmpdir):
        project = _project(tmpdir, ['compile'], {'compile': ['g:b:1']})

        with Options(verbose=1):
            with FakeEcho() as echo:
                add_transitive_dependencies(project, FakeDescriptorSource(_descriptors))

        assert echo.lines[-1] == Regex(r'Adding transitive dependencies took \d+\.\d{3} seconds$')
        assert 'Read 1 descriptor(s).' in echo.lines

    def test_repository_descriptors(self, tmpdir):
        project = Project(Path(str(tmpdir)), {
            'transitive': {'scopes': 'compile'},
            'repository': {'local': str(get_test_path('repository'))},
            'dependencies': {'compile': ['org.example:plain:1.0', {'file': 'lib/local.jar'}]}
        })

        add_transitive_dependencies(project)

        assert specs(project.get_dependencies('compile')) == [
            'org.example:lib:jar:2.0',
            'org.example:excluding:jar:1.0',
            'org.example:managed:jar:3.0',
            'org.example:child:jar:1.0',
            'org.example:plain:jar:1.0',
            f'file:{Path(str(tmpdir)) / "lib" / "local.jar"}'
        ]
