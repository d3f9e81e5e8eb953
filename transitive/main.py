from pathlib import Path

import click

from transitive import VERSION
from transitive.project import get_project
from transitive.resolution import add_transitive_dependencies, scope_targets
from transitive.utils import global_options, end, out


@click.command()
@click.option('--quiet', '-q', is_flag=True, help='Suppress normal output.')
@click.option('--verbose', '-v', count=True, help='Produce verbose output.  Repeat for more verbosity.')
@click.option('--directory', '-d',
              type=click.Path(exists=True, dir_okay=True, file_okay=False, allow_dash=False, resolve_path=True),
              help='Specify the project root directory.  The current directory is used when this is not specified.')
@click.option('--force-fetch', '-f', is_flag=True,
              help="Do not read descriptors from the local repository; always download them. This still updates "
                   "the local repository.")
@click.option('--no-cache', '-n', is_flag=True,
              help='Ignore any cached dependency resolution and resolve again.  The cache is still rewritten.')
@click.version_option(version=VERSION, help="Show the version of transitive and exit.")
def cli(quiet, verbose, directory, force_fetch, no_cache):
    """
    Use this tool to expand the dependencies of a project into their full transitive
    closures.

    Describe the project, its dependencies and which of its scopes to resolve in a
    "project.yaml" file at the root of your project.
    """
    # First, we need to store our global options.
    global_options.\
        set_quiet(quiet).\
        set_verbose(verbose).\
        set_force_remote_fetch(force_fetch).\
        set_ignore_cache(no_cache)

    try:
        project = get_project(Path(directory) if directory else Path.cwd())

        out(f'Project: {project.name} {project.version}', fg='bright_white')

        if not project.transitive_scopes:
            out('No transitive scopes are configured; nothing to do.')
            return

        add_transitive_dependencies(project)
    except ValueError as error:
        end(error.args[0])

    for scope in project.transitive_scopes:
        for list_name in scope_targets[scope]:
            out(f'{list_name}:', fg='bright_white')

            for entry in project.get_dependencies(list_name):
                out(f'    {entry!r}')
