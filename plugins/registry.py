"""
The closed set of ecosystem plugins.
A project root is resolved to the first plugin recognizing it.
"""

import logging

import more_itertools

import errors
import plugins.ant
import plugins.csharp
import plugins.make
import plugins.maven
import plugins.python


logger = logging.getLogger(__name__)

all_plugins = (
    plugins.maven.Plugin(),
    plugins.ant.Plugin(),
    plugins.make.Plugin(),
    plugins.csharp.Plugin(),
    plugins.python.Plugin(),
)
"""All plugins, in order of precedence."""


def find_plugin(path):
    """The plugin for the project at the given root, or None."""
    return more_itertools.first(
        (plugin for plugin in all_plugins if plugin.is_project_of_this_type(path)),
        None,
    )


def get_plugin(path):
    """
    The plugin for the project at the given root.
    Raises PluginNotFoundError if no plugin recognizes it.
    """
    plugin = find_plugin(path)
    if plugin is None:
        raise errors.PluginNotFoundError(path)
    logger.debug(f"project {path} is handled by {plugin.name}")
    return plugin


def is_project_root(path):
    """Whether some plugin recognizes the given directory as a project root."""
    return path.is_dir() and find_plugin(path) is not None
