import dataclasses
import logging
from pathlib import PurePath

import yaml

import errors


logger = logging.getLogger(__name__)

config_file_name = ".tmcproject.yml"
"""Name of the per-exercise configuration file at the project root."""

_path_set_keys = ["extra_student_files", "extra_exercise_files", "force_update"]


@dataclasses.dataclass(frozen=True)
class ProjectConfig:
    """
    Per-exercise exceptions to the default file classification.
    All paths are relative to the project root.

    Fields:
    * extra_student_files:
        Paths that belong to the student in addition to the ecosystem defaults.
        They are preserved on update and taken from the student's submission.
    * extra_exercise_files:
        Paths (usually directories) that always belong to the exercise,
        whatever the ecosystem's source file heuristics say.
    * force_update:
        Paths (usually directories) whose contents are always overwritten on update.
    """

    extra_student_files: frozenset[PurePath] = frozenset()
    extra_exercise_files: frozenset[PurePath] = frozenset()
    force_update: frozenset[PurePath] = frozenset()

    @classmethod
    def load(cls, project_root):
        """
        Load the configuration of the project at the given root.
        A missing configuration file gives the empty configuration.
        Raises ConfigParseError if the file is malformed.
        """
        path = project_root / config_file_name
        if not path.is_file():
            return cls()

        logger.debug(f"loading project configuration {path}")
        with errors.file_operation("read", path):
            content = path.read_text(encoding="utf-8")
        return cls.parse(content, path)

    @classmethod
    def parse(cls, content, path):
        """
        Parse the content of a configuration file.
        The argument 'path' is only used in error messages.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise errors.ConfigParseError(path, str(e)) from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise errors.ConfigParseError(path, "expected a mapping at the top level")

        def path_set(key):
            value = data.get(key)
            if value is None:
                return frozenset()
            if not isinstance(value, list):
                raise errors.ConfigParseError(path, f"{key} must be a list of paths")
            return frozenset(_relative_path(path, key, entry) for entry in value)

        return cls(**{key: path_set(key) for key in _path_set_keys})

    def resolve(self, project_root, paths):
        """Canonicalize configured paths against the given project root."""
        root = project_root.resolve()
        return [(root / path).resolve() for path in sorted(paths)]


def _relative_path(config_path, key, entry):
    if not isinstance(entry, str) or not entry:
        raise errors.ConfigParseError(config_path, f"{key} contains a non-path entry {entry!r}")
    path = PurePath(entry)
    if path.is_absolute() or ".." in path.parts:
        raise errors.ConfigParseError(
            config_path,
            f"{key} entry {entry!r} must be a relative path inside the project",
        )
    return path
