"""
Policies deciding which files of an exercise project belong to the student.

Student files are files the student is expected to create or modify.
They are preserved when an exercise is updated and are taken
from the student's submission when a submission is packaged.
All other files are exercise files: they belong to the instructor.
"""

import abc
import enum
import functools
import logging
from pathlib import Path, PurePath

import project_config
import util.path


logger = logging.getLogger(__name__)


class Classification(enum.Enum):
    student_file = enum.auto()
    force_updated = enum.auto()
    exercise_file = enum.auto()


def _under_any(path, roots):
    return any(util.path.is_under(path, root) for root in roots)


class StudentFilePolicy(abc.ABC):
    """
    Base class for student file policies.

    Subclasses implement is_student_source_file with the heuristics of their ecosystem.
    Exceptions are configured per exercise in the project configuration file
    found in the config parent path.
    """

    def __init__(self, config_parent_path):
        self.config_parent_path = Path(config_parent_path)

    def get_config_parent_path(self):
        return self.config_parent_path

    @functools.cached_property
    def config(self):
        """The project configuration, loaded on first use."""
        return project_config.ProjectConfig.load(self.config_parent_path)

    def _config(self, config):
        return self.config if config is None else config

    @abc.abstractmethod
    def is_student_source_file(self, path: PurePath) -> bool:
        """
        Determine whether a path relative to the project root is a student source file.
        This is the case if it lies where the student is expected to
        create their own source files in the general case,
        for example under 'src' in an Ant project.
        Special cases are configured as extra student or exercise files instead.
        """

    def classify(self, path, project_root, config=None, updating=False):
        """
        Classify a path of the project at the given root.

        Arguments:
        * path, project_root: instances of pathlib.Path.
        * config:
            The project configuration to use.
            Defaults to the one found in the config parent path.
        * updating:
            Whether the classification is made for an exercise update.
            Only then can the result be Classification.force_updated.

        Returns an instance of Classification.
        """
        config = self._config(config)
        if not path.exists():
            return Classification.exercise_file
        if path.name == project_config.config_file_name:
            return Classification.exercise_file

        absolute = path.resolve()
        root = project_root.resolve()
        if updating and _under_any(absolute, config.resolve(root, config.force_update)):
            return Classification.force_updated
        if _under_any(absolute, config.resolve(root, config.extra_exercise_files)):
            return Classification.exercise_file
        if absolute == root:
            return Classification.exercise_file
        if _under_any(absolute, config.resolve(root, config.extra_student_files)):
            return Classification.student_file

        try:
            relative = absolute.relative_to(root)
        except ValueError:
            relative = path
        if self.is_student_source_file(relative):
            return Classification.student_file
        return Classification.exercise_file

    def is_student_file(self, path, project_root, config=None):
        return self.classify(path, project_root, config) is Classification.student_file

    def is_updating_forced(self, path, project_root, config=None):
        """
        Determine whether a path lies in a directory configured to be always overwritten.
        Only consulted when updating an exercise.
        """
        config = self._config(config)
        root = project_root.resolve()
        return _under_any(path.resolve(), config.resolve(root, config.force_update))


class NothingIsStudentFilePolicy(StudentFilePolicy):
    def __init__(self, config_parent_path=""):
        super().__init__(config_parent_path)

    def is_student_source_file(self, path):
        return False

    def classify(self, path, project_root, config=None, updating=False):
        return Classification.exercise_file

    def is_updating_forced(self, path, project_root, config=None):
        return False


class EverythingIsStudentFilePolicy(StudentFilePolicy):
    """
    Every file is a student file.
    The project root and the project configuration file are still exercise files.
    """

    def is_student_source_file(self, path):
        return True

    def classify(self, path, project_root, config=None, updating=False):
        if path.name == project_config.config_file_name:
            return Classification.exercise_file
        if path.resolve() == project_root.resolve():
            return Classification.exercise_file
        return Classification.student_file

    def is_updating_forced(self, path, project_root, config=None):
        return False


def starts_with(path, prefix):
    """Whether a relative path equals or lies under the relative path 'prefix'."""
    prefix = PurePath(prefix).parts
    return PurePath(path).parts[: len(prefix)] == prefix
