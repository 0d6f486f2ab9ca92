import abc
import dataclasses
import enum
import logging
from pathlib import PurePath

import project_config
import util.general


logger = logging.getLogger(__name__)


class PackagingStyle(enum.Enum):
    """How the submission packager merges student and exercise files."""

    maven = enum.auto()
    make = enum.auto()
    generic = enum.auto()


@dataclasses.dataclass(frozen=True)
class PackagingLayout:
    """
    The paths (relative to the project root) that make up the
    student and exercise parts of a project.
    """

    student_file_paths: tuple[PurePath, ...]
    exercise_file_paths: tuple[PurePath, ...]


class Plugin(abc.ABC):
    """
    Base class for ecosystem plugins.

    An ecosystem plugin recognizes projects of its build tool
    and knows where student and exercise files live in them.
    Building and testing is not the concern of this package.

    You can configure a plugin by overriding attributes:
    * name: human-readable name of the ecosystem.
    * packaging_style: instance of PackagingStyle.
    * policy_type: student file policy class, instantiated with the project root.
    * default_student_file_paths, default_exercise_file_paths:
        Lists of relative paths (strings).
        The packaging layout adds the extra paths from the project configuration.
    """

    name: str
    packaging_style = PackagingStyle.generic
    policy_type: type
    default_student_file_paths = ["src"]
    default_exercise_file_paths = ["test"]

    @abc.abstractmethod
    def is_project_of_this_type(self, path):
        """Determine whether the given directory is the root of a project of this ecosystem."""

    def get_student_file_policy(self, project_root):
        return self.policy_type(project_root)

    def get_packaging_layout(self, project_root):
        config = project_config.ProjectConfig.load(project_root)

        def paths(defaults, extras):
            return tuple(
                util.general.unique_list(
                    [*map(PurePath, defaults), *sorted(extras)]
                )
            )

        layout = PackagingLayout(
            student_file_paths=paths(
                self.default_student_file_paths,
                config.extra_student_files,
            ),
            exercise_file_paths=paths(
                self.default_exercise_file_paths,
                config.extra_exercise_files,
            ),
        )
        logger.debug(f"packaging layout of {project_root}: {layout}")
        return layout

    def __repr__(self):
        return f"<plugin {self.name}>"
