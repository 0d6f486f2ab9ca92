"""
Assemble a gradable package from a student's submission.

The submission archive contributes the student files.
Everything else comes from the instructor's clone of the exercise,
with test files optionally taken from a separate stub archive instead.
The resulting tree is written as a zip or tar archive.
"""

import logging
import re
import shlex
from pathlib import PurePath

import archive
import errors
import plugins.registry
import project_config
import util.general
import util.path
from plugins.general import PackagingStyle


logger = logging.getLogger(__name__)

params_file_name = ".tmcparams"

ide_paths = ["nbproject", ".classpath", ".project", ".settings", ".idea"]
"""IDE metadata kept with a submission: NetBeans, Eclipse, IntelliJ."""


# ## Submission parameters.


class TmcParams:
    """
    Parameters passed to the grading environment as shell variables.

    Keys and values are restricted to characters that are safe as
    shell variable names and words.
    Entries are kept in order of insertion.
    Inserting an existing key replaces its value in place.
    """

    key_pattern = re.compile("[A-Za-z_]+")
    value_pattern = re.compile("[A-Za-z_-]+")

    def __init__(self):
        self.params = dict()

    @classmethod
    def _check(cls, pattern, s):
        if not (isinstance(s, str) and pattern.fullmatch(s)):
            raise errors.InvalidParamError(s)
        return s

    def insert_string(self, key, value):
        key = self._check(self.key_pattern, key)
        self.params[key] = self._check(self.value_pattern, value)

    def insert_array(self, key, values):
        """All values are validated before anything is stored."""
        key = self._check(self.key_pattern, key)
        self.params[key] = [self._check(self.value_pattern, value) for value in values]

    def __len__(self):
        return len(self.params)

    def lines(self):
        """Generator function for the lines of the parameter file (without terminators)."""
        for key, value in self.params.items():
            if isinstance(value, list):
                value = "( " + " ".join(map(shlex.quote, value)) + " )"
            else:
                value = shlex.quote(value)
            yield f"export {key}={value}"

    def write(self, path):
        logger.debug(f"writing parameters to {path}")
        with errors.file_operation("write", path):
            path.write_text(util.general.join_lines(self.lines()), encoding="utf-8")


# ## Merging.


def _copy_into(source, target_dir):
    with errors.file_operation("copy", source):
        util.path.copy_into(source, target_dir)


def _copy_merge(source, target):
    with errors.file_operation("copy", source):
        util.path.copy_merge(source, target)


def _copy_preserving_parents(root, relative_paths, dest):
    for path in relative_paths:
        source = root / path
        if source.exists():
            logger.debug(f"copying {source} to {dest / path}")
            _copy_merge(source, dest / path)


def _copy_top_level_files(dir, dest):
    with errors.file_operation("list", dir):
        files = util.path.files_in(dir)
    for path in files:
        _copy_into(path, dest)


def _copy_if_exists(source, target):
    if source.exists():
        _copy_merge(source, target)


def merge_maven(layout, project_root, clone_path, tests_path, dest):
    _copy_into(clone_path / "pom.xml", dest)
    _copy_if_exists(clone_path / "src" / "main", dest / "src" / "main")
    _copy_if_exists(tests_path / "src" / "test", dest / "src" / "test")
    _copy_preserving_parents(project_root, layout.student_file_paths, dest)
    _copy_preserving_parents(tests_path, layout.exercise_file_paths, dest)
    _copy_top_level_files(clone_path, dest)


def merge_make(layout, project_root, clone_path, tests_path, dest):
    """Student sources come from the submission, overlaid on the clone's src and test."""
    _copy_if_exists(clone_path / "src", dest / "src")
    _copy_if_exists(clone_path / "test", dest / "test")
    _copy_preserving_parents(project_root, layout.student_file_paths, dest)
    _copy_top_level_files(tests_path, dest)


def merge_generic(layout, project_root, clone_path, tests_path, dest):
    _copy_if_exists(clone_path / "lib", dest / "lib")
    for root, paths in [
        (project_root, layout.student_file_paths),
        (tests_path, layout.exercise_file_paths),
    ]:
        for path in paths:
            source = root / path
            if source.exists():
                logger.debug(f"copying {source} into {dest}")
                _copy_into(source, dest)
    _copy_top_level_files(clone_path, dest)


mergers = {
    PackagingStyle.maven: merge_maven,
    PackagingStyle.make: merge_make,
    PackagingStyle.generic: merge_generic,
}


# ## Packaging.


def _find_root(archive_path, dir):
    root = archive.find_project_root(dir)
    if root is None:
        raise errors.NoProjectRootError(archive_path)
    logger.debug(f"found project root {root}")
    return root


def prepare_submission(
    submission_archive,
    output_path,
    toplevel_name,
    params,
    clone_path,
    stub_archive=None,
    output_as_zip=False,
):
    """
    Package a student's submission for grading.

    Arguments:
    * submission_archive: path to the archive (zip or tar) submitted by the student.
    * output_path: where to write the resulting archive.
    * toplevel_name:
        Optional name of a directory that all entries of the result are placed in.
    * params: instance of TmcParams, or None for no parameters.
    * clone_path: root of the instructor's clone of the exercise.
    * stub_archive:
        Optional path to a stub archive.
        If given, test files are taken from it instead of from the clone.
    * output_as_zip: write a zip archive if set, otherwise a tar archive.

    Student files are taken from the submission according to
    the packaging layout of the matching plugin.
    Exercise files, in particular tests, always come from the instructor side.

    Raises PackagingError on any failure.
    Nothing is written to output_path in that case.
    """
    if params is None:
        params = TmcParams()
    logger.info(f"preparing submission {submission_archive}")

    with util.path.temp_dir() as scratch:
        received = scratch / "received"
        archive.extract(submission_archive, received)
        project_root = _find_root(submission_archive, received)
        plugin = plugins.registry.get_plugin(project_root)
        logger.info(f"submission is a {plugin.name} project")

        if stub_archive is None:
            tests_path = clone_path
        else:
            stub_dir = scratch / "stub"
            archive.extract(stub_archive, stub_dir)
            tests_path = _find_root(stub_archive, stub_dir)

        dest = scratch / "dest"
        with errors.file_operation("create directory", dest):
            dest.mkdir()
        params.write(dest / params_file_name)

        for name in ide_paths:
            for source in [project_root / name, clone_path / name]:
                if source.exists():
                    logger.debug(f"copying IDE metadata {source}")
                    _copy_into(source, dest)
                    break

        layout = plugin.get_packaging_layout(clone_path)
        logger.info(f"merging files in {plugin.packaging_style.name} style")
        mergers[plugin.packaging_style](layout, project_root, clone_path, tests_path, dest)

        config = project_config.ProjectConfig.load(clone_path)
        for path in sorted(config.extra_student_files):
            source = project_root / path
            if source.exists():
                logger.debug(f"copying extra student file {source}")
                _copy_merge(source, dest / path)

        archive.write_archive(
            dest,
            output_path,
            prefix=PurePath(toplevel_name).as_posix() if toplevel_name else None,
            as_zip=output_as_zip,
        )
    logger.info(f"wrote submission package {output_path}")
