"""
Derive solution and stub trees from an exercise tree.

Walks an exercise directory and mirrors its files into a destination directory.
Binary files are copied as they are.
Text files are passed through the tag parser and only the
spans accepted by a filter end up in the destination.
"""

import logging
import os
import shutil
from pathlib import Path

import errors
import tag_parser
import util.path
from tag_parser import SpanKind


logger = logging.getLogger(__name__)

# ## Skip rules.

skip_names = frozenset([".tmcrc", "metadata.yml", "private"])
"""Names of files and directories that are never processed."""

ignore_file_name = ".tmcignore"
"""A directory containing a file of this name is not processed."""

binary_extensions = frozenset(
    ["class", "jar", "exe", "jpg", "jpeg", "gif", "png", "zip", "tar", "gz", "db", "bin", "csv", "tsv"]
)
"""Extensions (lowercase) of files copied without parsing. Files without extension are also copied as is."""


def on_skip_list(name):
    return name in skip_names or "Hidden" in name


def is_pruned(dir):
    """Whether a directory below the processed root is left out together with its contents."""
    if dir.name.startswith("."):
        logger.debug(f"skipping hidden directory {dir}")
        return True
    if on_skip_list(dir.name):
        logger.debug(f"skipping directory on skip list {dir}")
        return True
    try:
        ignored = (dir / ignore_file_name).is_file()
    except OSError as e:
        logger.warning(f"skipping unreadable directory {dir}: {e.strerror}")
        return True
    if ignored:
        logger.debug(f"skipping directory containing {ignore_file_name}: {dir}")
    return ignored


def is_binary(path):
    extension = path.suffix[1:].lower()
    return not extension or extension in binary_extensions


def walk_files(source_root):
    """
    Generator function enumerating the files under source_root that are processed.
    Skip rules apply below source_root.
    Directories that cannot be read are logged and skipped.
    Files are enumerated in order of their paths.
    """

    def on_error(e):
        logger.warning(f"skipping unreadable entry {e.filename}: {e.strerror}")

    for dir, dir_names, file_names in os.walk(source_root, onerror=on_error):
        dir = Path(dir)
        dir_names[:] = sorted(name for name in dir_names if not is_pruned(dir / name))
        for name in sorted(file_names):
            if on_skip_list(name):
                logger.debug(f"skipping file on skip list {dir / name}")
                continue
            yield dir / name


# ## Span filters.


def solution_filter(span):
    """Keeps everything except stub replacements."""
    return span.kind is not SpanKind.stub


def stub_filter(span):
    """
    Keeps everything except solutions.
    A file with a solution file marker is left out entirely.
    """
    return span.kind not in [SpanKind.solution, SpanKind.solution_file_marker]


def review_stub_filter(span):
    """Like stub_filter, but also removes hidden regions."""
    return stub_filter(span) and span.kind is not SpanKind.hidden


# ## Processing.


def copy_file(source, source_root, dest_root, keep):
    """
    Mirror a single file from source_root under dest_root.
    Text files are filtered through the tag parser using the span filter 'keep'.
    If keep rejects a solution file marker, the file is not written at all.
    """
    dest = dest_root / source.relative_to(source_root)

    if is_binary(source):
        logger.debug(f"copying binary file {source} to {dest}")
        with errors.file_operation("create directory", dest.parent):
            dest.parent.mkdir(parents=True, exist_ok=True)
        with errors.file_operation("copy", source):
            shutil.copyfile(source, dest)
        return

    spans = tag_parser.parse_file(source)
    if any(span.kind is SpanKind.solution_file_marker and not keep(span) for span in spans):
        logger.debug(f"skipping solution file {source}")
        return

    logger.debug(f"filtering text file {source} to {dest}")
    with errors.file_operation("create directory", dest.parent):
        dest.parent.mkdir(parents=True, exist_ok=True)
    with errors.file_operation("write", dest):
        dest.write_bytes(tag_parser.render(spans, keep))


def process_files(source_root, dest_root, keep):
    """
    Process all files under source_root into dest_root.

    Arguments:
    * source_root, dest_root: instances of pathlib.Path.
    * keep: function taking a TaggedSpan and returning a boolean.

    Skips hidden directories, directories containing a .tmcignore file,
    and files and directories named on the skip list.
    Errors while reading a directory are logged and the directory is skipped.
    Errors while parsing or writing a file propagate.
    """
    logger.info(f"processing project {source_root}")
    for source in walk_files(source_root):
        copy_file(source, source_root, dest_root, keep)


def prepare_solution(exercise_paths, dest_root):
    """
    Generate the solution of one or more exercise trees into dest_root.
    Stub replacements are removed, solutions are kept.
    """
    if isinstance(exercise_paths, Path):
        exercise_paths = [exercise_paths]
    for exercise_path in exercise_paths:
        process_files(exercise_path, dest_root, solution_filter)


def prepare_stub(exercise_path, dest_root, keep_hidden=True):
    """
    Generate the stub of an exercise tree into dest_root.
    Solutions are removed, stub replacements are kept,
    and solution files are left out.
    If keep_hidden is not set, hidden regions are removed as well.
    """
    process_files(exercise_path, dest_root, stub_filter if keep_hidden else review_stub_filter)


def move_files(policy, source, target):
    """
    Move the student files of the project at 'source'
    to the same relative locations under 'target'.
    The student file policy decides which files are student files.
    """
    for path in util.path.iterdir_recursive(source, include_top_level=False, sort=True):
        if not (path.is_file() and policy.is_student_file(path, source)):
            continue
        target_path = target / path.relative_to(source)
        logger.debug(f"moving student file {path} to {target_path}")
        with errors.file_operation("create directory", target_path.parent):
            target_path.parent.mkdir(parents=True, exist_ok=True)
        with errors.file_operation("move", path):
            shutil.move(path, target_path)
