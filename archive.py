"""
Reading and writing project archives (zip or tar).

Extraction filters out files that operating systems and file managers
leave behind, and refuses member paths escaping the target directory.
Archives are always written atomically.
"""

import collections
import logging
import shutil
import tarfile
import zipfile
import zlib
from pathlib import PurePosixPath

import more_itertools

import errors
import plugins.registry
import util.path
from student_file_policy import Classification


logger = logging.getLogger(__name__)

noise_names = frozenset([".DS_Store", "desktop.ini", "Thumbs.db", ".directory", "__MACOSX"])
"""Names of files and directories that are never extracted."""

encrypted_flag = 0x1
"""Bit in the general purpose flags of a zip entry marking it as encrypted."""


# ## Extraction.


def member_path(archive_path, name):
    """
    Validate the name of an archive member.
    Returns a relative instance of PurePosixPath, or None for the archive root.
    Raises ArchiveFormatError for absolute names and names with '..' components.
    """
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise errors.ArchiveFormatError(archive_path, f"unsafe member path {name!r}")
    parts = [part for part in path.parts if part != "."]
    return PurePosixPath(*parts) if parts else None


def _members(archive_path, entries):
    """
    Filters pairs (name, member) of archive entries.
    Yields pairs (path, member) for the entries to extract.
    """
    for name, member in entries:
        path = member_path(archive_path, name)
        if path is None:
            continue
        if any(part in noise_names for part in path.parts):
            logger.debug(f"skipping noise entry {name}")
            continue
        yield (path, member)


def _make_dir(dir):
    with errors.file_operation("create directory", dir):
        dir.mkdir(parents=True, exist_ok=True)


def _write_member(dest, source):
    _make_dir(dest.parent)
    with errors.file_operation("write", dest):
        with dest.open("wb") as file:
            shutil.copyfileobj(source, file)


def _extract_zip(archive_path, target):
    try:
        with zipfile.ZipFile(archive_path) as archive:
            infos = ((info.filename, info) for info in archive.infolist())
            for path, info in _members(archive_path, infos):
                dest = target.joinpath(*path.parts)
                if info.flag_bits & encrypted_flag:
                    raise errors.ArchiveFormatError(archive_path, f"encrypted member {info.filename!r}")
                if info.is_dir():
                    _make_dir(dest)
                else:
                    with archive.open(info) as source:
                        _write_member(dest, source)
    # NotImplementedError: unsupported compression method.
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
        raise errors.ArchiveFormatError(archive_path, str(e)) from e


def _extract_tar(archive_path, target):
    try:
        with tarfile.open(archive_path) as archive:
            infos = ((info.name, info) for info in archive)
            for path, info in _members(archive_path, infos):
                dest = target.joinpath(*path.parts)
                if info.isdir():
                    _make_dir(dest)
                elif info.isfile():
                    with archive.extractfile(info) as source:
                        _write_member(dest, source)
                else:
                    logger.warning(f"skipping {info.name} in {archive_path}: not a regular file or directory")
    except (tarfile.TarError, zlib.error, EOFError) as e:
        raise errors.ArchiveFormatError(archive_path, str(e)) from e


def extract(archive_path, target):
    """
    Extract a zip or tar archive (possibly compressed) into the directory 'target'.
    The format is detected from the content.
    Noise entries (see noise_names) are skipped, as are links and special files.
    Raises ArchiveFormatError if the archive cannot be read.
    """
    logger.debug(f"extracting {archive_path} to {target}")
    _make_dir(target)
    with errors.file_operation("read", archive_path):
        is_zip = zipfile.is_zipfile(archive_path)
        is_tar = not is_zip and tarfile.is_tarfile(archive_path)

    if is_zip:
        _extract_zip(archive_path, target)
    elif is_tar:
        _extract_tar(archive_path, target)
    else:
        raise errors.ArchiveFormatError(archive_path, "not a zip or tar archive")


# ## Locating projects.


def directories_breadth_first(path):
    """
    Generator function enumerating a directory and its descendant directories breadth-first.
    Siblings are visited in order of their names.
    Symbolic links are not followed.
    Directories that cannot be read are logged and skipped.
    """
    queue = collections.deque([path])
    while queue:
        dir = queue.popleft()
        yield dir
        try:
            children = sorted(
                (child for child in dir.iterdir() if child.is_dir() and not child.is_symlink()),
                key=lambda child: child.name,
            )
        except OSError as e:
            logger.warning(f"skipping unreadable directory {dir}: {e.strerror}")
            continue
        queue.extend(children)


def find_project_root(path, is_root=None):
    """
    Find the root of a project inside an extracted archive.

    The search is breadth-first, starting with 'path' itself.
    Among candidates at the same depth, the lexicographically first one wins.

    Arguments:
    * path: the directory to search (instance of pathlib.Path).
    * is_root:
        Predicate on directories recognizing project roots.
        Defaults to recognition by any ecosystem plugin.

    Returns None if there is no project root.
    """
    if is_root is None:
        is_root = plugins.registry.is_project_root
    return more_itertools.first(filter(is_root, directories_breadth_first(path)), None)


# ## Writing.


def _normalize_owner(info):
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


def _entry_name(prefix, relative):
    path = PurePosixPath(*relative.parts)
    if prefix is not None:
        path = prefix / path
    return str(path)


def write_archive(source_dir, output_path, prefix=None, as_zip=True, paths=None):
    """
    Archive the contents of a directory.

    Arguments:
    * source_dir: the directory to archive (instance of pathlib.Path).
    * output_path: where to write the archive.
    * prefix:
        Optional name of a top-level directory.
        If given, all entries are placed inside it.
        Otherwise, entries are relative to source_dir.
    * as_zip:
        Write a zip archive (deflate compression) if set,
        otherwise a tar archive in POSIX (pax) format.
    * paths:
        Optional iterable of paths under source_dir to include.
        Directories given here are added without their contents.
        Defaults to all descendants of source_dir.

    Entries are written in order of their paths, directories before their contents.
    The archive is written to a temporary file next to output_path
    that is renamed into place on success and removed on failure.
    """
    prefix = PurePosixPath(prefix) if prefix else None
    if paths is None:
        paths = util.path.iterdir_recursive(source_dir, include_top_level=False, sort=True)
    paths = list(paths)

    logger.info(f"writing {'zip' if as_zip else 'tar'} archive {output_path}")
    with errors.file_operation("write archive", output_path):
        with util.path.overwrite_atomic(output_path) as file:
            if as_zip:
                with zipfile.ZipFile(file, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                    if prefix is not None:
                        archive.write(source_dir, str(prefix))
                    for path in paths:
                        archive.write(path, _entry_name(prefix, path.relative_to(source_dir)))
            else:
                with tarfile.open(fileobj=file, mode="w", format=tarfile.PAX_FORMAT) as archive:
                    if prefix is not None:
                        archive.add(source_dir, str(prefix), recursive=False, filter=_normalize_owner)
                    for path in paths:
                        archive.add(
                            path,
                            _entry_name(prefix, path.relative_to(source_dir)),
                            recursive=False,
                            filter=_normalize_owner,
                        )


# ## Student-side operations.


def student_paths(policy, project_root):
    """
    The student files of a project together with their ancestor directories
    (excluding the project root), in order of their paths.
    """
    files = [
        path
        for path in util.path.iterdir_recursive(project_root, include_top_level=False, sort=True)
        if path.is_file() and policy.is_student_file(path, project_root)
    ]
    dirs = {parent for path in files for parent in path.parents if project_root in parent.parents}
    return sorted([*dirs, *files])


def submission_paths(policy, project_root):
    """
    The paths of a project that go into a submission archive:
    the student paths together with the regular files at the top level.
    The latter include the build files that identify the project.
    """
    with errors.file_operation("list", project_root):
        top_level_files = util.path.files_in(project_root)
    return sorted({*student_paths(policy, project_root), *top_level_files})


def compress_project(policy, project_root, output_path):
    """
    Write a zip archive of the student files of a project,
    as sent by a student for submission.
    The top-level files of the project are included so that
    the archive is recognized as a project when packaging it.
    Entries are placed in a top-level directory named after the project directory.
    """
    logger.info(f"compressing student files of {project_root}")
    write_archive(
        project_root,
        output_path,
        prefix=project_root.resolve().name,
        as_zip=True,
        paths=submission_paths(policy, project_root),
    )


def extract_project(policy, archive_path, target):
    """
    Extract an exercise archive over an existing project at 'target'.

    Existing student files are kept, unless the project configuration
    forces updating them.
    All other files from the archive overwrite their existing counterparts.
    The policy should be the one for the project at 'target'.
    Raises NoProjectRootError if the archive contains no project.
    """
    with util.path.temp_dir() as scratch:
        extract(archive_path, scratch)
        root = find_project_root(scratch)
        if root is None:
            raise errors.NoProjectRootError(archive_path)

        _make_dir(target)
        for path in util.path.iterdir_recursive(root, include_top_level=False, sort=True):
            dest = target / path.relative_to(root)
            if path.is_dir():
                _make_dir(dest)
                continue
            if policy.classify(dest, target, updating=True) is Classification.student_file:
                logger.debug(f"keeping student file {dest}")
                continue
            logger.debug(f"updating {dest}")
            with errors.file_operation("copy", path):
                shutil.copyfile(path, dest)
