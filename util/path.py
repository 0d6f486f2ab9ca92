import contextlib
import os
import shlex
import shutil
import tempfile
from pathlib import Path, PurePosixPath


# ## Operations on pure paths.


def add_suffix(path, suffix):
    return path.parent / (path.name + suffix)


def format_path(path):
    """Quote a path for use in a user message."""
    return shlex.quote(str(PurePosixPath(path)))


def is_under(path, ancestor):
    """Whether 'path' equals 'ancestor' or is one of its descendants (pure check)."""
    return path == ancestor or ancestor in path.parents


# ## Temporary files and directories.


@contextlib.contextmanager
def temp_dir(**kwargs):
    with tempfile.TemporaryDirectory(**kwargs) as dir:
        yield Path(dir)


# ## File and directory traversal.


def iterdir_recursive(path, include_top_level=True, sort=False):
    """
    Generator function enumerating all descendants of a path.
    Note that the given path can be a file (in which case it is its only descendant).
    Directories are emitted before their children.

    Arguments:
    * path:
        The path to traverse.
        Instance of pathlib.Path.
    * include_top_level:
        Boolean value.
        Whether to include the given path in the enumeration.
    * sort:
        Whether to visit the children of each directory in order of their names.
        This makes the enumeration deterministic.
    """
    if include_top_level:
        yield path

    if path.is_dir() and not path.is_symlink():
        children = path.iterdir()
        if sort:
            children = sorted(children, key=lambda child: child.name)
        for child in children:
            yield from iterdir_recursive(child, sort=sort)


def files_in(dir):
    """The regular files directly inside a directory, sorted by name."""
    return sorted(
        (path for path in dir.iterdir() if path.is_file()),
        key=lambda path: path.name,
    )


# ## Copying.


def copy_merge(source, target):
    """
    Copy a file or directory to 'target'.
    Directories are merged into existing directories.
    Existing files are overwritten.
    Parent directories of the target are created as needed.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    if source.is_dir():
        shutil.copytree(source, target, dirs_exist_ok=True)
    else:
        shutil.copy(source, target)


def copy_into(source, target_dir):
    """
    Copy a file or directory into the directory 'target_dir', keeping its name.
    Returns the path of the copy.
    """
    target = target_dir / source.name
    copy_merge(source, target)
    return target


# ## Atomic file creation.


@contextlib.contextmanager
def overwrite_atomic(path, suffix=".tmp", text=False):
    """
    Context manager for writing a file atomically.
    Yields a file object for a temporary sibling of 'path'.
    On successful exit, the temporary file replaces 'path'.
    If the body raises an exception, the temporary file is removed
    and 'path' is left untouched.
    """
    path_tmp = add_suffix(path, suffix)
    try:
        with path_tmp.open("w" if text else "wb") as file:
            yield file
        path_tmp.replace(path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path_tmp)
        raise
