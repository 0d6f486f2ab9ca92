import tarfile
import zipfile
from pathlib import Path


def write_tree(root, files):
    """
    Create files under root.
    Argument 'files' maps relative paths (strings) to contents (strings or bytes).
    """
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


def read_tree(root):
    """Map the relative paths (POSIX strings) of all files under root to their contents."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(Path(root).rglob("*"))
        if path.is_file()
    }


def make_zip(path, files):
    """Write a zip archive with the given entries (names mapped to contents)."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return path


def make_tar(path, source_dir, arcname):
    with tarfile.open(path, "w:gz") as archive:
        archive.add(source_dir, arcname)
    return path


def zip_contents(path):
    """Map the file entries of a zip archive to their contents."""
    with zipfile.ZipFile(path) as archive:
        return {
            info.filename: archive.read(info)
            for info in archive.infolist()
            if not info.is_dir()
        }


def tar_contents(path):
    """Map the file entries of a tar archive to their contents."""
    with tarfile.open(path) as archive:
        return {
            info.name: archive.extractfile(info).read()
            for info in archive.getmembers()
            if info.isfile()
        }


solution_java = """\
public class App {
    public int answer() {
        // BEGIN SOLUTION
        return 42;
        // END SOLUTION
        // STUB: return 0;
    }
}
"""

stub_java = """\
public class App {
    public int answer() {
        return 0;
    }
}
"""

original_test_java = """\
public class AppTest {
    @Test
    public void answer() {
        assertEquals(42, new App().answer());
    }
}
"""
