import errno
from pathlib import Path

import pytest

import errors
import tree_processor
from helpers import read_tree, solution_java, stub_java, write_tree
from plugins import python


binary_data = bytes(range(256))


@pytest.fixture
def exercise(tmp_path):
    return write_tree(
        tmp_path / "exercise",
        {
            "src/App.java": solution_java,
            "src/Helper.java": "// SOLUTION FILE\nclass Helper {}\n",
            "src/Notes.java": "// BEGIN HIDDEN\n// for reviewers\n// END HIDDEN\nclass Notes {}\n",
            "lib/dep.jar": binary_data,
            "README": "// BEGIN SOLUTION\nkept as is\n",
            "metadata.yml": "skipped\n",
            "private/key.txt": "skipped\n",
            "src/HiddenTest.java": "skipped\n",
            ".git/config": "skipped\n",
            "ignored/.tmcignore": "",
            "ignored/sub/A.java": "skipped\n",
        },
    )


def test_stub(exercise, tmp_path):
    tree_processor.prepare_stub(exercise, tmp_path / "stub")
    assert read_tree(tmp_path / "stub") == {
        "README": b"// BEGIN SOLUTION\nkept as is\n",
        "lib/dep.jar": binary_data,
        "src/App.java": stub_java.encode(),
        "src/Notes.java": b"// for reviewers\nclass Notes {}\n",
    }


def test_stub_without_hidden_regions(exercise, tmp_path):
    tree_processor.prepare_stub(exercise, tmp_path / "stub", keep_hidden=False)
    assert read_tree(tmp_path / "stub")["src/Notes.java"] == b"class Notes {}\n"


def test_solution(exercise, tmp_path):
    tree_processor.prepare_solution(exercise, tmp_path / "solution")
    result = read_tree(tmp_path / "solution")
    assert set(result) == {"README", "lib/dep.jar", "src/App.java", "src/Helper.java", "src/Notes.java"}
    assert b"return 42;" in result["src/App.java"]
    assert b"return 0;" not in result["src/App.java"]
    assert result["src/Helper.java"] == b"class Helper {}\n"


def test_solution_of_several_exercises(tmp_path):
    first = write_tree(tmp_path / "first", {"a/A.java": "class A {}\n"})
    second = write_tree(tmp_path / "second", {"b/B.java": "class B {}\n"})
    tree_processor.prepare_solution([first, second], tmp_path / "solution")
    assert set(read_tree(tmp_path / "solution")) == {"a/A.java", "b/B.java"}


def test_stub_generation_is_idempotent(exercise, tmp_path):
    tree_processor.prepare_stub(exercise, tmp_path / "once")
    tree_processor.prepare_stub(tmp_path / "once", tmp_path / "twice")
    assert read_tree(tmp_path / "once") == read_tree(tmp_path / "twice")


def test_tmcignore_prunes_whole_directory(exercise, tmp_path):
    tree_processor.prepare_solution(exercise, tmp_path / "solution")
    assert not (tmp_path / "solution" / "ignored").exists()


def test_unreadable_directory_is_skipped(tmp_path, monkeypatch):
    root = write_tree(tmp_path / "exercise", {"a/X.java": "class X {}\n", "b/Y.java": "class Y {}\n"})
    is_file = Path.is_file

    def failing_is_file(path):
        if path == root / "a" / tree_processor.ignore_file_name:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        return is_file(path)

    monkeypatch.setattr(Path, "is_file", failing_is_file)
    tree_processor.prepare_stub(root, tmp_path / "stub")
    monkeypatch.undo()
    assert read_tree(tmp_path / "stub") == {"b/Y.java": b"class Y {}\n"}


def test_skip_rules_do_not_apply_to_root(tmp_path):
    root = write_tree(tmp_path / ".exercise", {"A.java": "class A {}\n"})
    tree_processor.prepare_solution(root, tmp_path / "solution")
    assert read_tree(tmp_path / "solution") == {"A.java": b"class A {}\n"}


def test_malformed_tags_propagate(tmp_path):
    root = write_tree(tmp_path / "exercise", {"A.java": "// END SOLUTION\n"})
    with pytest.raises(errors.UnbalancedTagError):
        tree_processor.prepare_stub(root, tmp_path / "stub")


def test_is_binary(tmp_path):
    assert tree_processor.is_binary(tmp_path / "Makefile")
    assert tree_processor.is_binary(tmp_path / "image.PNG")
    assert not tree_processor.is_binary(tmp_path / "App.java")


def test_move_files(python_clone, tmp_path):
    write_tree(python_clone, {"src/__pycache__/answer.cpython-311.pyc": b"\0"})
    target = tmp_path / "target"
    policy = python.Plugin().get_student_file_policy(python_clone)
    tree_processor.move_files(policy, python_clone, target)

    assert set(read_tree(target)) == {"src/answer.py"}
    assert not (python_clone / "src" / "answer.py").exists()
    assert (python_clone / "test" / "test_answer.py").exists()
