import sys
from pathlib import Path

import pytest

# Make the top-level modules importable without installing the package.
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from helpers import original_test_java, solution_java, write_tree  # noqa: E402


@pytest.fixture
def maven_clone(tmp_path):
    """The instructor's clone of a Maven exercise."""
    root = tmp_path / "clone"
    write_tree(
        root,
        {
            "pom.xml": "<project/>\n",
            "src/main/java/App.java": solution_java,
            "src/test/java/AppTest.java": original_test_java,
        },
    )
    return root


@pytest.fixture
def make_clone(tmp_path):
    """The instructor's clone of a Makefile-driven exercise."""
    root = tmp_path / "clone"
    write_tree(
        root,
        {
            "Makefile": "all:\n\tcc src/lib.c test/test.c\n",
            "src/lib.c": "int answer(void) { return 42; }\n",
            "test/test.c": "/* original test */\n",
        },
    )
    return root


@pytest.fixture
def python_clone(tmp_path):
    """The instructor's clone of a Python exercise."""
    root = tmp_path / "clone"
    write_tree(
        root,
        {
            "setup.py": "from setuptools import setup\n",
            "src/answer.py": "def answer():\n    return 42\n",
            "test/__init__.py": "",
            "test/test_answer.py": "# original test\n",
            "tmc/__main__.py": "# runner\n",
        },
    )
    return root
