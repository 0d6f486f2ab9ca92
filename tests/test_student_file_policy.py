from pathlib import PurePath

import pytest

import project_config
import student_file_policy
from helpers import write_tree
from plugins import ant, csharp, maven, python
from student_file_policy import Classification


@pytest.fixture
def ant_project(tmp_path):
    return write_tree(
        tmp_path / "project",
        {
            "build.xml": "<project/>\n",
            "src/App.java": "class App {}\n",
            "src/generated/Gen.java": "class Gen {}\n",
            "src/.tmcproject.yml": "",
            "test/AppTest.java": "class AppTest {}\n",
            "notes.txt": "notes\n",
            "data/input.txt": "input\n",
            ".tmcproject.yml": "\n".join(
                [
                    "extra_exercise_files:",
                    "  - src/generated",
                    "extra_student_files:",
                    "  - notes.txt",
                    "force_update:",
                    "  - data",
                    "",
                ]
            ),
        },
    )


def classify(policy, root, name, **kwargs):
    return policy.classify(root / name, root, **kwargs)


def test_source_heuristics(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    assert classify(policy, ant_project, "src/App.java") is Classification.student_file
    assert classify(policy, ant_project, "test/AppTest.java") is Classification.exercise_file
    assert classify(policy, ant_project, "build.xml") is Classification.exercise_file


def test_extra_exercise_files_take_precedence(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    assert policy.is_student_source_file(PurePath("src/generated/Gen.java"))
    assert classify(policy, ant_project, "src/generated/Gen.java") is Classification.exercise_file
    assert classify(policy, ant_project, "src/generated") is Classification.exercise_file


def test_extra_student_files(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    assert policy.is_student_file(ant_project / "notes.txt", ant_project)


def test_force_update_only_when_updating(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    path = ant_project / "data" / "input.txt"
    assert policy.classify(path, ant_project) is Classification.exercise_file
    assert policy.classify(path, ant_project, updating=True) is Classification.force_updated
    assert policy.is_updating_forced(path, ant_project)
    assert not policy.is_updating_forced(ant_project / "src" / "App.java", ant_project)


def test_missing_path_is_exercise_file(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    assert classify(policy, ant_project, "src/Missing.java") is Classification.exercise_file


def test_project_root_is_exercise_file(ant_project):
    for policy in [
        ant.StudentFilePolicy(ant_project),
        student_file_policy.EverythingIsStudentFilePolicy(ant_project),
    ]:
        assert policy.classify(ant_project, ant_project) is Classification.exercise_file


@pytest.mark.parametrize(
    "policy_type",
    [
        ant.StudentFilePolicy,
        maven.StudentFilePolicy,
        python.StudentFilePolicy,
        csharp.StudentFilePolicy,
        student_file_policy.EverythingIsStudentFilePolicy,
        student_file_policy.NothingIsStudentFilePolicy,
    ],
)
def test_config_file_is_never_student_file(ant_project, policy_type):
    policy = policy_type(ant_project)
    for name in [".tmcproject.yml", "src/.tmcproject.yml"]:
        assert not policy.is_student_file(ant_project / name, ant_project)


def test_explicit_config_overrides_loaded_one(ant_project):
    policy = ant.StudentFilePolicy(ant_project)
    config = project_config.ProjectConfig()
    path = ant_project / "src" / "generated" / "Gen.java"
    assert policy.classify(path, ant_project, config=config) is Classification.student_file


def test_python_policy():
    policy = python.StudentFilePolicy("")
    assert policy.is_student_source_file(PurePath("src/answer.py"))
    assert policy.is_student_source_file(PurePath("src/data.txt"))
    assert not policy.is_student_source_file(PurePath("src/answer.pyc"))
    assert not policy.is_student_source_file(PurePath("src/__pycache__/answer.py"))
    assert not policy.is_student_source_file(PurePath("test/test_answer.py"))


def test_maven_policy():
    policy = maven.StudentFilePolicy("")
    assert policy.is_student_source_file(PurePath("src/main/java/App.java"))
    assert not policy.is_student_source_file(PurePath("src/test/java/AppTest.java"))
    assert not policy.is_student_source_file(PurePath("src/mainly/App.java"))


def test_csharp_policy():
    policy = csharp.StudentFilePolicy("")
    assert policy.is_student_source_file(PurePath("src/App/Program.cs"))
    assert not policy.is_student_source_file(PurePath("src/App/bin/Debug/App.dll"))
    assert not policy.is_student_source_file(PurePath("src/App/obj/project.assets.json"))


def test_nothing_policy(ant_project):
    policy = student_file_policy.NothingIsStudentFilePolicy()
    assert classify(policy, ant_project, "src/App.java") is Classification.exercise_file
    assert not policy.is_updating_forced(ant_project / "data", ant_project)


def test_everything_policy(ant_project):
    policy = student_file_policy.EverythingIsStudentFilePolicy(ant_project)
    assert policy.is_student_file(ant_project / "build.xml", ant_project)
    assert policy.is_student_file(ant_project / "test" / "AppTest.java", ant_project)
