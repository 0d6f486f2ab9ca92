from pathlib import PurePath

import student_file_policy

import plugins.general


class StudentFilePolicy(student_file_policy.StudentFilePolicy):
    """
    Student sources live under 'src'.
    Compiled bytecode and cache directories are never student files.
    """

    def is_student_source_file(self, path):
        path = PurePath(path)
        return (
            student_file_policy.starts_with(path, "src")
            and path.suffix != ".pyc"
            and "__pycache__" not in path.parts
        )


markers = [
    "setup.py",
    "requirements.txt",
    "test/__init__.py",
    "tmc/__main__.py",
]
"""Files of which at least one exists in a Python exercise."""


class Plugin(plugins.general.Plugin):
    name = "python3"
    policy_type = StudentFilePolicy
    default_exercise_file_paths = ["test", "tmc"]

    def is_project_of_this_type(self, path):
        return any((path / marker).is_file() for marker in markers)
