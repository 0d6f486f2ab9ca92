from pathlib import PurePath

import student_file_policy

import plugins.general


class StudentFilePolicy(student_file_policy.StudentFilePolicy):
    """Student sources live under 'src', except for build output."""

    build_directories = frozenset(["bin", "obj"])

    def is_student_source_file(self, path):
        path = PurePath(path)
        return student_file_policy.starts_with(path, "src") and not (
            self.build_directories & set(path.parts)
        )


class Plugin(plugins.general.Plugin):
    name = "csharp"
    policy_type = StudentFilePolicy

    def is_project_of_this_type(self, path):
        src = path / "src"
        if not src.is_dir():
            return False
        # Project files sit in src or one level below.
        return any(src.glob("*.csproj")) or any(src.glob("*/*.csproj"))
