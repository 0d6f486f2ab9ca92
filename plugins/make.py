import student_file_policy

import plugins.general


class StudentFilePolicy(student_file_policy.StudentFilePolicy):
    def is_student_source_file(self, path):
        return student_file_policy.starts_with(path, "src")


class Plugin(plugins.general.Plugin):
    """C exercises driven by a Makefile."""

    name = "make"
    packaging_style = plugins.general.PackagingStyle.make
    policy_type = StudentFilePolicy

    def is_project_of_this_type(self, path):
        return (path / "Makefile").is_file()
