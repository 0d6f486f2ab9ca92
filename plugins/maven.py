import student_file_policy

import plugins.general


class StudentFilePolicy(student_file_policy.StudentFilePolicy):
    """Student sources live under 'src/main'."""

    def is_student_source_file(self, path):
        return student_file_policy.starts_with(path, "src/main")


class Plugin(plugins.general.Plugin):
    name = "apache-maven"
    packaging_style = plugins.general.PackagingStyle.maven
    policy_type = StudentFilePolicy
    default_student_file_paths = ["src/main"]
    default_exercise_file_paths = ["src/test"]

    def is_project_of_this_type(self, path):
        return (path / "pom.xml").is_file()
