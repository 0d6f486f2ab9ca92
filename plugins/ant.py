import student_file_policy

import plugins.general


class StudentFilePolicy(student_file_policy.StudentFilePolicy):
    def is_student_source_file(self, path):
        return student_file_policy.starts_with(path, "src")


class Plugin(plugins.general.Plugin):
    name = "apache-ant"
    policy_type = StudentFilePolicy

    def is_project_of_this_type(self, path):
        return (path / "build.xml").is_file()
