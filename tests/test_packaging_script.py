import packaging_script
from helpers import make_zip, read_tree, stub_java, tar_contents, write_tree


def test_prepare_stub(maven_clone, tmp_path):
    status = packaging_script.main(["prepare-stub", str(maven_clone), "--output", str(tmp_path / "stub")])
    assert status == 0
    assert read_tree(tmp_path / "stub")["src/main/java/App.java"] == stub_java.encode()


def test_prepare_submission_with_params(maven_clone, tmp_path):
    submission = make_zip(
        tmp_path / "submission.zip",
        {"project/pom.xml": "<project/>\n", "project/src/main/java/App.java": "class App {}\n"},
    )
    output = tmp_path / "package.tar"
    status = packaging_script.main(
        [
            "prepare-submission",
            str(submission),
            "--clone",
            str(maven_clone),
            "--output",
            str(output),
            "--param",
            "mode=full",
            "--array-param",
            "tests=first,second",
        ]
    )
    assert status == 0
    assert tar_contents(output)[".tmcparams"] == b"export mode=full\nexport tests=( first second )\n"


def test_invalid_param_is_reported(maven_clone, tmp_path, capsys):
    submission = make_zip(tmp_path / "submission.zip", {"project/pom.xml": "<project/>\n"})
    output = tmp_path / "package.tar"
    status = packaging_script.main(
        [
            "prepare-submission",
            str(submission),
            "--clone",
            str(maven_clone),
            "--output",
            str(output),
            "--param",
            "mode=rm -rf",
        ]
    )
    assert status == 1
    assert "Invalid parameter value" in capsys.readouterr().err
    assert not output.exists()


def test_extract_into_new_directory(tmp_path):
    source = make_zip(tmp_path / "exercise.zip", {"exercise/Makefile": "all:\n", "exercise/src/lib.c": "x\n"})
    status = packaging_script.main(["extract-project", str(source), "--target", str(tmp_path / "project")])
    assert status == 0
    assert read_tree(tmp_path / "project") == {"Makefile": b"all:\n", "src/lib.c": b"x\n"}


def test_compress_project(python_clone, tmp_path):
    write_tree(python_clone, {"src/extra.py": "x = 1\n"})
    output = tmp_path / "project.zip"
    status = packaging_script.main(["compress-project", str(python_clone), "--output", str(output)])
    assert status == 0
    assert output.is_file()
