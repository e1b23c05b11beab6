import sys
import zipfile

import pytest

from scripts.errors import BuildError
from scripts.package_builder import PackageBuilder


def archive_names(path):
    with zipfile.ZipFile(path) as zf:
        return sorted(zf.namelist())


@pytest.fixture
def builder(tmp_path, function_project, runner):
    return PackageBuilder(
        project_path=function_project,
        output_dir=tmp_path / ".build" / "publish",
        archive_path=tmp_path / ".build" / "app.zip",
        runtime="python",
        runner=runner,
    )


def test_python_build(builder):
    package = builder.build()

    assert package == builder.archive_path
    assert archive_names(package) == ["function_app.py", "host.json"]


def test_python_requirements_installed_into_package(builder, function_project):
    (function_project / "requirements.txt").write_text("azure-functions\n")

    builder.build()

    pip = builder.runner.history[-1]
    assert pip[:4] == [sys.executable, "-m", "pip", "install"]
    assert pip[-1] == str(
        builder.output_dir / ".python_packages" / "lib" / "site-packages"
    )
    assert "requirements.txt" in archive_names(builder.archive_path)


def test_python_build_with_output_inside_project(function_project, runner):
    builder = PackageBuilder(
        project_path=function_project,
        output_dir=function_project / ".build" / "publish",
        archive_path=function_project / ".build" / "app.zip",
        runtime="python",
        runner=runner,
    )

    builder.build()
    builder.build()

    assert archive_names(builder.archive_path) == ["function_app.py", "host.json"]


def test_python_build_with_named_output_inside_project(
    function_project, runner
):
    builder = PackageBuilder(
        project_path=function_project,
        output_dir=function_project / "dist" / "publish",
        archive_path=function_project / "app.zip",
        runtime="python",
        runner=runner,
    )

    builder.build()
    builder.build()

    assert archive_names(builder.archive_path) == ["function_app.py", "host.json"]


def test_rebuild_produces_fresh_artifact(builder, function_project):
    builder.build()
    (builder.output_dir / "stale.txt").write_text("left over")
    (function_project / "host.json").unlink()
    (function_project / "new_function.py").write_text("")

    builder.build()

    names = archive_names(builder.archive_path)
    assert "stale.txt" not in names
    assert "host.json" not in names
    assert "new_function.py" in names
    assert not (builder.output_dir / "stale.txt").exists()


def test_clean_removes_previous_output(builder):
    builder.output_dir.mkdir(parents=True)
    builder.archive_path.write_bytes(b"old")

    builder.clean()

    assert not builder.output_dir.exists()
    assert not builder.archive_path.exists()


def test_dotnet_publish_command(tmp_path, runner):
    project = tmp_path / "App.csproj"
    project.write_text("<Project />")
    builder = PackageBuilder(
        project_path=project,
        output_dir=tmp_path / "publish",
        archive_path=tmp_path / "app.zip",
        configuration="Debug",
        runner=runner,
    )

    builder.publish()

    assert runner.history == [
        [
            "dotnet",
            "publish",
            str(project),
            "--configuration",
            "Debug",
            "--output",
            str(tmp_path / "publish"),
        ]
    ]
    assert builder.required_tools == ("dotnet",)


def test_dotnet_publish_failure(tmp_path, runner):
    project = tmp_path / "App.csproj"
    project.write_text("<Project />")
    runner.responses["dotnet publish"] = (1, "", "error CS1002: ; expected")
    builder = PackageBuilder(
        project_path=project,
        output_dir=tmp_path / "publish",
        archive_path=tmp_path / "app.zip",
        runner=runner,
    )

    with pytest.raises(BuildError, match="CS1002"):
        builder.build()
    assert not builder.archive_path.exists()


def test_missing_project(tmp_path, runner):
    builder = PackageBuilder(
        project_path=tmp_path / "missing",
        output_dir=tmp_path / "publish",
        archive_path=tmp_path / "app.zip",
        runtime="python",
        runner=runner,
    )

    with pytest.raises(BuildError, match="not found"):
        builder.build()


def test_archive_requires_publish_output(builder):
    with pytest.raises(BuildError, match="Publish output not found"):
        builder.archive()


def test_unsupported_runtime(tmp_path):
    with pytest.raises(BuildError, match="node"):
        PackageBuilder(
            project_path=tmp_path,
            output_dir=tmp_path / "publish",
            archive_path=tmp_path / "app.zip",
            runtime="node",
        )
