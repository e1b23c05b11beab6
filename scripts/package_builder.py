"""
Function App package builder.

Publishes the application into a staging directory and zips that directory
into the archive consumed by `az functionapp deployment source config-zip`.
The staging directory and archive are removed before each build, so every
run produces a fresh artifact.
"""

import shutil
import sys
import zipfile
from logging import getLogger
from pathlib import Path
from typing import Optional

from scripts.azcli import CommandFailed, CommandRunner
from scripts.errors import BuildError

log = getLogger(__name__)

DOTNET_RUNTIMES = ("dotnet", "dotnet-isolated")
PYTHON_RUNTIMES = ("python",)

# Files never shipped with a Python function app
PYTHON_IGNORE = shutil.ignore_patterns(
    "__pycache__",
    "*.pyc",
    ".venv",
    "venv",
    ".git",
    ".vscode",
    "local.settings.json",
    ".python_packages",
    ".build",
    "tests",
)


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


class PackageBuilder:
    def __init__(
        self,
        project_path: Path,
        output_dir: Path,
        archive_path: Path,
        configuration: str = "Release",
        runtime: str = "dotnet-isolated",
        runner: Optional[CommandRunner] = None,
    ):
        if runtime not in DOTNET_RUNTIMES + PYTHON_RUNTIMES:
            raise BuildError(f"Unsupported worker runtime: {runtime}")

        self.project_path = Path(project_path)
        self.output_dir = Path(output_dir)
        self.archive_path = Path(archive_path)
        self.configuration = configuration
        self.runtime = runtime
        self.runner = runner or CommandRunner()

    @property
    def required_tools(self) -> tuple[str, ...]:
        return ("dotnet",) if self.runtime in DOTNET_RUNTIMES else ()

    def clean(self) -> None:
        if self.output_dir.exists():
            log.debug(f"Removing {self.output_dir}")
            shutil.rmtree(self.output_dir)
        if self.archive_path.exists():
            log.debug(f"Removing {self.archive_path}")
            self.archive_path.unlink()

    def publish(self) -> None:
        if not self.project_path.exists():
            raise BuildError(f"Project path not found: {self.project_path}")

        log.info(f"Publishing {self.project_path} ({self.runtime})")
        try:
            if self.runtime in DOTNET_RUNTIMES:
                self._publish_dotnet()
            else:
                self._publish_python()
        except CommandFailed as e:
            raise BuildError(
                f"Publishing {self.project_path} failed: "
                f"{e.result.stderr.strip() or e.result.stdout.strip()}"
            ) from e

    def _publish_dotnet(self) -> None:
        self.runner.check(
            [
                "dotnet",
                "publish",
                str(self.project_path),
                "--configuration",
                self.configuration,
                "--output",
                str(self.output_dir),
            ]
        )

    def _python_ignore(self, source: Path):
        """
        Extends `PYTHON_IGNORE` with the publish and archive paths when they
        sit inside the copied project, so the copy never contains itself.
        """
        excluded = {
            p.resolve()
            for p in (self.output_dir, self.archive_path)
            if _is_within(p.resolve(), source.resolve())
        }

        def ignore(directory: str, names: list[str]) -> set[str]:
            ignored = set(PYTHON_IGNORE(directory, names))
            base = Path(directory).resolve()
            ignored.update(n for n in names if (base / n) in excluded)
            return ignored

        return ignore

    def _publish_python(self) -> None:
        source = (
            self.project_path
            if self.project_path.is_dir()
            else self.project_path.parent
        )
        try:
            shutil.copytree(
                source, self.output_dir, ignore=self._python_ignore(source)
            )
        except (shutil.Error, OSError) as e:
            raise BuildError(f"Copying {source} to {self.output_dir} failed: {e}") from e

        requirements = source / "requirements.txt"
        if requirements.is_file():
            target = self.output_dir / ".python_packages" / "lib" / "site-packages"
            self.runner.check(
                [
                    sys.executable,
                    "-m",
                    "pip",
                    "install",
                    "--requirement",
                    str(requirements),
                    "--target",
                    str(target),
                ]
            )

    def archive(self) -> Path:
        if not self.output_dir.is_dir():
            raise BuildError(f"Publish output not found: {self.output_dir}")

        self.archive_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(
                self.archive_path, "w", zipfile.ZIP_DEFLATED
            ) as zf:
                for file_path in sorted(self.output_dir.rglob("*")):
                    if file_path.is_file():
                        zf.write(
                            file_path,
                            file_path.relative_to(self.output_dir).as_posix(),
                        )
        except OSError as e:
            raise BuildError(
                f"Creating archive {self.archive_path} failed: {e}"
            ) from e

        log.info(f"Created package {self.archive_path}")
        return self.archive_path

    def build(self) -> Path:
        self.clean()
        self.publish()
        return self.archive()
