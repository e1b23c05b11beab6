from pathlib import Path
from typing import Optional, Union

import pytest
from attr import dataclass, field

from scripts.azcli import CommandResult, CommandRunner

REMOTE_PREFIXES = ("az account", "az login", "az group", "az functionapp")


@dataclass
class FakeRunner(CommandRunner):
    """
    Records every command instead of running it. `responses` maps a command
    prefix to a response tuple, or to a list of tuples consumed in order (the
    last one repeats). Unmatched commands succeed with empty output.
    """

    responses: dict = field(factory=dict)
    uncaptured: list[list[str]] = field(factory=list)

    def run(
        self,
        args: list[str],
        cwd: Optional[Union[str, Path]] = None,
        capture: bool = True,
    ) -> CommandResult:
        self.history.append(list(args))
        if not capture:
            self.uncaptured.append(list(args))
        command = " ".join(args)
        for prefix in sorted(self.responses, key=len, reverse=True):
            if command.startswith(prefix):
                response = self.responses[prefix]
                if isinstance(response, list):
                    response = response.pop(0) if len(response) > 1 else response[0]
                returncode, stdout, *rest = response
                return CommandResult(
                    args=list(args),
                    returncode=returncode,
                    stdout=stdout,
                    stderr=rest[0] if rest else "",
                )
        return CommandResult(args=list(args), returncode=0)

    def ran(self, prefix: str) -> bool:
        return any(" ".join(cmd).startswith(prefix) for cmd in self.history)

    def remote_calls(self) -> list[list[str]]:
        return [
            cmd
            for cmd in self.history
            if " ".join(cmd).startswith(REMOTE_PREFIXES)
        ]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def tools_installed(monkeypatch):
    monkeypatch.setattr(
        "scripts.preconditions.shutil.which", lambda tool: f"/usr/bin/{tool}"
    )


@pytest.fixture
def parameters_file(tmp_path) -> Path:
    path = tmp_path / "parameters.yaml"
    path.write_text(
        "baseName: azurefuncapp\n"
        "location: eastus\n"
        "hostingPlanSku: Y1\n"
        "workerRuntime: python\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def function_project(tmp_path) -> Path:
    project = tmp_path / "src" / "app"
    project.mkdir(parents=True)
    (project / "function_app.py").write_text(
        "import azure.functions as func\n\napp = func.FunctionApp()\n",
        encoding="utf-8",
    )
    (project / "host.json").write_text('{"version": "2.0"}', encoding="utf-8")
    (project / "local.settings.json").write_text("{}", encoding="utf-8")
    cache = project / "__pycache__"
    cache.mkdir()
    (cache / "function_app.cpython-312.pyc").write_bytes(b"\x00")
    return project
