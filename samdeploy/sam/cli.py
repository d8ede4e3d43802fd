"""SAM CLI invocation.

Two invokers sit under :class:`DefaultSamCliInvoker`:

- a **process invoker** that runs ``sam`` with captured output and hands
  back a :class:`ChildProcessResult`;
- a **task invoker** that runs long, interactive commands (``sam local
  invoke``) attached to the terminal so their output streams live.

Neither raises on a failing command; the command invoker inspects the
result and raises :class:`~knack.util.CLIError` for non-zero exits.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

from knack.util import CLIError

from samdeploy.sam.locator import SamCliConfiguration

logger = logging.getLogger(__name__)

DEFAULT_CAPABILITIES = ("CAPABILITY_IAM",)


@dataclass
class ChildProcessResult:
    """Outcome of one child process.

    ``error`` holds the text of a spawn failure (executable missing,
    timeout); in that case ``exit_code`` is ``-1``.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    error: str | None = None


# ======================================================================
# Process invokers
# ======================================================================


class SamCliProcessInvoker(ABC):
    @abstractmethod
    def invoke(self, *args: str, cwd: str | None = None) -> ChildProcessResult:
        """Run ``sam <args>`` and capture its output."""


class SamCliTaskInvoker(ABC):
    @abstractmethod
    def invoke(self, args: list[str], cwd: str | None = None) -> ChildProcessResult:
        """Run ``sam <args>`` with output streamed to the terminal."""


def _spawn(cmd: list[str], *, cwd: str | None, capture: bool, timeout: float | None) -> ChildProcessResult:
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            check=False,
            timeout=timeout,
        )
    except (FileNotFoundError, PermissionError) as exc:
        return ChildProcessResult(exit_code=-1, error=f"Could not start {cmd[0]}: {exc}")
    except subprocess.TimeoutExpired:
        return ChildProcessResult(exit_code=-1, error=f"Timed out after {timeout} seconds")

    return ChildProcessResult(
        exit_code=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


class DefaultSamCliProcessInvoker(SamCliProcessInvoker):
    """Runs the resolved SAM CLI with captured output."""

    def __init__(self, configuration: SamCliConfiguration | None = None, timeout: float | None = None):
        self._configuration = configuration or SamCliConfiguration()
        self._timeout = timeout

    def invoke(self, *args: str, cwd: str | None = None) -> ChildProcessResult:
        sam = self._configuration.get_sam_cli_location()
        return _spawn([sam, *args], cwd=cwd, capture=True, timeout=self._timeout)


class DefaultSamCliTaskInvoker(SamCliTaskInvoker):
    """Runs the resolved SAM CLI attached to the current terminal."""

    def __init__(self, configuration: SamCliConfiguration | None = None):
        self._configuration = configuration or SamCliConfiguration()

    def invoke(self, args: list[str], cwd: str | None = None) -> ChildProcessResult:
        sam = self._configuration.get_sam_cli_location()
        return _spawn([sam, *args], cwd=cwd, capture=False, timeout=None)


# ======================================================================
# Command invoker
# ======================================================================


class SamCliInvoker(ABC):
    """The SAM CLI commands the deploy flow and friends rely on."""

    @abstractmethod
    def build(self, build_dir: str, base_dir: str, template_path: str) -> None: ...

    @abstractmethod
    def deploy(
        self,
        template_file: str,
        stack_name: str,
        region: str | None = None,
        parameter_overrides: dict[str, str] | None = None,
    ) -> None: ...

    @abstractmethod
    def info(self) -> dict: ...

    @abstractmethod
    def init(self, name: str, runtime: str, location: str) -> None: ...

    @abstractmethod
    def local_invoke(
        self,
        template_resource_name: str,
        template_path: str,
        event_path: str,
        environment_variable_path: str,
        debug_port: str | None = None,
    ) -> None: ...

    @abstractmethod
    def package(
        self,
        template_file: str,
        output_template_file: str,
        s3_bucket: str,
        region: str | None = None,
    ) -> None: ...


class DefaultSamCliInvoker(SamCliInvoker):
    """Builds SAM CLI argument lists and checks the results.

    Args:
        process_invoker: Runs captured commands.
        task_invoker: Runs streamed commands (``local invoke``).
        capabilities: CloudFormation capabilities passed to ``deploy``.
    """

    def __init__(
        self,
        process_invoker: SamCliProcessInvoker | None = None,
        task_invoker: SamCliTaskInvoker | None = None,
        capabilities: list[str] | tuple[str, ...] = DEFAULT_CAPABILITIES,
    ):
        self._process_invoker = process_invoker or DefaultSamCliProcessInvoker()
        self._task_invoker = task_invoker or DefaultSamCliTaskInvoker()
        if isinstance(capabilities, str):
            capabilities = [capabilities]
        self._capabilities = list(capabilities) or list(DEFAULT_CAPABILITIES)

    def build(self, build_dir: str, base_dir: str, template_path: str) -> None:
        if not os.path.isfile(template_path):
            raise CLIError(f"template path does not exist: {template_path}")

        self._validate_process_result(
            "build",
            self._process_invoker.invoke(
                "build",
                "--build-dir", build_dir,
                "--base-dir", base_dir,
                "--template", template_path,
            ),
        )

    def deploy(
        self,
        template_file: str,
        stack_name: str,
        region: str | None = None,
        parameter_overrides: dict[str, str] | None = None,
    ) -> None:
        args = [
            "deploy",
            "--template-file", template_file,
            "--stack-name", stack_name,
            "--capabilities", *self._capabilities,
        ]
        if region:
            args.extend(["--region", region])
        if parameter_overrides:
            args.append("--parameter-overrides")
            args.extend(f"{key}={value}" for key, value in parameter_overrides.items())

        self._validate_process_result("deploy", self._process_invoker.invoke(*args))

    def info(self) -> dict:
        """Return ``sam --info`` as a dict (at least ``{"version": ...}``)."""
        result = self._process_invoker.invoke("--info")
        self._validate_process_result("info", result)

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise CLIError("SAM CLI did not return expected data") from exc

        if not isinstance(data, dict):
            raise CLIError("SAM CLI did not return expected data")
        return data

    def init(self, name: str, runtime: str, location: str) -> None:
        self._validate_process_result(
            "init",
            self._process_invoker.invoke(
                "init",
                "--name", name,
                "--runtime", runtime,
                cwd=location,
            ),
        )

    def local_invoke(
        self,
        template_resource_name: str,
        template_path: str,
        event_path: str,
        environment_variable_path: str,
        debug_port: str | None = None,
    ) -> None:
        if not template_resource_name:
            raise CLIError("template resource name is missing or empty")

        if not os.path.isfile(template_path):
            raise CLIError(f"template path does not exist: {template_path}")

        if not os.path.isfile(event_path):
            raise CLIError(f"event path does not exist: {event_path}")

        args = [
            "local",
            "invoke",
            template_resource_name,
            "--template", template_path,
            "--event", event_path,
            "--env-vars", environment_variable_path,
        ]
        if debug_port:
            args.extend(["-d", str(debug_port)])

        self._validate_process_result("local invoke", self._task_invoker.invoke(args))

    def package(
        self,
        template_file: str,
        output_template_file: str,
        s3_bucket: str,
        region: str | None = None,
    ) -> None:
        args = [
            "package",
            "--template-file", template_file,
            "--s3-bucket", s3_bucket,
            "--output-template-file", output_template_file,
        ]
        if region:
            args.extend(["--region", region])

        self._validate_process_result("package", self._process_invoker.invoke(*args))

    @staticmethod
    def _validate_process_result(command: str, result: ChildProcessResult) -> None:
        if result.exit_code == 0:
            return

        logger.error("SAM %s error", command)
        logger.error("Exit code: %s", result.exit_code)
        logger.error("Error: %s", result.error)
        logger.error("stderr: %s", result.stderr)
        logger.error("stdout: %s", result.stdout)

        message = result.error or result.stderr or result.stdout
        raise CLIError(f"sam {command} encountered an error: {message}")
