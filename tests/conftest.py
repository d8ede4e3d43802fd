"""Shared test fixtures for samdeploy tests."""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console as RichConsole

from samdeploy.clients.s3 import S3AccessError, S3Client
from samdeploy.sam.cli import SamCliInvoker
from samdeploy.ui.console import THEME, Console
from samdeploy.wizards.deploy_wizard import SamDeployWizardContext


# ------------------------------------------------------------------
# Collaborator doubles
# ------------------------------------------------------------------


class FakeS3Client(S3Client):
    """In-memory S3 client.

    *buckets* maps bucket name -> raw location constraint.  Set
    *list_error* to make ``list_buckets`` raise: a string raises
    ``S3AccessError``, an exception instance is raised as is;
    names in *failing_lookups* make ``get_bucket_location`` raise.
    """

    def __init__(self, buckets=None, list_error=None, failing_lookups=()):
        self.buckets = dict(buckets or {})
        self.list_error = list_error
        self.failing_lookups = set(failing_lookups)
        self.list_calls = 0
        self.location_calls = []

    def list_buckets(self):
        self.list_calls += 1
        if isinstance(self.list_error, Exception):
            raise self.list_error
        if self.list_error:
            raise S3AccessError(self.list_error)
        return list(self.buckets)

    def get_bucket_location(self, bucket_name):
        self.location_calls.append(bucket_name)
        if bucket_name in self.failing_lookups:
            raise RuntimeError(f"lookup failed for {bucket_name}")
        return self.buckets[bucket_name]


class ScriptedWizardContext(SamDeployWizardContext):
    """Answers each prompt from a queue and records every call.

    Queue entries may be plain values or callables; a callable receives
    the prompt's arguments and returns the answer.  The bucket prompt's
    string answers are matched against the offered items by label, and
    the sentinel ``"<message>"`` picks the fallback message item.
    """

    MESSAGE_ITEM = "<message>"

    def __init__(
        self,
        templates=(),
        regions=(),
        buckets=(),
        stack_names=(),
        parameter_answers=(),
        parameters=None,
        overrides=None,
    ):
        self.templates = list(templates)
        self.regions = list(regions)
        self.buckets = list(buckets)
        self.stack_names = list(stack_names)
        self.parameter_answers = list(parameter_answers)
        self.parameters = parameters or {}
        self.overrides = overrides
        self.calls = []
        self.bucket_items_seen = []

    def _next(self, queue, name, *args):
        self.calls.append((name, args))
        if not queue:
            raise AssertionError(f"Unexpected prompt: {name}{args}")
        answer = queue.pop(0)
        return answer(*args) if callable(answer) else answer

    def get_parameters(self, template):
        return self.parameters

    def get_overridden_parameters(self, template):
        return self.overrides

    def prompt_for_template(self, initial_value=None):
        return self._next(self.templates, "template", initial_value)

    def prompt_for_parameters_if_applicable(self, template, missing_parameters=None):
        return self._next(self.parameter_answers, "parameters", template, missing_parameters)

    def prompt_for_region(self, regions, initial_value=None):
        return self._next(self.regions, "region", initial_value)

    def prompt_for_s3_bucket(self, region, items, initial_value=None):
        self.bucket_items_seen.append((region, list(items)))
        answer = self._next(self.buckets, "s3_bucket", region, initial_value)
        if answer is None:
            return None
        for item in items:
            if answer == self.MESSAGE_ITEM and item.is_message:
                return item
            if item.label == answer and not item.is_message:
                return item
        raise AssertionError(f"No bucket item {answer!r} in {[i.label for i in items]}")

    def prompt_for_stack_name(self, initial_value, validate_input):
        answer = self._next(self.stack_names, "stack_name", initial_value)
        if answer is not None:
            error = validate_input(answer)
            if error:
                raise AssertionError(f"Scripted stack name {answer!r} is invalid: {error}")
        return answer

    def prompt_names(self):
        return [name for name, _ in self.calls]


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temporary SAM project directory."""
    project_dir = tmp_path / "sam-app"
    project_dir.mkdir()
    (project_dir / "hello_world").mkdir()
    return project_dir


@pytest.fixture
def write_template(tmp_project):
    """Return a helper that writes a template file into the project."""

    def _write(content: str, name: str = "template.yaml") -> Path:
        path = tmp_project / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_s3():
    """Factory for :class:`FakeS3Client` instances."""
    return FakeS3Client


@pytest.fixture
def scripted_context():
    """Factory for :class:`ScriptedWizardContext` instances."""
    return ScriptedWizardContext


@pytest.fixture
def capture_console():
    """A samdeploy Console writing plain text into a buffer.

    Returns ``(console, buffer)``.
    """
    buffer = io.StringIO()
    rich_console = RichConsole(file=buffer, theme=THEME, force_terminal=False, color_system=None, width=200)
    return Console(rich_console), buffer


@pytest.fixture
def mock_invoker():
    """A MagicMock constrained to the SamCliInvoker interface."""
    return MagicMock(spec=SamCliInvoker)
