"""SAM deploy wizard — the step graph behind "deploy a SAM application".

Steps and their transitions::

    TEMPLATE ──► PARAMETER_OVERRIDES ──► REGION ──► S3_BUCKET ──► STACK_NAME ──► complete
       │                 │                 │            │              │
     cancel       cancel (configure)   back: TEMPLATE  back: REGION   back: S3_BUCKET

PARAMETER_OVERRIDES never prompts for a value itself.  It either adopts
the persisted overrides, or asks whether the user wants to configure them;
configuring always ends the run so the user can edit the overrides file
and start again.  From the user's point of view it is part of TEMPLATE,
which is why going back from REGION skips it.

All prompting is delegated to a :class:`SamDeployWizardContext`.  A prompt
returning ``None`` means the user pressed back / cancelled.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from samdeploy.clients.s3 import S3Client
from samdeploy.config.templates import TemplatesConfig
from samdeploy.regions import RegionInfo, RegionProvider
from samdeploy.templates.parameters import TemplateParameter, get_parameters, get_required_parameter_names
from samdeploy.wizards.bucket_cache import (
    BucketPickItem,
    RegionBucketCache,
    bucket_access_error_message,
    create_bucket_message_item,
    create_bucket_pick_items,
    no_buckets_message,
)
from samdeploy.wizards.engine import MultiStepWizard, StepHandler, StepOutcome

logger = logging.getLogger(__name__)


class ParameterPromptResult(str, Enum):
    """Answer from the parameter-overrides prompt."""

    CANCEL = "cancel"
    CONTINUE = "continue"


class DeployStep(Enum):
    TEMPLATE = "template"
    PARAMETER_OVERRIDES = "parameter_overrides"
    REGION = "region"
    S3_BUCKET = "s3_bucket"
    STACK_NAME = "stack_name"


@dataclass(frozen=True)
class SamDeployWizardResponse:
    """Everything the deploy command needs from the wizard."""

    template: Path
    region: str
    s3_bucket: str
    stack_name: str
    parameter_overrides: dict[str, str] = field(default_factory=dict)


@dataclass
class _PartialResponse:
    template: Path | None = None
    parameter_overrides: dict[str, str] | None = None
    region: str | None = None
    s3_bucket: str | None = None
    stack_name: str | None = None


# -------------------------------------------------------------------- #
# Stack name validation
# -------------------------------------------------------------------- #

# A stack name can contain only alphanumeric characters (case sensitive) and
# hyphens.  It must start with an alphabetic character and cannot be longer
# than 128 characters.
_STACK_NAME_CHARS_RE = re.compile(r"[a-zA-Z0-9-]+")
_STACK_NAME_FIRST_RE = re.compile(r"[a-zA-Z]")
MAX_STACK_NAME_LENGTH = 128

STACK_NAME_INVALID_CHARACTERS = "A stack name may contain only alphanumeric characters (case sensitive) and hyphens"
STACK_NAME_INVALID_FIRST_CHARACTER = "A stack name must begin with an alphabetic character"
STACK_NAME_TOO_LONG = f"A stack name must not be longer than {MAX_STACK_NAME_LENGTH} characters"


def validate_stack_name(value: str) -> str | None:
    """Return an error message for an invalid stack name, or None.

    Rules are checked in order: character set, first character, length.
    """
    if not _STACK_NAME_CHARS_RE.fullmatch(value):
        return STACK_NAME_INVALID_CHARACTERS

    if not _STACK_NAME_FIRST_RE.match(value):
        return STACK_NAME_INVALID_FIRST_CHARACTER

    if len(value) > MAX_STACK_NAME_LENGTH:
        return STACK_NAME_TOO_LONG

    return None


# -------------------------------------------------------------------- #
# Collaborators
# -------------------------------------------------------------------- #


class SamDeployWizardContext(ABC):
    """Prompts and lookups the deploy wizard depends on.

    Every ``prompt_*`` method returns ``None`` when the user backs out.
    """

    @abstractmethod
    def get_parameters(self, template: Path) -> dict[str, TemplateParameter]:
        """Return the parameters declared by *template* (empty if none)."""

    @abstractmethod
    def get_overridden_parameters(self, template: Path) -> dict[str, str] | None:
        """Return the persisted overrides for *template*.

        ``None`` means the overrides have never been configured, which is
        different from an empty mapping.
        """

    @abstractmethod
    def prompt_for_template(self, initial_value: Path | None = None) -> Path | None:
        """Ask which SAM template to deploy."""

    @abstractmethod
    def prompt_for_parameters_if_applicable(
        self,
        template: Path,
        missing_parameters: set[str] | None = None,
    ) -> ParameterPromptResult:
        """Offer (or demand) parameter override configuration.

        With no *missing_parameters* the prompt is optional: "continue"
        proceeds with defaults, "configure" opens the overrides for editing
        and cancels.  With missing parameters the user must configure or
        cancel; either way the run ends.
        """

    @abstractmethod
    def prompt_for_region(self, regions: list[RegionInfo], initial_value: str | None = None) -> str | None:
        """Ask for the region code to deploy to."""

    @abstractmethod
    def prompt_for_s3_bucket(
        self,
        region: str,
        items: list[BucketPickItem],
        initial_value: str | None = None,
    ) -> BucketPickItem | None:
        """Ask the user to pick one of *items*."""

    @abstractmethod
    def prompt_for_stack_name(
        self,
        initial_value: str | None,
        validate_input: Callable[[str], str | None],
    ) -> str | None:
        """Ask for a stack name, re-prompting while *validate_input* objects."""


class ProjectWizardContext(SamDeployWizardContext, ABC):
    """Context whose lookups read the template file and the project's
    persisted overrides.  Subclasses supply the prompts.
    """

    def __init__(self, project_dir: str):
        self.project_dir = project_dir
        self.templates_config = TemplatesConfig(project_dir)

    def get_parameters(self, template: Path) -> dict[str, TemplateParameter]:
        return get_parameters(template)

    def get_overridden_parameters(self, template: Path) -> dict[str, str] | None:
        return self.templates_config.get_overridden_parameters(template)


# -------------------------------------------------------------------- #
# Wizard
# -------------------------------------------------------------------- #


class SamDeployWizard(MultiStepWizard[SamDeployWizardResponse]):
    """Collects template, overrides, region, bucket and stack name.

    Parameters
    ----------
    context:
        Prompt and lookup collaborators.
    s3_client:
        Client used to build this run's bucket cache.
    region_provider:
        Source of the regions offered by the region prompt.
    initial_region:
        Region pre-selected the first time the region prompt opens.
    bucket_lookup_workers:
        Concurrency for per-bucket region lookups.
    """

    def __init__(
        self,
        context: SamDeployWizardContext,
        s3_client: S3Client,
        *,
        region_provider: RegionProvider | None = None,
        initial_region: str | None = None,
        bucket_lookup_workers: int = 8,
    ):
        super().__init__()
        self._context = context
        self._region_provider = region_provider or RegionProvider()
        self._bucket_cache = RegionBucketCache(s3_client, max_workers=bucket_lookup_workers)
        self._response = _PartialResponse(region=initial_region or None)

    @property
    def start_step(self) -> DeployStep:
        return DeployStep.TEMPLATE

    @property
    def bucket_cache(self) -> RegionBucketCache:
        return self._bucket_cache

    def get_steps(self) -> dict[DeployStep, StepHandler]:
        return {
            DeployStep.TEMPLATE: self._template_step,
            DeployStep.PARAMETER_OVERRIDES: self._parameter_overrides_step,
            DeployStep.REGION: self._region_step,
            DeployStep.S3_BUCKET: self._s3_bucket_step,
            DeployStep.STACK_NAME: self._stack_name_step,
        }

    def get_result(self) -> SamDeployWizardResponse | None:
        r = self._response
        if (
            r.parameter_overrides is None
            or not r.template
            or not r.region
            or not r.s3_bucket
            or not r.stack_name
        ):
            return None

        return SamDeployWizardResponse(
            template=r.template,
            region=r.region,
            s3_bucket=r.s3_bucket,
            stack_name=r.stack_name,
            parameter_overrides=dict(r.parameter_overrides),
        )

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    def _template_step(self) -> StepOutcome:
        self._response.template = self._context.prompt_for_template(self._response.template)

        if self._response.template:
            return StepOutcome.advance(DeployStep.PARAMETER_OVERRIDES)
        return StepOutcome.cancel()

    def _parameter_overrides_step(self) -> StepOutcome:
        template = self._response.template
        if not template:
            raise RuntimeError("Unexpected state: TEMPLATE step is complete, but no template was selected")

        parameters = self._context.get_parameters(template)
        if not parameters:
            self._response.parameter_overrides = {}
            return StepOutcome.advance(DeployStep.REGION)

        required = get_required_parameter_names(parameters)
        overridden = self._context.get_overridden_parameters(template)

        if overridden is None:
            # Nothing persisted yet.  Overriding is optional unless some
            # parameter lacks a default; either way tell the user it exists.
            # Once the section exists (even empty) only missing required
            # parameters trigger the prompt.
            self._response.parameter_overrides = {}
            result = self._context.prompt_for_parameters_if_applicable(template, required or None)
            return self._after_parameter_prompt(result, mandatory=bool(required))

        missing = required - set(overridden)
        if missing:
            logger.info("Template %s is missing overrides for: %s", template, ", ".join(sorted(missing)))
            result = self._context.prompt_for_parameters_if_applicable(template, missing)
            return self._after_parameter_prompt(result, mandatory=True)

        self._response.parameter_overrides = dict(overridden)
        return StepOutcome.advance(DeployStep.REGION)

    @staticmethod
    def _after_parameter_prompt(result: ParameterPromptResult, mandatory: bool) -> StepOutcome:
        # A deploy cannot succeed with required parameters unset, so the
        # mandatory prompt ends the run whatever the user picked.
        if mandatory or result is not ParameterPromptResult.CONTINUE:
            return StepOutcome.cancel()
        return StepOutcome.advance(DeployStep.REGION)

    def _region_step(self) -> StepOutcome:
        regions = self._region_provider.get_region_data()
        self._bucket_cache.seed_regions(r.region_code for r in regions)

        self._response.region = self._context.prompt_for_region(regions, self._response.region)

        if self._response.region:
            return StepOutcome.advance(DeployStep.S3_BUCKET)
        return StepOutcome.advance(DeployStep.TEMPLATE)

    def _s3_bucket_step(self) -> StepOutcome:
        region = self._response.region
        items = self._bucket_pick_items(region, self._response.s3_bucket)

        picked = self._context.prompt_for_s3_bucket(region, items, self._response.s3_bucket)
        self._response.s3_bucket = picked.label if picked and not picked.is_message else None

        if self._response.s3_bucket:
            return StepOutcome.advance(DeployStep.STACK_NAME)
        return StepOutcome.advance(DeployStep.REGION)

    def _bucket_pick_items(self, region: str, initial_value: str | None) -> list[BucketPickItem]:
        message = None
        error_detail = ""
        try:
            self._bucket_cache.ensure_populated()
        except Exception as e:
            logger.warning("Could not list S3 buckets: %s", e)
            message = bucket_access_error_message(region)
            error_detail = str(e)

        buckets = self._bucket_cache.buckets_for(region)
        if buckets:
            return create_bucket_pick_items(buckets, initial_value)

        return [create_bucket_message_item(message or no_buckets_message(region), error_detail)]

    def _stack_name_step(self) -> StepOutcome:
        self._response.stack_name = self._context.prompt_for_stack_name(
            self._response.stack_name,
            validate_stack_name,
        )

        if self._response.stack_name:
            return StepOutcome.complete()
        return StepOutcome.advance(DeployStep.S3_BUCKET)
