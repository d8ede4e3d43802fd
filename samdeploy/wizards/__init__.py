"""Wizard framework — engine, bucket cache, and the SAM deploy wizard."""

from samdeploy.wizards.bucket_cache import BucketPickItem, RegionBucketCache, normalize_location
from samdeploy.wizards.deploy_wizard import (
    DeployStep,
    ParameterPromptResult,
    ProjectWizardContext,
    SamDeployWizard,
    SamDeployWizardContext,
    SamDeployWizardResponse,
    validate_stack_name,
)
from samdeploy.wizards.engine import MultiStepWizard, StepOutcome, WizardIncompleteError

__all__ = [
    "BucketPickItem",
    "DeployStep",
    "MultiStepWizard",
    "ParameterPromptResult",
    "ProjectWizardContext",
    "RegionBucketCache",
    "SamDeployWizard",
    "SamDeployWizardContext",
    "SamDeployWizardResponse",
    "StepOutcome",
    "WizardIncompleteError",
    "normalize_location",
    "validate_stack_name",
]
