"""Deploy a SAM application.

Runs the :class:`~samdeploy.wizards.SamDeployWizard`, then packages the
chosen template into the chosen S3 bucket and deploys the packaged template
as a CloudFormation stack.  Progress and failures are reported through the
console; packaging artifacts live in a temporary directory that is always
removed.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field

from knack.util import CLIError
from rich.markup import escape

from samdeploy.clients.s3 import S3Client
from samdeploy.config import ProjectConfig
from samdeploy.sam.cli import DefaultSamCliInvoker, DefaultSamCliProcessInvoker, DefaultSamCliTaskInvoker, SamCliInvoker
from samdeploy.sam.locator import SamCliConfiguration
from samdeploy.ui.console import Console, console as default_console
from samdeploy.wizards.deploy_wizard import SamDeployWizard, SamDeployWizardContext, SamDeployWizardResponse

logger = logging.getLogger(__name__)

PACKAGED_TEMPLATE_NAME = "template.yaml"


@dataclass
class DeployResult:
    """What happened after the wizard produced a response."""

    stack_name: str
    s3_bucket: str
    region: str
    template: str
    succeeded: bool
    stage: str
    error: str | None = None
    parameter_overrides: dict[str, str] = field(default_factory=dict)


# ======================================================================
# Wiring from project configuration
# ======================================================================


def create_sam_cli_invoker(config: ProjectConfig) -> DefaultSamCliInvoker:
    """Build a SAM CLI invoker honouring ``sam_cli.location`` and
    ``deploy.capabilities``."""
    configuration = SamCliConfiguration(config)
    return DefaultSamCliInvoker(
        process_invoker=DefaultSamCliProcessInvoker(configuration),
        task_invoker=DefaultSamCliTaskInvoker(configuration),
        capabilities=config.get_capabilities(),
    )


def create_deploy_wizard(
    config: ProjectConfig,
    context: SamDeployWizardContext,
    s3_client: S3Client,
) -> SamDeployWizard:
    """Build a deploy wizard seeded from ``deploy.region`` and
    ``deploy.bucket_lookup_workers``."""
    return SamDeployWizard(
        context,
        s3_client,
        initial_region=config.get("deploy.region") or None,
        bucket_lookup_workers=config.get_bucket_lookup_workers(),
    )


# ======================================================================
# Command
# ======================================================================


def _summary(response: SamDeployWizardResponse) -> str:
    lines = [
        f"Template:   [path]{escape(str(response.template))}[/path]",
        f"Region:     {escape(response.region)}",
        f"S3 bucket:  [resource]{escape(response.s3_bucket)}[/resource]",
        f"Stack name: [resource]{escape(response.stack_name)}[/resource]",
    ]
    if response.parameter_overrides:
        lines.append("Parameter overrides:")
        lines.extend(f"  {escape(k)} = {escape(v)}" for k, v in response.parameter_overrides.items())
    return "\n".join(lines)


def deploy_sam_application(
    wizard: SamDeployWizard,
    invoker: SamCliInvoker | None = None,
    console: Console | None = None,
) -> DeployResult | None:
    """Run the deploy wizard, then package and deploy the application.

    Args:
        wizard: A fresh wizard; it is run exactly once.
        invoker: SAM CLI invoker (defaults to :class:`DefaultSamCliInvoker`).
        console: Output console (defaults to the module-level console).

    Returns:
        ``None`` if the user cancelled the wizard, otherwise a
        :class:`DeployResult`.  Packaging and deployment failures are
        reported on the console and in the result rather than raised.
    """
    console = console or default_console
    response = wizard.run()
    if response is None:
        logger.info("Deploy wizard cancelled")
        return None

    invoker = invoker or DefaultSamCliInvoker()
    result = DeployResult(
        stack_name=response.stack_name,
        s3_bucket=response.s3_bucket,
        region=response.region,
        template=str(response.template),
        succeeded=False,
        stage="packaging",
        parameter_overrides=dict(response.parameter_overrides),
    )

    console.print_header("Deploy SAM Application")
    console.panel(_summary(response), title="Deployment")

    temp_dir = tempfile.mkdtemp(prefix="samDeploy")
    output_template_path = os.path.join(temp_dir, PACKAGED_TEMPLATE_NAME)
    try:
        console.print_info(f"Packaging SAM Application to S3 Bucket: [resource]{escape(response.s3_bucket)}[/resource]")
        with console.spinner("Packaging"):
            invoker.package(
                str(response.template),
                output_template_path,
                response.s3_bucket,
                region=response.region,
            )

        result.stage = "deploying"
        console.print_info(f"Deploying [resource]{escape(response.stack_name)}[/resource] stack...")
        with console.spinner("Deploying"):
            invoker.deploy(
                output_template_path,
                response.stack_name,
                region=response.region,
                parameter_overrides=response.parameter_overrides,
            )

        result.succeeded = True
        console.print_success(f"Successfully deployed SAM Application to CloudFormation Stack: {escape(response.stack_name)}")
    except (CLIError, OSError) as exc:
        result.error = str(exc)
        logger.error("SAM deploy failed while %s: %s", result.stage, exc)
        console.print_error(f"Failed to deploy SAM application. Error while {result.stage}: {escape(str(exc))}")
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    return result
