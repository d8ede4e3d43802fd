"""Tests for samdeploy.deploy — package, deploy, report, clean up."""

import os
from pathlib import Path
from unittest.mock import MagicMock

from knack.util import CLIError

from samdeploy.deploy import DeployResult, deploy_sam_application
from samdeploy.wizards.deploy_wizard import SamDeployWizardResponse

RESPONSE = SamDeployWizardResponse(
    template=Path("/work/app/template.yaml"),
    region="us-west-2",
    s3_bucket="my-bucket",
    stack_name="MyStack",
    parameter_overrides={"Foo": "bar"},
)


def _wizard(response=RESPONSE):
    wizard = MagicMock()
    wizard.run.return_value = response
    return wizard


class TestDeploySamApplication:
    """deploy_sam_application() end to end with a mocked invoker."""

    def test_cancelled_wizard_does_nothing(self, mock_invoker, capture_console):
        console, buffer = capture_console
        assert deploy_sam_application(_wizard(None), mock_invoker, console) is None
        mock_invoker.package.assert_not_called()
        mock_invoker.deploy.assert_not_called()
        assert buffer.getvalue() == ""

    def test_packages_then_deploys(self, mock_invoker, capture_console):
        console, buffer = capture_console
        result = deploy_sam_application(_wizard(), mock_invoker, console)

        package_args = mock_invoker.package.call_args
        template, output_template, bucket = package_args.args
        assert template == str(RESPONSE.template)
        assert os.path.basename(output_template) == "template.yaml"
        assert bucket == "my-bucket"
        assert package_args.kwargs == {"region": "us-west-2"}

        mock_invoker.deploy.assert_called_once_with(
            output_template,
            "MyStack",
            region="us-west-2",
            parameter_overrides={"Foo": "bar"},
        )

        assert result == DeployResult(
            stack_name="MyStack",
            s3_bucket="my-bucket",
            region="us-west-2",
            template=str(RESPONSE.template),
            succeeded=True,
            stage="deploying",
            parameter_overrides={"Foo": "bar"},
        )

        output = buffer.getvalue()
        assert "Deploy SAM Application" in output
        assert "Foo = bar" in output
        assert "Packaging SAM Application to S3 Bucket: my-bucket" in output
        assert "Deploying MyStack stack..." in output
        assert "Successfully deployed SAM Application to CloudFormation Stack: MyStack" in output

    def test_temp_dir_removed_after_success(self, mock_invoker, capture_console):
        console, _ = capture_console
        seen = {}

        def package(template, output_template, bucket, region=None):
            seen["dir"] = os.path.dirname(output_template)
            assert os.path.isdir(seen["dir"])

        mock_invoker.package.side_effect = package
        deploy_sam_application(_wizard(), mock_invoker, console)

        assert not os.path.exists(seen["dir"])

    def test_packaging_failure_reported(self, mock_invoker, capture_console):
        console, buffer = capture_console
        seen = {}

        def package(template, output_template, bucket, region=None):
            seen["dir"] = os.path.dirname(output_template)
            raise CLIError("sam package encountered an error: no bucket")

        mock_invoker.package.side_effect = package
        result = deploy_sam_application(_wizard(), mock_invoker, console)

        assert result.succeeded is False
        assert result.stage == "packaging"
        assert result.error == "sam package encountered an error: no bucket"
        mock_invoker.deploy.assert_not_called()
        assert (
            "Failed to deploy SAM application. Error while packaging: "
            "sam package encountered an error: no bucket"
        ) in buffer.getvalue()
        assert not os.path.exists(seen["dir"])

    def test_deploy_failure_reported(self, mock_invoker, capture_console):
        console, buffer = capture_console
        mock_invoker.deploy.side_effect = CLIError("sam deploy encountered an error: [Errno 1] denied")

        result = deploy_sam_application(_wizard(), mock_invoker, console)

        assert result.succeeded is False
        assert result.stage == "deploying"
        output = buffer.getvalue()
        assert "Error while deploying: sam deploy encountered an error: [Errno 1] denied" in output
        assert "Successfully deployed" not in output
