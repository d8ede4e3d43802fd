"""samdeploy — interactive wizard for deploying AWS SAM applications.

The wizard walks the user through choosing a template, parameter
overrides, a region, an S3 bucket and a stack name, then hands the
completed answers to the SAM CLI to package and deploy.
"""

VERSION = "0.1.0b1"
