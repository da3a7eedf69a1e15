#!/usr/bin/env python3
"""
AppConfig via CloudFormation
AWS CDK Python Implementation

This CDK application synthesizes the CloudFormation template for:
- An AppConfig application, environment and hosted configuration profile
- A hosted JSON configuration version (inline, or included from S3)
- A deployment strategy and the deployment of that version
- A Lambda function reading the configuration from the AppConfig extension
"""

import os

from aws_cdk import (
    App,
    Environment,
    Tags,
)

from appconfig_poc.appconfig_stack import AppConfigStack
from appconfig_poc.settings import AppConfigSettings


def main() -> None:
    """Main CDK application entry point."""
    app = App()

    settings = AppConfigSettings.from_context(app.node)

    env = Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT") or app.node.try_get_context("account"),
        region=os.getenv("CDK_DEFAULT_REGION") or app.node.try_get_context("region"),
    )

    stack = AppConfigStack(
        app,
        "AppConfigPocStack",
        settings=settings,
        env=env,
        description="AppConfig resources wired through CloudFormation",
    )

    Tags.of(stack).add("Project", "AppConfigPoc")
    Tags.of(stack).add("Environment", settings.environment_name)

    app.synth()


if __name__ == "__main__":
    main()
