"""
AppConfig Stack

This CDK stack wires AWS AppConfig resources together with CloudFormation:
- Application, Environment and hosted ConfigurationProfile
- HostedConfigurationVersion with inline JSON, or S3 content pulled in with
  the AWS::Include transform when the document exceeds the 4K inline limit
- Immediate DeploymentStrategy and the Deployment of the hosted version
- Lambda function reading the configuration through the AppConfig extension
"""

from pathlib import Path
from typing import Optional

from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Stack,
    aws_appconfig as appconfig,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_logs as logs,
)
from constructs import Construct

from appconfig_poc.content import hosted_content
from appconfig_poc.settings import AppConfigSettings


LAMBDA_CODE_DIR = Path(__file__).parent / "lambda_code"

# Account publishing the AWS-AppConfig-Extension layer in commercial regions
EXTENSION_LAYER_ACCOUNT = "027255383542"


class AppConfigStack(Stack):
    """
    CDK Stack declaring an AppConfig application and a Lambda consumer.

    The Deployment depends explicitly on the HostedConfigurationVersion so
    CloudFormation never starts a rollout before the version exists.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: Optional[AppConfigSettings] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.settings = settings or AppConfigSettings()

        self.application = self._create_application()
        self.appconfig_environment = self._create_environment()
        self.profile = self._create_configuration_profile()
        self.hosted_version = self._create_hosted_configuration_version()
        self.strategy = self._create_deployment_strategy()
        self.deployment = self._create_deployment()

        self.function = self._create_fetcher_function()
        self._create_outputs()

    def _create_application(self) -> appconfig.CfnApplication:
        return appconfig.CfnApplication(
            self, "Application",
            name=self.settings.application_name,
            description="AppConfig proof of concept application",
        )

    def _create_environment(self) -> appconfig.CfnEnvironment:
        return appconfig.CfnEnvironment(
            self, "Environment",
            application_id=self.application.ref,
            name=self.settings.environment_name,
        )

    def _create_configuration_profile(self) -> appconfig.CfnConfigurationProfile:
        return appconfig.CfnConfigurationProfile(
            self, "ConfigurationProfile",
            application_id=self.application.ref,
            name=self.settings.profile_name,
            location_uri="hosted",
            type="AWS.Freeform",
        )

    def _create_hosted_configuration_version(self) -> appconfig.CfnHostedConfigurationVersion:
        """Create the hosted version, inline or included from S3."""
        content = hosted_content(
            self.settings.configuration,
            self.settings.content_location,
        )
        return appconfig.CfnHostedConfigurationVersion(
            self, "HostedConfigurationVersion",
            application_id=self.application.ref,
            configuration_profile_id=self.profile.ref,
            content=content,
            content_type="application/json",
        )

    def _create_deployment_strategy(self) -> appconfig.CfnDeploymentStrategy:
        return appconfig.CfnDeploymentStrategy(
            self, "DeploymentStrategy",
            name=f"{self.settings.application_name}-strategy",
            deployment_duration_in_minutes=self.settings.deployment_duration_in_minutes,
            final_bake_time_in_minutes=self.settings.final_bake_time_in_minutes,
            growth_factor=self.settings.growth_factor,
            growth_type=self.settings.growth_type,
            replicate_to=self.settings.replicate_to,
        )

    def _create_deployment(self) -> appconfig.CfnDeployment:
        deployment = appconfig.CfnDeployment(
            self, "Deployment",
            application_id=self.application.ref,
            environment_id=self.appconfig_environment.ref,
            configuration_profile_id=self.profile.ref,
            configuration_version=self.hosted_version.ref,
            deployment_strategy_id=self.strategy.ref,
        )
        deployment.add_dependency(self.hosted_version)
        return deployment

    def _create_fetcher_function(self) -> lambda_.Function:
        """Create the Lambda function with the AppConfig extension layer."""
        configuration_arn = (
            f"arn:aws:appconfig:{self.region}:{self.account}"
            f":application/{self.application.ref}"
            f"/environment/{self.appconfig_environment.ref}"
            f"/configuration/{self.profile.ref}"
        )

        role = iam.Role(
            self, "FetcherRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ],
            inline_policies={
                "AppConfigAccessPolicy": iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=[
                                "appconfig:StartConfigurationSession",
                                "appconfig:GetLatestConfiguration",
                            ],
                            resources=[configuration_arn],
                        )
                    ]
                )
            },
            description="Lets the fetcher read its AppConfig configuration",
        )

        log_group = logs.LogGroup(
            self, "FetcherLogGroup",
            retention=logs.RetentionDays.ONE_WEEK,
            removal_policy=RemovalPolicy.DESTROY,
        )

        extension_layer = lambda_.LayerVersion.from_layer_version_arn(
            self, "AppConfigExtensionLayer",
            f"arn:aws:lambda:{self.region}:{EXTENSION_LAYER_ACCOUNT}"
            f":layer:AWS-AppConfig-Extension:{self.settings.extension_layer_version}",
        )

        return lambda_.Function(
            self, "FetcherFunction",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="lambda_function.lambda_handler",
            code=lambda_.Code.from_asset(
                str(LAMBDA_CODE_DIR),
                exclude=["__pycache__", "*.pyc", "__init__.py"],
            ),
            role=role,
            timeout=Duration.seconds(30),
            memory_size=128,
            layers=[extension_layer],
            log_group=log_group,
            environment={
                "APPCONFIG_APPLICATION": self.settings.application_name,
                "APPCONFIG_ENVIRONMENT": self.settings.environment_name,
                "APPCONFIG_PROFILE": self.settings.profile_name,
                "LOG_LEVEL": "INFO",
            },
            description="Reads configuration from the local AppConfig agent",
        )

    def _create_outputs(self) -> None:
        CfnOutput(
            self, "AppConfigApplicationId",
            description="AppConfig Application ID",
            value=self.application.ref,
        )
        CfnOutput(
            self, "AppConfigEnvironmentId",
            description="AppConfig Environment ID",
            value=self.appconfig_environment.ref,
        )
        CfnOutput(
            self, "ConfigurationProfileId",
            description="Configuration Profile ID",
            value=self.profile.ref,
        )
        CfnOutput(
            self, "FetcherFunctionName",
            description="Lambda Function Name",
            value=self.function.function_name,
        )
