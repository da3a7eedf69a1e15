"""
Unit tests for the AppConfigStack.

These tests synthesize the stack and check the CloudFormation template for
the AppConfig resources, their wiring and the Lambda consumer.
"""

import pytest
import aws_cdk as cdk
from aws_cdk import assertions

from appconfig_poc.appconfig_stack import AppConfigStack
from appconfig_poc.content import ContentTooLargeError
from appconfig_poc.settings import AppConfigSettings

TEST_ENV = cdk.Environment(account="123456789012", region="us-east-1")


def synth(settings=None):
    app = cdk.App()
    stack = AppConfigStack(app, "TestAppConfigStack", settings=settings, env=TEST_ENV)
    return stack, assertions.Template.from_stack(stack)


class TestAppConfigStack:
    """Test suite for the AppConfigStack class."""

    def setup_method(self):
        """Set up test fixtures before each test method."""
        self.stack, self.template = synth()

    def logical_id(self, element):
        return self.stack.get_logical_id(element)

    @pytest.mark.parametrize("resource_type", [
        "AWS::AppConfig::Application",
        "AWS::AppConfig::Environment",
        "AWS::AppConfig::ConfigurationProfile",
        "AWS::AppConfig::HostedConfigurationVersion",
        "AWS::AppConfig::DeploymentStrategy",
        "AWS::AppConfig::Deployment",
    ])
    def test_one_of_each_appconfig_resource(self, resource_type):
        self.template.resource_count_is(resource_type, 1)

    def test_application_name(self):
        self.template.has_resource_properties("AWS::AppConfig::Application", {
            "Name": "poc-appconfig"
        })

    def test_environment_references_application(self):
        self.template.has_resource_properties("AWS::AppConfig::Environment", {
            "ApplicationId": {"Ref": self.logical_id(self.stack.application)},
            "Name": "dev",
        })

    def test_configuration_profile_is_hosted(self):
        self.template.has_resource_properties("AWS::AppConfig::ConfigurationProfile", {
            "ApplicationId": {"Ref": self.logical_id(self.stack.application)},
            "Name": "poc-profile",
            "LocationUri": "hosted",
            "Type": "AWS.Freeform",
        })

    def test_hosted_version_has_inline_content(self):
        """Test that the default payload is inlined as compact JSON."""
        self.template.has_resource_properties("AWS::AppConfig::HostedConfigurationVersion", {
            "ApplicationId": {"Ref": self.logical_id(self.stack.application)},
            "ConfigurationProfileId": {"Ref": self.logical_id(self.stack.profile)},
            "Content": '{"myConfig":{"prop1":true,"prop2":"ciao","prop3":100000}}',
            "ContentType": "application/json",
        })

    def test_immediate_deployment_strategy(self):
        self.template.has_resource_properties("AWS::AppConfig::DeploymentStrategy", {
            "Name": "poc-appconfig-strategy",
            "DeploymentDurationInMinutes": 0,
            "FinalBakeTimeInMinutes": 0,
            "GrowthFactor": 100,
            "GrowthType": "LINEAR",
            "ReplicateTo": "NONE",
        })

    def test_deployment_wiring(self):
        """Test that the deployment references every resource it rolls out."""
        self.template.has_resource_properties("AWS::AppConfig::Deployment", {
            "ApplicationId": {"Ref": self.logical_id(self.stack.application)},
            "EnvironmentId": {"Ref": self.logical_id(self.stack.appconfig_environment)},
            "ConfigurationProfileId": {"Ref": self.logical_id(self.stack.profile)},
            "ConfigurationVersion": {"Ref": self.logical_id(self.stack.hosted_version)},
            "DeploymentStrategyId": {"Ref": self.logical_id(self.stack.strategy)},
        })

    def test_deployment_depends_on_hosted_version(self):
        self.template.has_resource("AWS::AppConfig::Deployment", {
            "DependsOn": assertions.Match.array_with([
                self.logical_id(self.stack.hosted_version)
            ])
        })

    def test_lambda_function_created(self):
        self.template.resource_count_is("AWS::Lambda::Function", 1)
        self.template.has_resource_properties("AWS::Lambda::Function", {
            "Runtime": "python3.12",
            "Handler": "lambda_function.lambda_handler",
            "Timeout": 30,
            "Layers": [
                "arn:aws:lambda:us-east-1:027255383542:layer:AWS-AppConfig-Extension:207"
            ],
        })

    def test_lambda_environment_variables(self):
        self.template.has_resource_properties("AWS::Lambda::Function", {
            "Environment": {
                "Variables": {
                    "APPCONFIG_APPLICATION": "poc-appconfig",
                    "APPCONFIG_ENVIRONMENT": "dev",
                    "APPCONFIG_PROFILE": "poc-profile",
                    "LOG_LEVEL": "INFO",
                }
            }
        })

    def test_lambda_role_allows_appconfig_reads(self):
        self.template.has_resource_properties("AWS::IAM::Role", {
            "AssumeRolePolicyDocument": {
                "Statement": [
                    {
                        "Action": "sts:AssumeRole",
                        "Effect": "Allow",
                        "Principal": {"Service": "lambda.amazonaws.com"},
                    }
                ]
            },
            "Policies": assertions.Match.array_with([
                assertions.Match.object_like({
                    "PolicyName": "AppConfigAccessPolicy",
                    "PolicyDocument": {
                        "Statement": [
                            assertions.Match.object_like({
                                "Action": [
                                    "appconfig:StartConfigurationSession",
                                    "appconfig:GetLatestConfiguration",
                                ],
                                "Effect": "Allow",
                            })
                        ],
                        "Version": "2012-10-17",
                    },
                })
            ]),
        })

    def test_log_group_retention(self):
        self.template.has_resource_properties("AWS::Logs::LogGroup", {
            "RetentionInDays": 7
        })

    def test_outputs(self):
        for output in ("AppConfigApplicationId", "AppConfigEnvironmentId",
                       "ConfigurationProfileId", "FetcherFunctionName"):
            self.template.has_output(output, {})


class TestAppConfigStackSettings:
    """Tests for stacks built from non-default settings."""

    def test_custom_names_and_strategy(self):
        settings = AppConfigSettings(
            application_name="shop",
            environment_name="prod",
            profile_name="flags",
            deployment_duration_in_minutes=10,
            final_bake_time_in_minutes=5,
            growth_factor=20,
            growth_type="EXPONENTIAL",
        )
        _, template = synth(settings)

        template.has_resource_properties("AWS::AppConfig::Environment", {"Name": "prod"})
        template.has_resource_properties("AWS::AppConfig::DeploymentStrategy", {
            "Name": "shop-strategy",
            "DeploymentDurationInMinutes": 10,
            "FinalBakeTimeInMinutes": 5,
            "GrowthFactor": 20,
            "GrowthType": "EXPONENTIAL",
        })

    def test_s3_content_uses_include_transform(self):
        """Test that an S3 location replaces inline content with AWS::Include."""
        settings = AppConfigSettings(content_location="s3://config-bucket/app/config.json")
        _, template = synth(settings)

        template.has_resource_properties("AWS::AppConfig::HostedConfigurationVersion", {
            "Content": {
                "Fn::Transform": {
                    "Name": "AWS::Include",
                    "Parameters": {"Location": "s3://config-bucket/app/config.json"},
                }
            },
            "ContentType": "application/json",
        })

    def test_large_content_with_location_synthesizes(self):
        settings = AppConfigSettings(
            configuration={"blob": "x" * 8000},
            content_location="s3://config-bucket/big.json",
        )
        _, template = synth(settings)

        template.resource_count_is("AWS::AppConfig::HostedConfigurationVersion", 1)

    def test_large_inline_content_is_rejected(self):
        settings = AppConfigSettings(configuration={"blob": "x" * 8000})

        with pytest.raises(ContentTooLargeError):
            synth(settings)

    def test_extension_layer_version(self):
        _, template = synth(AppConfigSettings(extension_layer_version=128))

        template.has_resource_properties("AWS::Lambda::Function", {
            "Layers": [
                "arn:aws:lambda:us-east-1:027255383542:layer:AWS-AppConfig-Extension:128"
            ]
        })
