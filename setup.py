"""
Setup configuration for the AppConfig via CloudFormation CDK application

This package provides the CDK stack declaring the AppConfig resources, the
Lambda function reading configuration from the AppConfig extension, and a
helper uploading large documents to S3 for the AWS::Include workaround.
"""

import setuptools

# Read the long description from README
try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "AppConfig via CloudFormation - CDK Python Implementation"

setuptools.setup(
    name="appconfig-cloudformation-poc",
    version="1.0.0",

    description="AWS AppConfig wired through CloudFormation with a Lambda consumer",
    long_description=long_description,
    long_description_content_type="text/markdown",

    python_requires=">=3.9",

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Utilities",
    ],

    packages=setuptools.find_packages(exclude=["tests"]),
    py_modules=["app"],

    install_requires=[
        "aws-cdk-lib>=2.170.0",
        "constructs>=10.0.0,<11.0.0",
        "boto3>=1.34.0",
        "urllib3>=1.26.0",
    ],

    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ]
    },

    entry_points={
        "console_scripts": [
            "cdk-appconfig=app:main",
            "appconfig-publish=appconfig_poc.publish:main",
        ],
    },

    include_package_data=True,
    zip_safe=False,
)
