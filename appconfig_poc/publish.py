"""
Upload a configuration document to S3 for the AWS::Include workaround.

CloudFormation resolves AWS::Include while creating the change set, so the
document must already be in S3 when the stack is deployed:

    appconfig-publish --file config.json --location s3://my-bucket/config.json
    cdk deploy -c content_location=s3://my-bucket/config.json
"""

import argparse
import json
import logging
import sys
from typing import Any, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from appconfig_poc.content import fits_inline, parse_s3_location, serialize_configuration

logger = logging.getLogger(__name__)


def publish_configuration(payload: Any, location: str, s3_client: Any = None) -> str:
    """
    Store ``payload`` as JSON at the S3 ``location``.

    Args:
        payload: Configuration document
        location: Target as s3://bucket/key
        s3_client: boto3 S3 client, created on demand when omitted

    Returns:
        The location, ready to pass as the content_location context value
    """
    bucket, key = parse_s3_location(location)
    document = serialize_configuration(payload)

    if fits_inline(document):
        logger.info("Document fits inline; S3 hosting is optional for it")

    if s3_client is None:
        s3_client = boto3.client("s3")

    try:
        s3_client.put_object(
            Bucket=bucket,
            Key=key,
            Body=document.encode("utf-8"),
            ContentType="application/json",
        )
    except ClientError as e:
        logger.error(f"Failed to upload configuration to {location}: {e}")
        raise

    logger.info(f"Uploaded {len(document)} bytes of configuration to {location}")
    return location


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Upload an AppConfig JSON document to S3 for AWS::Include"
    )
    parser.add_argument("--file", required=True, help="Path to the JSON configuration document")
    parser.add_argument("--location", required=True, help="Target S3 URI (s3://bucket/key)")
    parser.add_argument("--region", help="AWS region of the bucket")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read configuration from {args.file}: {e}")
        return 1

    try:
        s3_client = boto3.client("s3", region_name=args.region) if args.region else None
        location = publish_configuration(payload, args.location, s3_client=s3_client)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Upload failed: {e}")
        return 1

    print(f"cdk deploy -c content_location={location}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
