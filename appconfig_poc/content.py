"""
Hosted configuration content for AWS::AppConfig::HostedConfigurationVersion.

CloudFormation accepts at most 4K of inline ``Content``. Larger documents are
uploaded to S3 and pulled into the template at deploy time through the
``AWS::Include`` transform.
"""

import json
from typing import Any, Optional, Tuple

from aws_cdk import Fn, Token


INLINE_CONTENT_LIMIT = 4096

S3_SCHEME = "s3://"


class ContentTooLargeError(ValueError):
    """Raised when a document exceeds the inline limit and has no S3 location."""

    def __init__(self, size: int):
        super().__init__(
            f"Configuration content is {size} bytes, above the {INLINE_CONTENT_LIMIT} "
            "byte inline limit. Publish it to S3 and set content_location."
        )
        self.size = size


def serialize_configuration(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def fits_inline(document: str) -> bool:
    return len(document.encode("utf-8")) <= INLINE_CONTENT_LIMIT


def parse_s3_location(uri: str) -> Tuple[str, str]:
    """Split ``s3://bucket/key`` into its bucket and key."""
    if not uri or not uri.startswith(S3_SCHEME):
        raise ValueError(f"Expected an s3:// location, got {uri!r}")
    bucket, _, key = uri[len(S3_SCHEME):].partition("/")
    if not bucket or not key:
        raise ValueError(f"S3 location {uri!r} must name both a bucket and a key")
    return bucket, key


def include_transform(location: str) -> str:
    """Return an ``Fn::Transform`` token that includes the document at ``location``."""
    parse_s3_location(location)
    return Token.as_string(Fn.transform("AWS::Include", {"Location": location}))


def hosted_content(payload: Any, content_location: Optional[str] = None) -> str:
    """
    Pick the ``Content`` value for the hosted configuration version.

    With a location the S3 document is included; otherwise the payload is
    inlined and must fit the CloudFormation limit.
    """
    if content_location:
        return include_transform(content_location)

    document = serialize_configuration(payload)
    if not fits_inline(document):
        raise ContentTooLargeError(len(document.encode("utf-8")))
    return document
