"""
AWS Lambda Function reading AppConfig through the AppConfig Lambda Extension

The extension runs next to the function and serves the deployed configuration
from its cache on http://localhost:2772. This function issues one GET against
that endpoint, reads the body to the end, and returns it parsed as JSON.

Failures are split into two kinds:
- AgentTransportError: the agent could not be reached, the body stream broke,
  or the agent answered with a non-200 status (AgentStatusError)
- MalformedConfigurationError: the body is empty or not JSON

Both propagate out of the handler so Lambda reports the invocation as failed.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import urllib3

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

AGENT_HOST = "localhost"
DEFAULT_AGENT_PORT = 2772
CHUNK_SIZE = 1024

DEFAULT_APPLICATION = "poc-appconfig"
DEFAULT_ENVIRONMENT = "dev"
DEFAULT_PROFILE = "poc-profile"

# Reused across warm invocations
http = urllib3.PoolManager()


class ConfigurationFetchError(Exception):
    """Base class for failures while retrieving configuration from the agent."""


class AgentTransportError(ConfigurationFetchError):
    """The agent was unreachable or the response stream was interrupted."""


class AgentStatusError(AgentTransportError):
    """The agent answered with a status other than 200."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"AppConfig agent returned HTTP {status}: {body}")
        self.status = status
        self.body = body


class MalformedConfigurationError(ConfigurationFetchError):
    """The response body is not a JSON document."""


def agent_url(application: str, environment: str, profile: str,
              port: int = DEFAULT_AGENT_PORT) -> str:
    """Build the local agent URL for an application/environment/profile triple."""
    return (
        f"http://{AGENT_HOST}:{port}"
        f"/applications/{quote(application, safe='')}"
        f"/environments/{quote(environment, safe='')}"
        f"/configurations/{quote(profile, safe='')}"
    )


def read_body(response: Any) -> bytes:
    chunks: List[bytes] = []
    for chunk in response.stream(CHUNK_SIZE):
        chunks.append(chunk)
    return b"".join(chunks)


def parse_configuration(body: bytes) -> Any:
    """
    Parse a complete response body as JSON.

    Raises:
        MalformedConfigurationError: if the body is empty, not UTF-8 or not JSON
    """
    if not body:
        raise MalformedConfigurationError("AppConfig agent returned an empty body")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedConfigurationError(f"Configuration is not UTF-8: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedConfigurationError(f"Failed to parse configuration JSON: {e}") from e


def fetch_configuration(url: str, pool: Optional[urllib3.PoolManager] = None) -> Any:
    """
    Retrieve and parse the configuration served at ``url``.

    The body is accumulated chunk by chunk; nothing is returned unless the
    stream completes. No retries and no timeout are applied.

    Args:
        url: Local agent URL, see agent_url()
        pool: urllib3 pool to use, defaults to the module-level pool

    Returns:
        The parsed JSON value
    """
    if pool is None:
        pool = http

    try:
        response = pool.request("GET", url, preload_content=False, retries=False)
    except urllib3.exceptions.HTTPError as e:
        raise AgentTransportError(f"Could not reach AppConfig agent at {url}: {e}") from e

    try:
        body = read_body(response)
    except urllib3.exceptions.HTTPError as e:
        raise AgentTransportError(f"Configuration stream from {url} was interrupted: {e}") from e
    finally:
        response.release_conn()

    raw = body.decode("utf-8", errors="replace")
    logger.info(f"AppConfig agent response ({len(body)} bytes): {raw}")

    if response.status != 200:
        raise AgentStatusError(response.status, raw)

    return parse_configuration(body)


def lambda_handler(event: Dict[str, Any], context: Any) -> Any:
    """
    Main Lambda function handler returning the deployed configuration.

    Args:
        event: Lambda event data (not used)
        context: Lambda runtime information

    Returns:
        The configuration document as parsed JSON
    """
    url = agent_url(
        os.environ.get("APPCONFIG_APPLICATION", DEFAULT_APPLICATION),
        os.environ.get("APPCONFIG_ENVIRONMENT", DEFAULT_ENVIRONMENT),
        os.environ.get("APPCONFIG_PROFILE", DEFAULT_PROFILE),
        port=int(os.environ.get("AWS_APPCONFIG_EXTENSION_HTTP_PORT", DEFAULT_AGENT_PORT)),
    )
    logger.info(f"Retrieving configuration from: {url}")
    return fetch_configuration(url)
