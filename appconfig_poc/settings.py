"""
Stack settings for the AppConfig proof of concept.

Values come from CDK context (cdk.json or ``cdk deploy -c key=value``) and
fall back to the defaults below, which describe a single hosted JSON
configuration rolled out with an immediate deployment strategy.
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from constructs import Node


DEFAULT_APPLICATION_NAME = "poc-appconfig"
DEFAULT_ENVIRONMENT_NAME = "dev"
DEFAULT_PROFILE_NAME = "poc-profile"

DEFAULT_CONFIGURATION: Dict[str, Any] = {
    "myConfig": {
        "prop1": True,
        "prop2": "ciao",
        "prop3": 100000,
    }
}

# Published version of the AWS-AppConfig-Extension Lambda layer
DEFAULT_EXTENSION_LAYER_VERSION = 207

GROWTH_TYPES = ("LINEAR", "EXPONENTIAL")
REPLICATE_TO = ("NONE", "SSM_DOCUMENT")


@dataclass
class AppConfigSettings:
    """Names and rollout knobs for the AppConfig resources of the stack."""

    application_name: str = DEFAULT_APPLICATION_NAME
    environment_name: str = DEFAULT_ENVIRONMENT_NAME
    profile_name: str = DEFAULT_PROFILE_NAME
    configuration: Dict[str, Any] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_CONFIGURATION)
    )
    content_location: Optional[str] = None
    deployment_duration_in_minutes: int = 0
    final_bake_time_in_minutes: int = 0
    growth_factor: float = 100
    growth_type: str = "LINEAR"
    replicate_to: str = "NONE"
    extension_layer_version: int = DEFAULT_EXTENSION_LAYER_VERSION

    def __post_init__(self) -> None:
        for attr in ("application_name", "environment_name", "profile_name"):
            if not getattr(self, attr):
                raise ValueError(f"{attr} must not be empty")
        if not 1 <= self.growth_factor <= 100:
            raise ValueError(
                f"growth_factor must be between 1 and 100, got {self.growth_factor}"
            )
        if self.growth_type not in GROWTH_TYPES:
            raise ValueError(
                f"growth_type must be one of {GROWTH_TYPES}, got {self.growth_type!r}"
            )
        if self.replicate_to not in REPLICATE_TO:
            raise ValueError(
                f"replicate_to must be one of {REPLICATE_TO}, got {self.replicate_to!r}"
            )
        if self.deployment_duration_in_minutes < 0 or self.final_bake_time_in_minutes < 0:
            raise ValueError("Deployment and bake durations must not be negative")

    @classmethod
    def from_context(cls, node: Node) -> "AppConfigSettings":
        """
        Build settings from the CDK context of ``node``.

        Context values given on the command line arrive as strings, so numeric
        keys are converted here. ``configuration_file`` points to a JSON
        document that replaces the default payload.
        """
        kwargs: Dict[str, Any] = {}

        for key in ("application_name", "environment_name", "profile_name",
                    "content_location", "growth_type", "replicate_to"):
            value = node.try_get_context(key)
            if value:
                kwargs[key] = str(value)

        for key in ("deployment_duration_in_minutes", "final_bake_time_in_minutes",
                    "extension_layer_version"):
            value = node.try_get_context(key)
            if value is not None:
                kwargs[key] = int(value)

        growth_factor = node.try_get_context("growth_factor")
        if growth_factor is not None:
            kwargs["growth_factor"] = float(growth_factor)

        configuration_file = node.try_get_context("configuration_file")
        if configuration_file:
            kwargs["configuration"] = load_configuration_file(configuration_file)

        return cls(**kwargs)


def load_configuration_file(path: str) -> Dict[str, Any]:
    """Read a JSON configuration payload from disk."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Configuration file {path} is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError(f"Configuration file {path} must contain a JSON object")
    return payload
