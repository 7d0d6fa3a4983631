"""Metadata about the AWS infrastructure that hosts the traced application."""

from __future__ import annotations

import json
import socket
import urllib.request
from dataclasses import dataclass
from typing import Any

from . import logger

__all__ = [
    "EB_SERVICE_NAME",
    "EC2_SERVICE_NAME",
    "ECS_SERVICE_NAME",
    "BEANSTALK_ORIGIN",
    "EC2_ORIGIN",
    "ECS_ORIGIN",
    "BEANSTALK_CONFIG_PATH",
    "IMDS_URL",
    "EC2Metadata",
    "ECSMetadata",
    "BeanstalkMetadata",
    "PluginMetadata",
    "INSTANCE_PLUGIN_METADATA",
    "init_beanstalk",
    "init_ec2",
    "init_ecs",
    "add_beanstalk_metadata",
    "add_ec2_metadata",
    "add_ecs_metadata",
    "get_token",
    "get_metadata",
]

EB_SERVICE_NAME = "elastic_beanstalk"
EC2_SERVICE_NAME = "ec2"
ECS_SERVICE_NAME = "ecs"

BEANSTALK_ORIGIN = "AWS::ElasticBeanstalk::Environment"
EC2_ORIGIN = "AWS::EC2::Instance"
ECS_ORIGIN = "AWS::ECS::Container"

BEANSTALK_CONFIG_PATH = "/var/elasticbeanstalk/xray/environment.conf"
IMDS_URL = "http://169.254.169.254/latest/"

_TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
_TOKEN_TTL_SECONDS = "60"
_TOKEN_HEADER = "X-aws-ec2-metadata-token"
_HTTP_TIMEOUT = 30.0


@dataclass
class EC2Metadata:
    """The EC2 instance ID and availability zone."""

    instance_id: str = ""
    availability_zone: str = ""


@dataclass
class ECSMetadata:
    """The ECS container name."""

    container_name: str = ""


@dataclass
class BeanstalkMetadata:
    """Elastic Beanstalk environment name, version label and deployment ID."""

    environment: str = ""
    version_label: str = ""
    deployment_id: int = 0


@dataclass
class PluginMetadata:
    """Information about the AWS resources hosting the application."""

    ec2_metadata: EC2Metadata | None = None
    beanstalk_metadata: BeanstalkMetadata | None = None
    ecs_metadata: ECSMetadata | None = None
    origin: str = ""


INSTANCE_PLUGIN_METADATA: PluginMetadata | None = PluginMetadata()


def init_beanstalk() -> None:
    """Record Elastic Beanstalk metadata unless it is already present."""
    metadata = INSTANCE_PLUGIN_METADATA
    if metadata is not None and metadata.beanstalk_metadata is None:
        add_beanstalk_metadata(metadata)


def init_ec2() -> None:
    """Record EC2 metadata unless it is already present."""
    metadata = INSTANCE_PLUGIN_METADATA
    if metadata is not None and metadata.ec2_metadata is None:
        add_ec2_metadata(metadata)


def init_ecs() -> None:
    """Record ECS metadata unless it is already present."""
    metadata = INSTANCE_PLUGIN_METADATA
    if metadata is not None and metadata.ecs_metadata is None:
        add_ecs_metadata(metadata)


def _lowered(document: Any) -> dict[str, Any] | None:
    """Return the object's keys lower-cased, or None if it is not an object."""
    if not isinstance(document, dict):
        return None
    return {str(key).lower(): value for key, value in document.items()}


def _string_field(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} is not a string")
    return value


def _int_field(fields: dict[str, Any], name: str) -> int:
    value = fields.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name!r} is not an integer")
    return value


def add_beanstalk_metadata(
    metadata: PluginMetadata, config_path: str = BEANSTALK_CONFIG_PATH
) -> None:
    """Read the Beanstalk configuration file into ``metadata``; log and keep it on failure."""
    try:
        with open(config_path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        logger.error(
            "Unable to read Elastic Beanstalk configuration file %s: %s", config_path, exc
        )
        return

    try:
        fields = _lowered(json.loads(raw))
        if fields is None:
            raise ValueError("configuration is not a JSON object")
        config = BeanstalkMetadata(
            environment=_string_field(fields, "environment_name"),
            version_label=_string_field(fields, "version_label"),
            deployment_id=_int_field(fields, "deployment_id"),
        )
    except ValueError as exc:
        logger.error(
            "Unable to unmarshal Elastic Beanstalk configuration file %s: %s",
            config_path,
            exc,
        )
        return

    metadata.beanstalk_metadata = config
    metadata.origin = BEANSTALK_ORIGIN


def add_ec2_metadata(metadata: PluginMetadata, imds_url: str = IMDS_URL) -> None:
    """Fetch the instance identity document into ``metadata``; log and keep it on failure."""
    try:
        token = get_token(imds_url)
    except OSError as exc:
        logger.debug(
            "Unable to fetch EC2 instance metadata token fallback to IMDS V1: %s", exc
        )
        token = ""

    try:
        body = get_metadata(imds_url, token)
    except OSError as exc:
        logger.error("Unable to read EC2 instance metadata: %s", exc)
        return

    try:
        fields = _lowered(json.loads(body))
        if fields is None:
            raise ValueError("instance identity document is not a JSON object")
        ec2 = EC2Metadata(
            instance_id=_string_field(fields, "instanceid"),
            availability_zone=_string_field(fields, "availabilityzone"),
        )
    except ValueError as exc:
        logger.error("Error while unmarshal operation: %s", exc)
        return

    metadata.ec2_metadata = ec2
    metadata.origin = EC2_ORIGIN


def _fetch(request: urllib.request.Request) -> bytes:
    try:
        with urllib.request.urlopen(request, timeout=_HTTP_TIMEOUT) as response:
            return response.read()
    except ValueError as exc:
        raise OSError(f"invalid request URL {request.full_url!r}: {exc}") from exc


def get_token(imds_url: str) -> str:
    """Fetch an IMDSv2 session token; raise OSError on failure."""
    try:
        request = urllib.request.Request(
            imds_url + "api/token",
            method="PUT",
            headers={_TOKEN_TTL_HEADER: _TOKEN_TTL_SECONDS},
        )
    except ValueError as exc:
        raise OSError(f"invalid token URL {imds_url!r}: {exc}") from exc
    return _fetch(request).decode("utf-8", errors="replace")


def get_metadata(imds_url: str, token: str) -> bytes:
    """Fetch the instance identity document, using ``token`` when it is not empty."""
    headers = {_TOKEN_HEADER: token} if token else {}
    try:
        request = urllib.request.Request(
            imds_url + "dynamic/instance-identity/document",
            method="GET",
            headers=headers,
        )
    except ValueError as exc:
        raise OSError(f"invalid metadata URL {imds_url!r}: {exc}") from exc
    return _fetch(request)


def add_ecs_metadata(metadata: PluginMetadata) -> None:
    """Record the host name as the ECS container name; log and keep it on failure."""
    try:
        hostname = socket.gethostname()
    except OSError as exc:
        logger.error("Unable to retrieve hostname from OS. %s", exc)
        return

    metadata.ecs_metadata = ECSMetadata(container_name=hostname)
    metadata.origin = ECS_ORIGIN