"""Credential values that point into a cloud secret store.

``NEO4J_PASSWORD=aws-secret://identity-sync#neo4j`` keeps the password in
AWS Secrets Manager; ``gcp-secret://...`` does the same for GCP Secret
Manager. Plain values are used as-is.
"""

from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger("identity_sync.secrets")


def resolve_credential(variable: str, value: str) -> str:
    """Return the plaintext for the credential held in env var ``variable``.

    Formats:
      aws-secret://<secret-id>[#<json-key>]
      gcp-secret://<name>  (project from GCP_PROJECT_ID, latest version)
      gcp-secret://projects/<p>/secrets/<name>/versions/<v>
    """
    scheme, sep, ref = value.partition("://")
    if not sep:
        return value
    if scheme == "aws-secret":
        return _from_aws_secrets_manager(variable, ref)
    if scheme == "gcp-secret":
        return _from_gcp_secret_manager(variable, ref)
    return value


def _from_aws_secrets_manager(variable: str, ref: str) -> str:
    import boto3

    secret_id, _, json_key = ref.partition("#")
    logger.info("%s: reading AWS secret %s", variable, secret_id)
    client = boto3.client(
        "secretsmanager", region_name=os.environ.get("AWS_REGION", "us-east-1")
    )
    payload = client.get_secret_value(SecretId=secret_id)["SecretString"]
    if not json_key:
        return payload

    fields = json.loads(payload)
    if json_key not in fields:
        raise ValueError(f"{variable}: secret {secret_id} has no key '{json_key}'")
    return str(fields[json_key])


def _from_gcp_secret_manager(variable: str, ref: str) -> str:
    from google.cloud import secretmanager

    name = ref
    if not ref.startswith("projects/"):
        project = os.environ.get("GCP_PROJECT_ID")
        if not project:
            raise ValueError(f"{variable}: GCP_PROJECT_ID must be set to read gcp-secret://{ref}")
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    logger.info("%s: reading GCP secret %s", variable, name)
    version = secretmanager.SecretManagerServiceClient().access_secret_version(
        request={"name": name}
    )
    return version.payload.data.decode("UTF-8")
