"""S3 client utilities."""

import json
import logging
import os
from functools import lru_cache
from typing import Any

import boto3
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_s3_client():
    """Get a cached S3 client."""
    endpoint = os.getenv("S3_ENDPOINT")
    if endpoint:
        return boto3.client("s3", endpoint_url=endpoint)
    return boto3.client("s3")


def upload_json_to_s3(data: Any, bucket: str, key: str) -> None:
    """Upload a JSON document to S3 in a single put.

    A single `put_object` is atomic for readers: they see either the previous
    object or the new one.
    """
    body = json.dumps(data, ensure_ascii=False, default=str)

    s3 = get_s3_client()
    s3.put_object(
        Bucket=bucket,
        Key=key,
        Body=body.encode("utf-8"),
        ContentType="application/json",
    )
    logger.info("Uploaded %d bytes to s3://%s/%s", len(body), bucket, key)


def read_s3_bytes(bucket: str, key: str) -> bytes:
    """Read an object from S3 as bytes.

    Args:
        bucket: S3 bucket name
        key: Object key

    Returns:
        Object contents as bytes
    """
    client = get_s3_client()
    response = client.get_object(Bucket=bucket, Key=key)
    return response["Body"].read()
