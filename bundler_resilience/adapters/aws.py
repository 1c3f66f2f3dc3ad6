# /bundler_resilience/adapters/aws.py
# boto3-backed collaborators of the metric publisher. boto3 blocks, both when
# a client loads its service model and on every call, so all of it runs in a
# worker thread.
import asyncio
import boto3

from bundler_resilience.core.config import settings
from bundler_resilience.core.logger import get_logger

log = get_logger(__name__)


class SsmParameterStore:
    """Reads (possibly encrypted) values from AWS Systems Manager Parameter Store."""

    def __init__(self, region: str | None = None, client=None):
        self.region = region or settings.AWS_REGION
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client("ssm", region_name=self.region)
        return self._client

    def _get_parameter(self, name: str) -> str:
        response = self._get_client().get_parameter(Name=name, WithDecryption=True)
        return response["Parameter"]["Value"]

    async def get(self, name: str) -> str:
        value = await asyncio.to_thread(self._get_parameter, name)
        log.debug("SSM_PARAMETER_READ", name=name)
        return value


class SqsTransport:
    """Submits message bodies to an SQS queue URL."""

    def __init__(self, region: str | None = None, client=None):
        self.region = region or settings.AWS_REGION
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client("sqs", region_name=self.region)
            log.info("SQS_CLIENT_INITIALIZED", region=self.region)
        return self._client

    def _send(self, body: str, destination: str) -> dict:
        return self._get_client().send_message(QueueUrl=destination, MessageBody=body)

    async def send_message(self, body: str, destination: str) -> dict:
        response = await asyncio.to_thread(self._send, body, destination)
        return {"message_id": response.get("MessageId")}
