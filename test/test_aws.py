import json
import threading
import pytest

from bundler_resilience.core.metrics import MetricPublisher
from bundler_resilience.core.models import MetricRecord
from bundler_resilience.adapters.aws import SqsTransport, SsmParameterStore

QUEUE_URL = "https://sqs.us-west-2.amazonaws.com/123456789012/bundler-metrics"


class DummySsm:
    def __init__(self):
        self.requests = []

    def get_parameter(self, **kwargs):
        self.requests.append(kwargs)
        return {"Parameter": {"Name": kwargs["Name"], "Type": "String", "Value": QUEUE_URL}}


class DummySqs:
    def __init__(self):
        self.messages = []

    def send_message(self, **kwargs):
        self.messages.append(kwargs)
        return {"MessageId": "5fea7756-0ea4-451a-a703-a558b933e274"}


@pytest.mark.asyncio
async def test_ssm_parameter_store_reads_decrypted_value():
    ssm = DummySsm()
    store = SsmParameterStore(client=ssm)
    assert await store.get("/bundler/metric/stdQueue") == QUEUE_URL
    assert ssm.requests == [{"Name": "/bundler/metric/stdQueue", "WithDecryption": True}]


@pytest.mark.asyncio
async def test_sqs_transport_sends_body_to_queue():
    sqs = DummySqs()
    transport = SqsTransport(client=sqs)
    result = await transport.send_message('{"chainId": "0x1"}', QUEUE_URL)
    assert result == {"message_id": "5fea7756-0ea4-451a-a703-a558b933e274"}
    assert sqs.messages == [{"QueueUrl": QUEUE_URL, "MessageBody": '{"chainId": "0x1"}'}]


@pytest.mark.asyncio
async def test_publisher_over_aws_adapters(context):
    sqs = DummySqs()
    publisher = MetricPublisher(
        context,
        parameter_store=SsmParameterStore(client=DummySsm()),
        transport_factory=lambda: SqsTransport(client=sqs),
    )
    await publisher.publish(MetricRecord(chain_id=10, actual_gas=2**60))
    await publisher.drain()

    [message] = sqs.messages
    assert message["QueueUrl"] == QUEUE_URL
    assert json.loads(message["MessageBody"]) == {"chainId": "0xa", "actualGas": hex(2**60)}


@pytest.mark.asyncio
async def test_boto3_clients_are_built_off_the_event_loop(monkeypatch):
    built_on = []

    def fake_client(service, region_name=None):
        built_on.append((service, region_name, threading.get_ident()))
        return DummySsm() if service == "ssm" else DummySqs()

    monkeypatch.setattr("bundler_resilience.adapters.aws.boto3.client", fake_client)
    store = SsmParameterStore(region="eu-west-1")
    transport = SqsTransport(region="eu-west-1")
    assert built_on == []

    await store.get("/bundler/metric/stdQueue")
    await transport.send_message("{}", QUEUE_URL)
    await transport.send_message("{}", QUEUE_URL)

    loop_thread = threading.get_ident()
    assert [(s, r) for s, r, _ in built_on] == [("ssm", "eu-west-1"), ("sqs", "eu-west-1")]
    assert all(ident != loop_thread for _, _, ident in built_on)
