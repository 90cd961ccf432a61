"""Shared fixtures for the events sync tests."""
import boto3
import pytest
from moto import mock_aws

TABLE_NAME = 'test-external-events'
BUCKET_NAME = 'test-external-events-images'


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Point boto3 at fake credentials so nothing reaches real AWS."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def aws():
    with mock_aws():
        yield


@pytest.fixture
def events_table(aws):
    """Create a mock DynamoDB table for testing."""
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

    table = dynamodb.create_table(
        TableName=TABLE_NAME,
        KeySchema=[
            {'AttributeName': 'external_id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'external_id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )

    yield table


@pytest.fixture
def stored_events(events_table):
    """Return a function that scans the table into {external_id: item}."""
    def scan():
        response = events_table.scan()
        items = response.get('Items', [])
        while 'LastEvaluatedKey' in response:
            response = events_table.scan(
                ExclusiveStartKey=response['LastEvaluatedKey']
            )
            items.extend(response.get('Items', []))
        return {item['external_id']: item for item in items}
    return scan


@pytest.fixture
def images_bucket(aws):
    """Create a mock S3 bucket for testing."""
    s3 = boto3.client('s3', region_name='us-east-1')
    s3.create_bucket(Bucket=BUCKET_NAME)
    yield s3


@pytest.fixture
def raw_event():
    """A feed entry for an event far in the future."""
    return {
        'id': 'A',
        'title': 'Jazz Night',
        'description': '<p>Live jazz on the main stage</p>',
        'image': 'https://images.example.com/jazz.jpg',
        'start_date': '2099-06-01T19:00:00',
        'end_date': '2099-06-01T23:00:00',
        'available_tickets': 8,
        'price': {'amount': 25.5},
        'organizer': {'id': 7}
    }
