import os

# Credentials and region for the in-process AWS backend; set before app imports
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ.pop("DYNAMODB_ENDPOINT_URL", None)
os.environ.pop("S3_ENDPOINT_URL", None)

import boto3
import pytest
from moto import mock_aws

from scripts.init_dynamodb import create_table_if_not_exists
from app.database.dynamodb import reset_db_connection

TEST_TABLE_NAME = "DevEvent_Test"
TEST_BUCKET = "devevent-test-images"
TEST_IMAGE_BASE_URL = "https://images.example.com"


@pytest.fixture
def aws():
    """Mock every AWS service for the duration of a test"""
    with mock_aws():
        yield
    reset_db_connection()


@pytest.fixture
def dynamodb_resource(aws):
    """DynamoDB resource with a freshly created test table"""
    resource = boto3.resource("dynamodb", region_name="us-east-1")
    create_table_if_not_exists(TEST_TABLE_NAME, dynamodb=resource)
    return resource


@pytest.fixture
def s3_client(aws):
    """S3 client with the image bucket created"""
    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket=TEST_BUCKET)
    return client


@pytest.fixture
def valid_event_data():
    """Valid event payload as the form parser hands it to the service"""
    return {
        "title": "Next.js Conf 2025",
        "description": "The annual Next.js conference",
        "overview": "Talks and workshops on the App Router and beyond",
        "image": "https://images.example.com/DevEvent/nextjs.png",
        "venue": "Moscone Center",
        "location": "San Francisco, CA",
        "date": "October 24, 2025",
        "time": "9 AM",
        "mode": "hybrid",
        "audience": "Developers",
        "agenda": ["Keynote", "Workshops", "Networking"],
        "organizer": "Vercel",
        "tags": ["React", "NextJS", "react"],
    }


@pytest.fixture
def make_event_data(valid_event_data):
    """Factory for event payloads with overridden fields"""

    def _make(**overrides):
        data = dict(valid_event_data)
        data.update(overrides)
        return data

    return _make
