import logging
import threading
from enum import Enum

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, settings as default_settings
from app.core.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def create_dynamodb_resource(settings: Settings = default_settings):
    """Build a DynamoDB resource from settings without touching the network"""
    kwargs = {
        "region_name": settings.AWS_DEFAULT_REGION,
        "config": Config(
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
            read_timeout=settings.DB_READ_TIMEOUT,
            retries={"max_attempts": 3},
        ),
    }
    if settings.DYNAMODB_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.DYNAMODB_ENDPOINT_URL
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.resource("dynamodb", **kwargs)


class DynamoDBConnection:
    """Process-wide cached DynamoDB handle.

    The first acquire() builds the resource and checks the table; later calls
    reuse it. A failed attempt drops back to UNINITIALIZED so the next call
    retries from scratch.
    """

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings
        self._lock = threading.RLock()
        self._state = ConnectionState.UNINITIALIZED
        self._resource = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    def acquire(self):
        with self._lock:
            if self._state is ConnectionState.CONNECTED:
                return self._resource

            self._state = ConnectionState.CONNECTING
            try:
                resource = create_dynamodb_resource(self.settings)
                resource.meta.client.describe_table(
                    TableName=self.settings.DYNAMODB_TABLE_NAME
                )
            except (BotoCoreError, ClientError) as e:
                self._state = ConnectionState.UNINITIALIZED
                self._resource = None
                logger.error("DynamoDB connection failed: %s", e)
                raise DatabaseConnectionError(
                    f"Could not connect to DynamoDB table "
                    f"{self.settings.DYNAMODB_TABLE_NAME}: {e}"
                ) from e

            self._resource = resource
            self._state = ConnectionState.CONNECTED
            logger.info(
                "Connected to DynamoDB table %s", self.settings.DYNAMODB_TABLE_NAME
            )
            return resource

    def reset(self) -> None:
        with self._lock:
            self._resource = None
            self._state = ConnectionState.UNINITIALIZED


_connection = DynamoDBConnection()


def get_db_connection():
    """Return the shared DynamoDB resource, connecting on first use"""
    return _connection.acquire()


def reset_db_connection() -> None:
    _connection.reset()
