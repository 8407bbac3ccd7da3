import time

from botocore.exceptions import ClientError

from app.core.config import settings
from app.database.dynamodb import create_dynamodb_resource


def create_table_if_not_exists(table_name=None, dynamodb=None):
    """Create the DevEvent table with its GSIs if it doesn't exist"""
    table_name = table_name or settings.DYNAMODB_TABLE_NAME
    dynamodb = dynamodb or create_dynamodb_resource(settings)

    try:
        # Check if table exists
        table = dynamodb.Table(table_name)
        table.table_status
        print(f"Table {table_name} already exists")
        return table
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise

    # Create table with GSIs
    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            {"AttributeName": "GSI_EventsByCreated_PK", "AttributeType": "S"},
            {"AttributeName": "GSI_EventsByCreated_SK", "AttributeType": "S"},
            {"AttributeName": "GSI_BookingsByEvent_PK", "AttributeType": "S"},
            {"AttributeName": "GSI_BookingsByEvent_SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
        GlobalSecondaryIndexes=[
            {
                "IndexName": "GSI_EventsByCreated",
                "KeySchema": [
                    {"AttributeName": "GSI_EventsByCreated_PK", "KeyType": "HASH"},
                    {"AttributeName": "GSI_EventsByCreated_SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": "GSI_BookingsByEvent",
                "KeySchema": [
                    {"AttributeName": "GSI_BookingsByEvent_PK", "KeyType": "HASH"},
                    {"AttributeName": "GSI_BookingsByEvent_SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )

    # Wait for table to be ready
    print(f"Creating table {table_name}...")
    table.wait_until_exists()

    # Wait for GSIs to be active
    print("Waiting for GSIs to be active...")
    while True:
        table.reload()
        gsi_statuses = [gsi["IndexStatus"] for gsi in table.global_secondary_indexes]
        if all(status == "ACTIVE" for status in gsi_statuses):
            break
        time.sleep(1)

    print(f"Table {table_name} created successfully")
    return table


def delete_table(table_name=None, dynamodb=None):
    """Delete the DevEvent table"""
    table_name = table_name or settings.DYNAMODB_TABLE_NAME
    dynamodb = dynamodb or create_dynamodb_resource(settings)

    try:
        table = dynamodb.Table(table_name)
        table.delete()
        table.wait_until_not_exists()
        print(f"Table {table_name} deleted successfully")
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        print(f"Table {table_name} does not exist")


if __name__ == "__main__":
    create_table_if_not_exists()
