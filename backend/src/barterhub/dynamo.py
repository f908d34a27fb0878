"""
DynamoDB-backed store: one table per record type.
"""
import boto3
from typing import Any, Dict, Iterable, List, Optional
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from .config import config
from .errors import ConcurrentModification
from .logging import logger
from .models import RecordKind, RECORD_TYPES
from .storage import ID_ATTRIBUTES, Store, Write

serializer = TypeSerializer()


def serialize_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a plain item to the low-level attribute-value format."""
    return {key: serializer.serialize(value) for key, value in item.items()}


class DynamoStore(Store):
    """
    Store implementation on DynamoDB.

    Args:
        dynamodb: boto3 DynamoDB resource (created from config if omitted)
        table_names: Table name per record type (defaults from config)
    """

    def __init__(self, dynamodb=None, table_names: Optional[Dict[RecordKind, str]] = None):
        self.dynamodb = dynamodb or boto3.resource('dynamodb', region_name=config.AWS_REGION)
        self.table_names = table_names or {
            RecordKind.MEMBER: config.MEMBERS_TABLE,
            RecordKind.ASSET: config.ASSETS_TABLE,
            RecordKind.TASK: config.TASKS_TABLE,
            RecordKind.COUNTER: config.COUNTERS_TABLE,
        }

    def _table(self, kind: RecordKind):
        return self.dynamodb.Table(self.table_names[kind])

    def _key(self, kind: RecordKind, record_id: str) -> Dict[str, str]:
        return {ID_ATTRIBUTES[kind]: record_id}

    def load_all(self, kind: RecordKind) -> List[Any]:
        """
        Scan the whole table for a record type, following pagination.

        Args:
            kind: Record type to load

        Returns:
            List of model objects
        """
        table = self._table(kind)
        record_type = RECORD_TYPES[kind]
        scan_params = {}
        items = []

        try:
            while True:
                response = table.scan(**scan_params)
                items.extend(response.get('Items', []))
                last_key = response.get('LastEvaluatedKey')
                if not last_key:
                    break
                scan_params['ExclusiveStartKey'] = last_key
        except ClientError as e:
            logger.error(f"Error scanning {self.table_names[kind]}: {e}")
            raise

        return [record_type.from_item(item) for item in items]

    def get(self, kind: RecordKind, record_id: str) -> Optional[Any]:
        """Get a single record, or None. Reads are strongly consistent."""
        try:
            response = self._table(kind).get_item(
                Key=self._key(kind, record_id), ConsistentRead=True
            )
        except ClientError as e:
            logger.error(f"Error getting {kind.value} {record_id}: {e}")
            raise
        item = response.get('Item')
        return RECORD_TYPES[kind].from_item(item) if item else None

    def upsert(self, record: Any) -> None:
        try:
            self._table(record.kind).put_item(Item=record.to_item())
        except ClientError as e:
            logger.error(f"Error writing {record.kind.value} {record.record_id}: {e}")
            raise

    def delete(self, kind: RecordKind, record_id: str) -> None:
        try:
            self._table(kind).delete_item(Key=self._key(kind, record_id))
        except ClientError as e:
            logger.error(f"Error deleting {kind.value} {record_id}: {e}")
            raise

    def atomic_commit(self, writes: Iterable[Write]) -> None:
        """
        Apply all writes in one DynamoDB transaction.

        Status and count guards become ConditionExpressions on the Put, so
        two reviewers racing on the same task cannot both settle it and two
        containers cannot both take the last quota slot.

        Raises:
            ConcurrentModification: A condition failed and nothing was written
        """
        transact_items = [self._transact_item(write) for write in writes]
        if not transact_items:
            return

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            error_code = e.response['Error']['Code']
            if error_code == 'TransactionCanceledException':
                raise ConcurrentModification() from e
            logger.error(f"Transaction error: {e}")
            raise

        logger.info(f"Committed {len(transact_items)} writes atomically")

    def _transact_item(self, write: Write) -> Dict[str, Any]:
        kind = write.kind
        table_name = self.table_names[kind]

        if write.delete:
            entry = {
                'TableName': table_name,
                'Key': serialize_item(self._key(kind, write.record.record_id)),
            }
            op = 'Delete'
        else:
            entry = {
                'TableName': table_name,
                'Item': serialize_item(write.record.to_item()),
            }
            op = 'Put'

        conditions = []
        names = {}
        values = {}
        if write.expected_status is not None:
            conditions.append('#status = :expected_status')
            names['#status'] = 'status'
            values[':expected_status'] = {'S': write.expected_status}
        if write.expected_count is not None:
            names['#count'] = 'count'
            values[':expected_count'] = {'N': str(write.expected_count)}
            if write.expected_count == 0:
                names['#id'] = ID_ATTRIBUTES[kind]
                conditions.append('(attribute_not_exists(#id) OR #count = :expected_count)')
            else:
                conditions.append('#count = :expected_count')

        if conditions:
            entry['ConditionExpression'] = ' AND '.join(conditions)
            entry['ExpressionAttributeNames'] = names
            entry['ExpressionAttributeValues'] = values

        return {op: entry}
