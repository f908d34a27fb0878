"""
Tests for the DynamoDB store, with boto3 mocked out.
"""
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from barterhub.dynamo import DynamoStore, serialize_item
from barterhub.errors import ConcurrentModification
from barterhub.models import Asset, Counter, RecordKind, Task, TaskStatus
from barterhub.storage import Write

NOW = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

TABLES = {
    RecordKind.MEMBER: 'members',
    RecordKind.ASSET: 'assets',
    RecordKind.TASK: 'tasks',
    RecordKind.COUNTER: 'counters',
}


@pytest.fixture
def dynamodb():
    return MagicMock()


@pytest.fixture
def dynamo_store(dynamodb):
    return DynamoStore(dynamodb=dynamodb, table_names=TABLES)


def task_item(task_id='t-1', **overrides):
    item = {
        'taskId': task_id,
        'taskCode': 'T-0001',
        'assigneeId': 'm-ben',
        'assetId': 'a-1',
        'status': 'pending',
        'createdAt': NOW.isoformat(),
    }
    item.update(overrides)
    return item


class TestReads:

    def test_load_all_follows_pagination(self, dynamo_store, dynamodb):
        """Scan keeps going until there is no LastEvaluatedKey."""
        table = dynamodb.Table.return_value
        table.scan.side_effect = [
            {'Items': [task_item('t-1')], 'LastEvaluatedKey': {'taskId': 't-1'}},
            {'Items': [task_item('t-2')]},
        ]

        tasks = dynamo_store.load_all(RecordKind.TASK)

        assert [t.task_id for t in tasks] == ['t-1', 't-2']
        dynamodb.Table.assert_called_with('tasks')
        assert table.scan.call_args_list[1].kwargs == {'ExclusiveStartKey': {'taskId': 't-1'}}

    def test_numbers_come_back_as_int(self, dynamo_store, dynamodb):
        """DynamoDB returns Decimal; models hold ints."""
        table = dynamodb.Table.return_value
        table.get_item.return_value = {'Item': task_item(rating=Decimal('4'), status='approved')}

        task = dynamo_store.get(RecordKind.TASK, 't-1')

        assert task.rating == 4
        assert isinstance(task.rating, int)
        assert task.status == TaskStatus.APPROVED
        assert task.created_at == NOW
        table.get_item.assert_called_once_with(Key={'taskId': 't-1'}, ConsistentRead=True)

    def test_get_missing(self, dynamo_store, dynamodb):
        dynamodb.Table.return_value.get_item.return_value = {}
        assert dynamo_store.get(RecordKind.ASSET, 'nope') is None

    def test_scan_errors_propagate(self, dynamo_store, dynamodb):
        dynamodb.Table.return_value.scan.side_effect = ClientError(
            {'Error': {'Code': 'ResourceNotFoundException', 'Message': 'no table'}}, 'Scan'
        )
        with pytest.raises(ClientError):
            dynamo_store.load_all(RecordKind.MEMBER)


class TestWrites:

    def test_upsert_puts_item(self, dynamo_store, dynamodb):
        task = Task.from_item(task_item())
        dynamo_store.upsert(task)

        dynamodb.Table.assert_called_with('tasks')
        dynamodb.Table.return_value.put_item.assert_called_once_with(Item=task.to_item())

    def test_delete(self, dynamo_store, dynamodb):
        dynamo_store.delete(RecordKind.ASSET, 'a-1')
        dynamodb.Table.return_value.delete_item.assert_called_once_with(Key={'assetId': 'a-1'})


class TestAtomicCommit:

    def test_transaction_shape(self, dynamo_store, dynamodb):
        """Guarded writes carry a status condition; others are plain Puts."""
        task = Task.from_item(task_item(status='approved'))
        asset = Asset(asset_id='a-1', asset_code='U-0001-S01', owner_id='m-ana', usage_count=1)

        dynamo_store.atomic_commit([
            Write(task, expected_status='submitted'),
            Write(asset),
        ])

        client = dynamodb.meta.client
        items = client.transact_write_items.call_args.kwargs['TransactItems']
        assert len(items) == 2

        task_put = items[0]['Put']
        assert task_put['TableName'] == 'tasks'
        assert task_put['Item']['status'] == {'S': 'approved'}
        assert task_put['ConditionExpression'] == '#status = :expected_status'
        assert task_put['ExpressionAttributeValues'] == {':expected_status': {'S': 'submitted'}}

        asset_put = items[1]['Put']
        assert asset_put['TableName'] == 'assets'
        assert asset_put['Item']['usageCount'] == {'N': '1'}
        assert 'ConditionExpression' not in asset_put

    def test_delete_in_transaction(self, dynamo_store, dynamodb):
        asset = Asset(asset_id='a-1', asset_code='U-0001-S01', owner_id='m-ana')

        dynamo_store.atomic_commit([Write(asset, delete=True)])

        items = dynamodb.meta.client.transact_write_items.call_args.kwargs['TransactItems']
        assert items == [{'Delete': {'TableName': 'assets', 'Key': {'assetId': {'S': 'a-1'}}}}]

    def test_cancelled_transaction_is_concurrent_modification(self, dynamo_store, dynamodb):
        dynamodb.meta.client.transact_write_items.side_effect = ClientError(
            {'Error': {'Code': 'TransactionCanceledException', 'Message': 'ConditionalCheckFailed'}},
            'TransactWriteItems'
        )
        task = Task.from_item(task_item())

        with pytest.raises(ConcurrentModification):
            dynamo_store.atomic_commit([Write(task, expected_status='submitted')])

    def test_other_errors_reraised(self, dynamo_store, dynamodb):
        dynamodb.meta.client.transact_write_items.side_effect = ClientError(
            {'Error': {'Code': 'ProvisionedThroughputExceededException', 'Message': 'slow down'}},
            'TransactWriteItems'
        )
        with pytest.raises(ClientError):
            dynamo_store.atomic_commit([Write(Task.from_item(task_item()))])

    def test_empty_commit_skips_call(self, dynamo_store, dynamodb):
        dynamo_store.atomic_commit([])
        dynamodb.meta.client.transact_write_items.assert_not_called()

    def test_first_counter_write_requires_absent_or_zero(self, dynamo_store, dynamodb):
        dynamo_store.atomic_commit([Write(Counter('quota#m-bo#2026-03-02', 1, ['a-1']), expected_count=0)])

        put = dynamodb.meta.client.transact_write_items.call_args.kwargs['TransactItems'][0]['Put']
        assert put['TableName'] == 'counters'
        assert put['ConditionExpression'] == '(attribute_not_exists(#id) OR #count = :expected_count)'
        assert put['ExpressionAttributeNames'] == {'#count': 'count', '#id': 'counterId'}
        assert put['ExpressionAttributeValues'] == {':expected_count': {'N': '0'}}
        assert put['Item']['keys'] == {'L': [{'S': 'a-1'}]}

    def test_counter_guard_matches_read_count(self, dynamo_store, dynamodb):
        dynamo_store.atomic_commit([Write(Counter('task-sequence', 8), expected_count=7)])

        put = dynamodb.meta.client.transact_write_items.call_args.kwargs['TransactItems'][0]['Put']
        assert put['ConditionExpression'] == '#count = :expected_count'
        assert put['ExpressionAttributeValues'] == {':expected_count': {'N': '7'}}


def test_serialize_item():
    assert serialize_item({'a': 'x', 'n': 3, 'flag': True}) == {
        'a': {'S': 'x'}, 'n': {'N': '3'}, 'flag': {'BOOL': True}
    }
