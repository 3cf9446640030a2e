"""Tests for DynamoDBEventRepository against a fake boto3 client."""

from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.operations import OperationContext
from infrastructure.persistence import (
    DynamoDBEventRepository,
    StorageCancelledError,
    StorageError,
)
from infrastructure.persistence.dynamodb import (
    INDEX_NAME,
    event_to_item,
    format_date,
    item_to_event,
)


@pytest.fixture
def make_repository(make_fake_client, clock):
    """Factory fixture returning ``(repository, fake_boto3_client)``."""

    def _factory(api_responses=None, paginated_pages=None, **kwargs):
        fake = make_fake_client(
            api_responses=api_responses, paginated_pages=paginated_pages
        )
        client = DynamoDBClient(client=fake, max_retries=1, backoff_factor=0)
        options = {"ttl": timedelta(minutes=10), "poll_interval": 0, "clock": clock}
        options.update(kwargs)
        return DynamoDBEventRepository(client, "events", **options), fake

    return _factory


def describe(status):
    return {"Table": {"TableName": "events", "TableStatus": status}}


@pytest.mark.unit
class TestSerialization:
    def test_format_date_is_fixed_width_utc(self):
        value = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_date(value) == "2024-05-01T12:00:00.000000Z"

    def test_event_to_item(self, make_event):
        item = event_to_item(
            make_event(id="abc", expiration=1714565400, metadata={"k": "v"})
        )

        assert item == {
            "id": {"S": "abc"},
            "date": {"S": "2024-05-01T12:00:00.000000Z"},
            "statusCode": {"N": "200"},
            "statusMessage": {"S": "OK"},
            "expiration": {"N": "1714565400"},
            "metadata": {"M": {"k": {"S": "v"}}},
        }

    def test_event_to_item_omits_missing_metadata(self, make_event):
        assert "metadata" not in event_to_item(make_event(id="abc"))

    def test_item_to_event(self, make_event, fixed_now):
        event = item_to_event(
            {
                "id": {"S": "abc"},
                "date": {"S": "2024-05-01T12:00:00.000000Z"},
                "statusCode": {"N": "503"},
                "statusMessage": {"S": "Unavailable"},
                "expiration": {"N": "0"},
                "metadata": {"M": {"k": {"S": "v"}}},
            }
        )

        assert event.id == "abc"
        assert event.date == fixed_now
        assert event.status_code == 503
        assert event.expiration == 0
        assert event.metadata == {"k": "v"}


@pytest.mark.unit
class TestCreate:
    def test_creates_table_waits_then_enables_ttl(self, ctx, make_repository):
        repository, fake = make_repository(
            api_responses={
                "create_table": {"TableDescription": {}},
                "describe_table": [describe("CREATING"), describe("ACTIVE")],
                "update_time_to_live": {},
            }
        )

        repository.create(ctx)

        assert [name for name, _ in fake.calls] == [
            "create_table",
            "describe_table",
            "describe_table",
            "update_time_to_live",
        ]
        create_kwargs = fake.calls_to("create_table")[0]
        assert create_kwargs["TableName"] == "events"
        assert create_kwargs["GlobalSecondaryIndexes"][0]["IndexName"] == INDEX_NAME
        ttl_spec = fake.calls_to("update_time_to_live")[0]["TimeToLiveSpecification"]
        assert ttl_spec == {"Enabled": True, "AttributeName": "expiration"}

    def test_existing_table_is_success(self, ctx, make_repository, client_error):
        repository, fake = make_repository(
            api_responses={"create_table": client_error("ResourceInUseException")}
        )

        repository.create(ctx)
        repository.create(ctx)

        assert [name for name, _ in fake.calls] == ["create_table", "create_table"]

    def test_table_not_found_while_polling_keeps_waiting(
        self, ctx, make_repository, client_error
    ):
        repository, fake = make_repository(
            api_responses={
                "create_table": {},
                "describe_table": [
                    client_error("ResourceNotFoundException"),
                    describe("ACTIVE"),
                ],
                "update_time_to_live": {},
            }
        )

        repository.create(ctx)

        assert len(fake.calls_to("describe_table")) == 2

    def test_create_failure(self, ctx, make_repository, client_error):
        repository, _ = make_repository(
            api_responses={"create_table": client_error("ValidationException", "bad")}
        )

        with pytest.raises(StorageError) as exc:
            repository.create(ctx)

        assert exc.value.message == "unable to create table, bad"
        assert exc.value.error_code == "ValidationException"

    def test_table_never_active(self, ctx, make_repository):
        repository, _ = make_repository(
            api_responses={"create_table": {}, "describe_table": describe("CREATING")},
            ready_timeout=0,
        )

        with pytest.raises(StorageError) as exc:
            repository.create(ctx)

        assert exc.value.error_code == "TABLE_NOT_READY"

    def test_describe_failure(self, ctx, make_repository, client_error):
        repository, _ = make_repository(
            api_responses={
                "create_table": {},
                "describe_table": client_error("AccessDeniedException", "denied"),
            }
        )

        with pytest.raises(StorageError) as exc:
            repository.create(ctx)

        assert exc.value.message == "unable to check if table is ready, denied"

    def test_ttl_failure(self, ctx, make_repository, client_error):
        repository, _ = make_repository(
            api_responses={
                "create_table": {},
                "describe_table": describe("ACTIVE"),
                "update_time_to_live": client_error("ValidationException", "nope"),
            }
        )

        with pytest.raises(StorageError) as exc:
            repository.create(ctx)

        assert exc.value.message == "unable to configure TTL on table, nope"

    def test_cancelled_while_waiting(self, make_repository):
        ctx = OperationContext.background()

        def still_creating(**_kwargs):
            ctx.cancel()
            return describe("CREATING")

        repository, _ = make_repository(
            api_responses={"create_table": {}, "describe_table": still_creating},
            poll_interval=5,
        )

        with pytest.raises(StorageCancelledError):
            repository.create(ctx)


@pytest.mark.unit
class TestSave:
    def test_puts_serialized_item(self, ctx, make_repository, make_event, fixed_now):
        repository, fake = make_repository(api_responses={"put_item": {}})

        stored = repository.save(ctx, make_event())

        assert stored.id
        assert stored.expiration == int((fixed_now + timedelta(minutes=10)).timestamp())
        put = fake.calls_to("put_item")[0]
        assert put["TableName"] == "events"
        assert put["Item"]["id"] == {"S": stored.id}
        assert put["Item"]["expiration"] == {"N": str(stored.expiration)}

    def test_put_failure(self, ctx, make_repository, make_event, client_error):
        repository, _ = make_repository(
            api_responses={"put_item": client_error("ValidationException", "too big")}
        )

        with pytest.raises(StorageError) as exc:
            repository.save(ctx, make_event())

        assert exc.value.message == "unable to put item on dynamodb, too big"

    def test_unconvertible_date_is_marshal_error(self, ctx, make_repository, make_event):
        repository, fake = make_repository(api_responses={"put_item": {}})
        early = datetime(1, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=1)))
        event = make_event().model_copy(update={"date": early})

        with pytest.raises(StorageError) as exc:
            repository.save(ctx, event)

        assert exc.value.error_code == "MARSHAL_ERROR"
        assert fake.calls == []

    def test_cancelled_context(self, make_repository, make_event):
        repository, fake = make_repository(api_responses={"put_item": {}})
        ctx = OperationContext.background()
        ctx.cancel()

        with pytest.raises(StorageCancelledError):
            repository.save(ctx, make_event())

        assert fake.calls == []


@pytest.mark.unit
class TestGet:
    def test_returns_event(self, ctx, make_repository, make_event):
        item = event_to_item(make_event(id="abc", expiration=0))
        repository, fake = make_repository(api_responses={"get_item": {"Item": item}})

        event = repository.get(ctx, "abc")

        assert event.id == "abc"
        assert fake.calls_to("get_item")[0]["Key"] == {"id": {"S": "abc"}}

    def test_missing_returns_none(self, ctx, make_repository):
        repository, _ = make_repository(api_responses={"get_item": {}})

        assert repository.get(ctx, "abc") is None

    def test_expired_returns_none(self, ctx, make_repository, make_event, fixed_now):
        expired = int((fixed_now - timedelta(seconds=1)).timestamp())
        item = event_to_item(make_event(id="abc", expiration=expired))
        repository, _ = make_repository(api_responses={"get_item": {"Item": item}})

        assert repository.get(ctx, "abc") is None

    def test_undecodable_item(self, ctx, make_repository):
        item = {"id": {"S": "abc"}, "date": {"S": "not a date"}}
        repository, _ = make_repository(api_responses={"get_item": {"Item": item}})

        with pytest.raises(StorageError) as exc:
            repository.get(ctx, "abc")

        assert exc.value.error_code == "UNMARSHAL_ERROR"

    def test_get_failure(self, ctx, make_repository, client_error):
        repository, _ = make_repository(
            api_responses={"get_item": client_error("AccessDeniedException", "denied")}
        )

        with pytest.raises(StorageError) as exc:
            repository.get(ctx, "abc")

        assert exc.value.message == "unable to get item from dynamodb, denied"


@pytest.mark.unit
class TestDelete:
    def test_returns_old_item(self, ctx, make_repository, make_event):
        item = event_to_item(make_event(id="abc"))
        repository, fake = make_repository(
            api_responses={"delete_item": {"Attributes": item}}
        )

        removed = repository.delete(ctx, "abc")

        assert removed.id == "abc"
        assert fake.calls_to("delete_item")[0]["ReturnValues"] == "ALL_OLD"

    def test_missing_returns_none(self, ctx, make_repository):
        repository, _ = make_repository(api_responses={"delete_item": {}})

        assert repository.delete(ctx, "abc") is None

    def test_delete_failure(self, ctx, make_repository, client_error):
        repository, _ = make_repository(
            api_responses={"delete_item": client_error("InternalServerError", "oops")}
        )

        with pytest.raises(StorageError) as exc:
            repository.delete(ctx, "abc")

        assert exc.value.message == "unable to delete item from dynamodb, oops"


@pytest.mark.unit
class TestFind:
    def test_queries_index_across_pages(self, ctx, make_repository, make_event, fixed_now):
        first = event_to_item(make_event(id="a", status_code=500))
        second = event_to_item(make_event(id="b", status_code=500))
        repository, fake = make_repository(
            paginated_pages={"query": [{"Items": [first]}, {"Items": [second]}]}
        )

        found = repository.find_by_date_and_status_code(
            ctx, fixed_now - timedelta(hours=1), fixed_now, 500
        )

        assert [e.id for e in found] == ["a", "b"]
        query = fake.calls_to("query")[0]
        assert query["IndexName"] == INDEX_NAME
        assert query["ExpressionAttributeValues"] == {
            ":statusCode": {"N": "500"},
            ":from": {"S": "2024-05-01T11:00:00.000000Z"},
            ":to": {"S": "2024-05-01T12:00:00.000000Z"},
        }

    def test_filters_expired_items(self, ctx, make_repository, make_event, fixed_now):
        expired = int((fixed_now - timedelta(minutes=1)).timestamp())
        items = [
            event_to_item(make_event(id="old", expiration=expired)),
            event_to_item(make_event(id="new", expiration=0)),
        ]
        repository, _ = make_repository(paginated_pages={"query": [{"Items": items}]})

        found = repository.find_by_date_and_status_code(
            ctx, fixed_now - timedelta(hours=1), fixed_now, 200
        )

        assert [e.id for e in found] == ["new"]

    def test_reversed_range_skips_query(self, ctx, make_repository, fixed_now):
        repository, fake = make_repository(paginated_pages={"query": []})

        found = repository.find_by_date_and_status_code(
            ctx, fixed_now, fixed_now - timedelta(hours=1), 200
        )

        assert found == []
        assert fake.calls == []

    def test_failing_page_fails_query(
        self, ctx, make_repository, make_event, fixed_now, client_error
    ):
        repository, _ = make_repository(
            paginated_pages={
                "query": [
                    {"Items": [event_to_item(make_event(id="a"))]},
                    client_error("ValidationException", "bad page"),
                ]
            }
        )

        with pytest.raises(StorageError) as exc:
            repository.find_by_date_and_status_code(
                ctx, fixed_now - timedelta(hours=1), fixed_now, 200
            )

        assert exc.value.message == "unable to query items from dynamodb, bad page"
