"""
Test suite for DeletionService.

Covers both enumeration strategies, pagination, prefix isolation,
partial-failure tolerance, bulk fallback, truncation detection and
bounded concurrency.
"""

import pytest

from feedback_rag.application.services.deletion_service import DeletionService
from feedback_rag.core.exceptions import ValidationError, VectorStoreError


class TestListStrategy:
    @pytest.mark.asyncio
    async def test_walks_every_page(self, deletion_service: DeletionService, store, seed) -> None:
        seed("u1", 5)
        store.page_size = 2

        report = await deletion_service.delete_all("u1")

        assert store.pages_served == 3
        assert report.strategy == "list"
        assert (report.total, report.deleted) == (5, 5)
        assert report.success is True
        assert store.ids_for("u1") == []

    @pytest.mark.asyncio
    async def test_other_users_survive(self, deletion_service: DeletionService, store, seed) -> None:
        seed("u1", 3)
        u2_ids = seed("u2", 2)
        u10_ids = seed("u10", 2)

        await deletion_service.delete_all("u1")

        assert store.ids_for("u2") == u2_ids
        assert store.ids_for("u10") == u10_ids

    @pytest.mark.asyncio
    async def test_no_records_is_successful_noop(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        seed("u2", 2)

        report = await deletion_service.delete_all("u1")

        assert report.success is True
        assert (report.total, report.deleted, report.failed_ids) == (0, 0, [])
        assert store.delete_calls == []

    @pytest.mark.asyncio
    async def test_follow_up_enumeration_is_empty(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        seed("u1", 7, doc=1)
        seed("u1", 4, doc=2)

        await deletion_service.delete_all("u1")

        assert (await deletion_service.delete_all("u1")).total == 0
        assert await store.query_ids({"userId": "u1"}, 100) == []


class TestPartialFailure:
    @pytest.mark.asyncio
    async def test_failed_deletes_are_counted_not_raised(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        ids = seed("u1", 5)
        store.fail_ids = {ids[1], ids[3]}

        report = await deletion_service.delete_all("u1")

        assert report.success is True
        assert (report.total, report.deleted) == (5, 3)
        assert sorted(report.failed_ids) == sorted([ids[1], ids[3]])
        assert sorted(store.ids_for("u1")) == sorted([ids[1], ids[3]])

    @pytest.mark.asyncio
    async def test_failed_bulk_batch_falls_back_to_single_deletes(self, store, seed) -> None:
        ids = seed("u1", 4)
        store.supports_bulk_delete = True
        store.fail_ids = {ids[0]}
        service = DeletionService(store, delete_batch_size=2)

        report = await service.delete_all("u1")

        assert store.delete_calls[0] == ids[:2]
        assert [ids[0]] in store.delete_calls and [ids[1]] in store.delete_calls
        assert store.delete_calls[-1] == ids[2:]
        assert report.failed_ids == [ids[0]]
        assert report.deleted == 3

    @pytest.mark.asyncio
    async def test_single_deletes_respect_concurrency_bound(self, store, seed) -> None:
        seed("u1", 8)
        store.delete_delay = 0.01
        service = DeletionService(store, delete_concurrency=2)

        report = await service.delete_all("u1")

        assert report.deleted == 8
        assert store.max_in_flight == 2
        assert all(len(call) == 1 for call in store.delete_calls)


class TestQueryStrategy:
    @pytest.mark.asyncio
    async def test_auto_uses_query_without_listing(self, store, seed) -> None:
        seed("u1", 3)
        store.supports_listing = False

        report = await DeletionService(store).delete_all("u1")

        assert report.strategy == "query"
        assert store.query_calls[0] == ({"userId": "u1"}, 10000)
        assert report.deleted == 3
        assert report.truncated is False

    @pytest.mark.asyncio
    async def test_capped_rounds_re_enumerate_until_exhausted(self, store, seed) -> None:
        seed("u1", 5)
        u2_ids = seed("u2", 3)
        service = DeletionService(store, strategy="query", enumeration_top_k=2)

        report = await service.delete_all("u1")

        assert len(store.query_calls) == 3
        assert (report.total, report.deleted) == (5, 5)
        assert report.truncated is False
        assert store.ids_for("u1") == []
        assert store.ids_for("u2") == u2_ids

    @pytest.mark.asyncio
    async def test_cap_filled_by_failures_reports_truncation(self, store, seed) -> None:
        ids = seed("u1", 5)
        store.fail_ids = set(ids[:2])
        service = DeletionService(store, strategy="query", enumeration_top_k=2)

        report = await service.delete_all("u1")

        assert report.truncated is True
        assert report.total == 2
        assert report.deleted == 0

    @pytest.mark.asyncio
    async def test_round_limit_reports_truncation(self, store, seed) -> None:
        seed("u1", 5)
        service = DeletionService(
            store, strategy="query", enumeration_top_k=1, max_enumeration_rounds=2
        )

        report = await service.delete_all("u1")

        assert report.truncated is True
        assert report.deleted == 2
        assert len(store.ids_for("u1")) == 3


class TestDeletionErrors:
    @pytest.mark.asyncio
    async def test_enumeration_failure_is_raised(self, store) -> None:
        async def failing_list(prefix):
            raise VectorStoreError("listing unavailable", operation="list")
            yield []

        store.list_ids = failing_list

        with pytest.raises(VectorStoreError, match="listing unavailable"):
            await DeletionService(store, strategy="list").delete_all("u1")

    @pytest.mark.asyncio
    async def test_query_enumeration_failure_is_raised(self, store) -> None:
        async def failing_query(filter, top_k):
            raise VectorStoreError("rate limited", operation="query")

        store.query_ids = failing_query

        with pytest.raises(VectorStoreError, match="rate limited"):
            await DeletionService(store, strategy="query").delete_all("u1")


class TestAutoFallback:
    @pytest.mark.asyncio
    async def test_auto_falls_back_to_query_when_listing_fails(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        seed("u1", 3)
        u2_ids = seed("u2", 2)

        async def pod_index_list(prefix):
            raise VectorStoreError("listing is only supported on serverless indexes", operation="list")
            yield []

        store.list_ids = pod_index_list

        report = await deletion_service.delete_all("u1")

        assert report.strategy == "query"
        assert (report.total, report.deleted) == (3, 3)
        assert store.ids_for("u1") == []
        assert store.ids_for("u2") == u2_ids

    @pytest.mark.asyncio
    async def test_auto_falls_back_when_adapter_has_no_listing(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        seed("u1", 2)

        def unsupported_list(prefix):
            raise NotImplementedError("no key listing")

        store.list_ids = unsupported_list

        report = await deletion_service.delete_all("u1")

        assert report.strategy == "query"
        assert report.deleted == 2

    @pytest.mark.asyncio
    async def test_delete_failures_do_not_trigger_fallback(
        self, deletion_service: DeletionService, store, seed
    ) -> None:
        ids = seed("u1", 2)
        store.fail_ids = {ids[0]}

        report = await deletion_service.delete_all("u1")

        assert report.strategy == "list"
        assert store.query_calls == []
        assert report.failed_ids == [ids[0]]

    @pytest.mark.asyncio
    async def test_list_strategy_requires_listing_support(self, store) -> None:
        store.supports_listing = False

        with pytest.raises(ValueError, match="does not support key listing"):
            await DeletionService(store, strategy="list").delete_all("u1")

    def test_unknown_strategy_is_rejected(self, store) -> None:
        with pytest.raises(ValueError, match="Unknown enumeration strategy"):
            DeletionService(store, strategy="scan")

    @pytest.mark.asyncio
    async def test_invalid_user_id_is_rejected(self, deletion_service: DeletionService) -> None:
        with pytest.raises(ValidationError):
            await deletion_service.delete_all("u1#")
