"""Contract tests run against every ProductStore implementation."""

import math
import threading

import pytest

from catalog.api.schemas.product import ProductCreate, ProductRead
from catalog.core.errors import InvalidArgumentError, ProductConflictError
from catalog.stores.base import ProductStore
from catalog.stores.memory import InMemoryProductStore


def names(products):
    return [p.name for p in products]


def test_implements_protocol(store):
    assert isinstance(store, ProductStore)


class TestInsertAndRead:
    def test_insert_assigns_id_and_roundtrips(self, store):
        stored = store.insert(ProductCreate(name="Lamp", quantity=3, price=19.99))

        assert stored.id is not None
        fetched = store.get_by_id(stored.id)
        assert fetched == stored
        assert fetched.model_dump(exclude={"id"}) == {
            "name": "Lamp",
            "quantity": 3,
            "price": 19.99,
        }

    def test_ids_are_unique_and_increasing(self, store):
        first = store.insert(ProductCreate(name="A"))
        second = store.insert(ProductCreate(name="B"))
        assert second.id > first.id

    def test_insert_many_preserves_input_order(self, store):
        stored = store.insert_many(
            [ProductCreate(name="Zeta"), ProductCreate(name="Alpha"), ProductCreate(name="Mid")]
        )
        assert names(stored) == ["Zeta", "Alpha", "Mid"]
        assert [p.id for p in stored] == sorted(p.id for p in stored)

    def test_preset_id_is_honoured(self, store):
        stored = store.insert(ProductCreate(id=42, name="Fixed"))
        assert stored.id == 42
        assert store.insert(ProductCreate(name="Next")).id != 42

    def test_preset_id_conflict(self, store):
        store.insert(ProductCreate(id=7, name="Taken"))
        with pytest.raises(ProductConflictError):
            store.insert(ProductCreate(id=7, name="Again"))

    def test_insert_many_is_all_or_nothing(self, store):
        store.insert(ProductCreate(id=3, name="Existing"))
        with pytest.raises(ProductConflictError):
            store.insert_many([ProductCreate(name="New"), ProductCreate(id=3, name="Clash")])
        assert names(store.get_all()) == ["Existing"]

    def test_get_all_is_ordered_by_id(self, fruit_store):
        everything = fruit_store.get_all()
        assert names(everything) == ["Apple", "Banana", "Grape"]

    def test_get_by_id_missing(self, store):
        assert store.get_by_id(999) is None

    def test_get_by_name_is_exact_and_case_sensitive(self, fruit_store):
        assert fruit_store.get_by_name("Banana").name == "Banana"
        assert fruit_store.get_by_name("banana") is None
        assert fruit_store.get_by_name("Ban") is None

    def test_get_by_name_duplicates_returns_lowest_id(self, store):
        first = store.insert(ProductCreate(name="Twin", quantity=1))
        store.insert(ProductCreate(name="Twin", quantity=2))
        assert store.get_by_name("Twin").id == first.id

    def test_returned_records_are_copies(self, store):
        stored = store.insert(ProductCreate(name="Original"))
        stored.name = "Mutated"
        assert store.get_by_id(stored.id).name == "Original"


class TestUpdateAndDelete:
    def test_update_replaces_fields_and_keeps_id(self, fruit_store):
        apple = fruit_store.get_by_name("Apple")
        changed = apple.model_copy(update={"price": 9.5})

        updated = fruit_store.update(changed)

        assert updated.id == apple.id
        assert fruit_store.get_by_id(apple.id).price == 9.5
        assert fruit_store.get_by_id(apple.id).name == "Apple"

    def test_update_missing_returns_none(self, store):
        assert store.update(ProductRead(id=999, name="Ghost")) is None
        assert store.get_all() == []

    def test_delete_then_delete_again(self, fruit_store):
        apple = fruit_store.get_by_name("Apple")
        assert fruit_store.delete_by_id(apple.id) is True
        assert fruit_store.delete_by_id(apple.id) is False
        assert fruit_store.get_by_id(apple.id) is None

    def test_delete_missing(self, store):
        assert store.delete_by_id(999) is False


class TestSearch:
    def test_search_contains_is_case_insensitive(self, fruit_store):
        assert names(fruit_store.search_contains("AP")) == ["Apple", "Grape"]
        assert fruit_store.search_contains("kiwi") == []

    def test_paged_scenario_from_fruits(self, fruit_store):
        result = fruit_store.search_contains_paged("an", 0, 10, "name")
        assert names(result.items) == ["Banana"]
        assert result.total == 1

    def test_pages_split_without_overlap(self, fruit_store):
        first = fruit_store.search_contains_paged("a", 0, 2, "name")
        second = fruit_store.search_contains_paged("a", 1, 2, "name")

        assert len(first.items) == 2
        assert len(second.items) == 1
        assert not {p.id for p in first.items} & {p.id for p in second.items}
        assert first.total == second.total == 3

    def test_window_past_end_keeps_total(self, fruit_store):
        result = fruit_store.search_contains_paged("a", 5, 2, "name")
        assert result.items == []
        assert result.total == 3

    @pytest.mark.parametrize("page,size", [(-1, 10), (0, 0), (1, -5)])
    def test_degenerate_window_is_empty(self, fruit_store, page, size):
        result = fruit_store.search_contains_paged("a", page, size, "name")
        assert result.items == []
        assert result.total == 3

    def test_sort_by_other_field(self, fruit_store):
        result = fruit_store.search_contains_paged("a", 0, 10, "price")
        assert names(result.items) == ["Banana", "Apple", "Grape"]

    def test_ties_broken_by_id(self, store):
        ids = [store.insert(ProductCreate(name="Same", quantity=1)).id for _ in range(4)]
        result = store.search_contains_paged("same", 0, 10, "quantity")
        assert [p.id for p in result.items] == ids

    def test_unknown_sort_key(self, fruit_store):
        with pytest.raises(InvalidArgumentError):
            fruit_store.search_contains_paged("a", 0, 10, "colour")

    def test_like_wildcards_match_literally(self, store):
        store.insert(ProductCreate(name="100% Cotton"))
        store.insert(ProductCreate(name="1000 Cotton"))
        store.insert(ProductCreate(name="snake_case"))
        store.insert(ProductCreate(name="snakeXcase"))

        assert names(store.search_contains("0%")) == ["100% Cotton"]
        assert names(store.search_contains_paged("e_c", 0, 10, "name").items) == ["snake_case"]

    def test_iterating_pages_covers_every_match(self, store):
        catalog = [f"Widget {n:02d}" for n in range(23)] + ["Gadget"]
        store.insert_many([ProductCreate(name=n) for n in catalog])

        size = 5
        first = store.search_contains_paged("widget", 0, size, "name")
        pages = math.ceil(first.total / size)
        seen = []
        for page in range(pages):
            seen.extend(store.search_contains_paged("widget", page, size, "name").items)

        assert first.total == 23
        assert len(seen) == 23
        assert len({p.id for p in seen}) == 23
        assert names(seen) == sorted(names(seen))

    def test_total_independent_of_window(self, fruit_store):
        totals = {
            fruit_store.search_contains_paged("e", page, size, "name").total
            for page, size in [(0, 1), (1, 1), (0, 10), (7, 3)]
        }
        assert totals == {2}


class TestLargeIntegers:
    def test_out_of_range_ids_are_absent(self, fruit_store):
        huge = 10**20

        assert fruit_store.get_by_id(huge) is None
        assert fruit_store.get_by_id(0) is None
        assert fruit_store.delete_by_id(huge) is False
        assert fruit_store.update(ProductRead(id=huge, name="Ghost")) is None
        assert len(fruit_store.get_all()) == 3

    def test_huge_page_size_returns_every_match(self, fruit_store):
        result = fruit_store.search_contains_paged("a", 0, 10**20, "name")

        assert names(result.items) == ["Apple", "Banana", "Grape"]
        assert result.total == 3

    def test_huge_page_index_is_empty(self, fruit_store):
        result = fruit_store.search_contains_paged("a", 10**20, 10, "name")

        assert result.items == []
        assert result.total == 3


class TestCaseFolding:
    def test_sharp_s_is_not_expanded(self, store):
        store.insert(ProductCreate(name="Straße"))
        store.insert(ProductCreate(name="Strasse"))

        assert names(store.search_contains("ss")) == ["Strasse"]
        assert names(store.search_contains_paged("ß", 0, 10, "name").items) == ["Straße"]


class TestConcurrency:
    def test_inserts_get_unique_ids(self):
        store = InMemoryProductStore()
        ids = []
        lock = threading.Lock()

        def worker(n):
            for i in range(50):
                stored = store.insert(ProductCreate(name=f"t{n}-{i}"))
                with lock:
                    ids.append(stored.id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 400
        assert len(set(ids)) == 400
        assert len(store.get_all()) == 400

    def test_search_never_sees_partial_writes(self):
        store = InMemoryProductStore(
            [ProductCreate(name=f"Item {n:03d}", quantity=0, price=1.0) for n in range(200)]
        )
        originals = store.get_all()
        failures = []
        writers_done = threading.Event()

        def updater():
            for product in originals:
                store.update(product.model_copy(update={"quantity": 1, "price": 2.0}))

        def deleter():
            for product in originals[::2]:
                store.delete_by_id(product.id)

        def searcher():
            while not writers_done.is_set():
                page = store.search_contains_paged("item", 0, 1000, "id")
                ids = [p.id for p in page.items]
                if len(ids) != page.total:
                    failures.append(f"page has {len(ids)} items, total says {page.total}")
                if ids != sorted(set(ids)):
                    failures.append("ids out of order or duplicated")
                torn = [p.id for p in page.items if (p.quantity, p.price) not in {(0, 1.0), (1, 2.0)}]
                if torn:
                    failures.append(f"half-applied update on {torn}")

        searchers = [threading.Thread(target=searcher) for _ in range(4)]
        writers = [threading.Thread(target=updater), threading.Thread(target=deleter)]
        for t in searchers + writers:
            t.start()
        for t in writers:
            t.join()
        writers_done.set()
        for t in searchers:
            t.join()

        assert failures == []
        remaining = store.get_all()
        assert [p.id for p in remaining] == [p.id for p in originals[1::2]]
        assert all((p.quantity, p.price) == (1, 2.0) for p in remaining)
