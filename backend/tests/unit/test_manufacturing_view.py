"""
Unit Tests for the manufacturing list view

Bucket counts, compound filters, search and stable sorting over plain
in-memory items.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from labops.core.status_config import Bucket
from labops.schemas.manufacturing_view import (
    ManufacturingFilters,
    ManufacturingViewConfig,
    SortDirection,
    SortField,
    SortSpec,
)
from labops.services.manufacturing_view import (
    apply_view,
    count_by_bucket,
    filter_and_sort,
    filter_items,
    filter_option_counts,
    sort_items,
)

BASE_TIME = datetime(2026, 1, 5, 8, 0)


def _item(seq, status="pending-printing", **fields):
    defaults = {
        "id": f"item-{seq}",
        "patient_name": f"Patient {seq}",
        "status": status,
        "arch_type": "upper",
        "upper_appliance_type": "full-arch-hybrid",
        "lower_appliance_type": None,
        "material": "zirconia",
        "shade": "A2",
        "manufacturing_method": "printing",
        "milling_location": None,
        "inspection_status": None,
        "created_at": BASE_TIME + timedelta(minutes=seq),
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


@pytest.fixture
def items():
    return [
        _item(1, "pending-printing", patient_name="Zoe Adams"),
        _item(2, "pending-milling", patient_name="adam brown", manufacturing_method="milling"),
        _item(3, "printing", patient_name="Émile Roux", shade="B1"),
        _item(4, "milling", patient_name="Carla Diaz", manufacturing_method="milling",
              milling_location="in-house", arch_type="dual",
              lower_appliance_type="ti-bar-superstructure"),
        _item(5, "in-transit", patient_name="Ben Cole", manufacturing_method="milling",
              milling_location="haus-milling", material="pmma"),
        _item(6, "inspection", patient_name="Ava Stone", manufacturing_method="milling",
              milling_location="in-house"),
        _item(7, "completed", patient_name="Carla Diaz", manufacturing_method="milling",
              milling_location="in-house", inspection_status="approved"),
        _item(8, "completed", patient_name="Omar Said"),
    ]


class TestBucketCounts:

    @pytest.mark.unit
    def test_counts(self, items):
        counts = count_by_bucket(items)
        assert counts == {
            "new-script": 2,
            "printing": 1,
            "milling": 1,
            "in-transit": 1,
            "inspection": 1,
            "incomplete": 6,
            "completed": 2,
            "all": 8,
        }

    @pytest.mark.unit
    def test_every_bucket_present_for_empty_list(self):
        counts = count_by_bucket([])
        assert set(counts) == {b.value for b in Bucket}
        assert all(v == 0 for v in counts.values())

    @pytest.mark.unit
    def test_incomplete_and_completed_partition_all(self, items):
        counts = count_by_bucket(items)
        assert counts["incomplete"] + counts["completed"] == counts["all"]

    @pytest.mark.unit
    def test_per_status_buckets_sum_to_incomplete(self, items):
        counts = count_by_bucket(items)
        per_status = ["new-script", "printing", "milling", "in-transit", "inspection"]
        assert sum(counts[b] for b in per_status) == counts["incomplete"]

    @pytest.mark.unit
    def test_input_not_mutated(self, items):
        before = [i.id for i in items]
        count_by_bucket(items)
        filter_and_sort(items, ManufacturingFilters(status=["completed"]))
        assert [i.id for i in items] == before


class TestFilters:

    @pytest.mark.unit
    def test_empty_filters_keep_everything(self, items):
        assert filter_items(items, ManufacturingFilters()) == items
        assert filter_items(items, None) == items

    @pytest.mark.unit
    def test_or_within_category(self, items):
        result = filter_items(items, ManufacturingFilters(status=["printing", "milling"]))
        assert {i.id for i in result} == {"item-3", "item-4"}

    @pytest.mark.unit
    def test_and_across_categories(self, items):
        filters = ManufacturingFilters(
            manufacturing_method=["milling"], milling_location=["in-house"], status=["completed"]
        )
        assert [i.id for i in filter_items(items, filters)] == ["item-7"]

    @pytest.mark.unit
    def test_adding_a_value_never_shrinks_result(self, items):
        narrow = filter_items(items, ManufacturingFilters(milling_location=["in-house"]))
        wide = filter_items(items, ManufacturingFilters(milling_location=["in-house", "haus-milling"]))
        assert {i.id for i in narrow} <= {i.id for i in wide}

    @pytest.mark.unit
    def test_appliance_type_matches_either_arch(self, items):
        result = filter_items(items, ManufacturingFilters(appliance_type=["ti-bar-superstructure"]))
        assert [i.id for i in result] == ["item-4"]

    @pytest.mark.unit
    def test_bucket(self, items):
        result = filter_items(items, ManufacturingFilters(bucket=Bucket.NEW_SCRIPT))
        assert {i.id for i in result} == {"item-1", "item-2"}
        assert len(filter_items(items, ManufacturingFilters(bucket=Bucket.ALL))) == 8

    @pytest.mark.unit
    def test_search_is_case_insensitive(self, items):
        result = filter_items(items, ManufacturingFilters(search="CARLA"))
        assert {i.id for i in result} == {"item-4", "item-7"}

    @pytest.mark.unit
    def test_search_combines_with_categories(self, items):
        result = filter_items(items, ManufacturingFilters(search="carla", status=["milling"]))
        assert [i.id for i in result] == ["item-4"]


class TestFilterOptionCounts:

    @pytest.mark.unit
    def test_counts_per_value(self, items):
        options = filter_option_counts(items)
        assert options["milling_location"] == {"in-house": 3, "haus-milling": 1}
        assert options["manufacturing_method"] == {"printing": 3, "milling": 5}
        assert options["inspection_status"] == {"approved": 1}
        assert options["appliance_type"]["ti-bar-superstructure"] == 1


class TestSorting:

    @pytest.mark.unit
    def test_default_is_newest_first(self, items):
        result = sort_items(items)
        assert [i.id for i in result][:2] == ["item-8", "item-7"]

    @pytest.mark.unit
    def test_patient_name_ascending_ignores_case(self, items):
        spec = SortSpec(sort_by=SortField.PATIENT_NAME, direction=SortDirection.ASC)
        names = [i.patient_name for i in sort_items(items, spec)]
        assert names[:3] == ["adam brown", "Ava Stone", "Ben Cole"]
        assert names.index("Carla Diaz") < names.index("Zoe Adams")

    @pytest.mark.unit
    @pytest.mark.parametrize("direction", [SortDirection.ASC, SortDirection.DESC])
    def test_equal_keys_keep_input_order(self, items, direction):
        spec = SortSpec(sort_by=SortField.PATIENT_NAME, direction=direction)
        carlas = [i.id for i in sort_items(items, spec) if i.patient_name == "Carla Diaz"]
        assert carlas == ["item-4", "item-7"]

    @pytest.mark.unit
    def test_missing_created_at_sorts_oldest(self, items):
        items.append(_item(9, created_at=None))
        spec = SortSpec(sort_by=SortField.CREATED_AT, direction=SortDirection.ASC)
        assert sort_items(items, spec)[0].id == "item-9"

    @pytest.mark.unit
    def test_apply_view(self, items):
        config = ManufacturingViewConfig(
            filters=ManufacturingFilters(bucket=Bucket.COMPLETED),
            sort=SortSpec(sort_by=SortField.PATIENT_NAME, direction=SortDirection.ASC),
        )
        assert [i.id for i in apply_view(items, config)] == ["item-7", "item-8"]

    @pytest.mark.unit
    def test_accented_names_sort_beside_base_letter(self):
        names = [_item(n, patient_name=name) for n, name in enumerate(["Zoe", "Émile", "adam"], start=1)]
        spec = SortSpec(sort_by=SortField.PATIENT_NAME, direction=SortDirection.ASC)
        assert [i.patient_name for i in sort_items(names, spec)] == ["adam", "Émile", "Zoe"]

    @pytest.mark.unit
    def test_accented_name_in_fixture_order(self, items):
        spec = SortSpec(sort_by=SortField.PATIENT_NAME, direction=SortDirection.ASC)
        names = [i.patient_name for i in sort_items(items, spec)]
        assert names.index("Carla Diaz") < names.index("Émile Roux") < names.index("Omar Said")

    @pytest.mark.unit
    @pytest.mark.parametrize("sort_by", [SortField.PATIENT_NAME, SortField.CREATED_AT])
    @pytest.mark.parametrize("direction", [SortDirection.ASC, SortDirection.DESC])
    def test_sorting_twice_gives_same_order(self, items, sort_by, direction):
        spec = SortSpec(sort_by=sort_by, direction=direction)
        once = sort_items(items, spec)
        assert [i.id for i in sort_items(once, spec)] == [i.id for i in once]

    @pytest.mark.unit
    def test_sort_does_not_reorder_input(self, items):
        before = [i.id for i in items]
        spec = SortSpec(sort_by=SortField.PATIENT_NAME, direction=SortDirection.ASC)
        result = sort_items(items, spec)
        filter_and_sort(items, ManufacturingFilters(), spec)
        assert [i.id for i in items] == before
        assert result is not items
