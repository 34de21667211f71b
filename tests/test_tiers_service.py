"""
Tier table persistence: validated saves, replacement, deletion.
"""
import pytest

from b2b_pricing.engine import PriceTier
from b2b_pricing.services.tiers_service import TiersService, TierValidationError


@pytest.fixture
def service(settings):
    return TiersService(settings.tiers_csv)


def test_list_tiers(service):
    tiers = service.list_tiers('P-1')
    assert [(t.min_quantity, t.max_quantity, t.unit_price) for t in tiers] == [
        (1, 9, 10.0), (10, 49, 9.0), (50, None, 7.0),
    ]


def test_list_tiers_unknown_product(service):
    assert service.list_tiers('NONE') == []


def test_replace_tiers_assigns_sort_order(service):
    saved = service.replace_tiers('P-3', [
        PriceTier(min_quantity=1, max_quantity=4, unit_price=89.0, sort_order=7),
        PriceTier(min_quantity=5, max_quantity=None, unit_price=80.0, sort_order=3),
    ])
    assert [t.sort_order for t in saved] == [0, 1]

    reloaded = service.list_tiers('P-3')
    assert reloaded == saved


def test_replace_keeps_other_products(service):
    service.replace_tiers('P-1', [PriceTier(min_quantity=1, max_quantity=None, unit_price=9.5)])
    assert len(service.list_tiers('P-1')) == 1
    assert len(service.list_tiers('P-2')) == 1


def test_invalid_table_is_not_saved(service):
    with pytest.raises(TierValidationError) as exc_info:
        service.replace_tiers('P-1', [
            PriceTier(min_quantity=1, max_quantity=9, unit_price=10.0),
            PriceTier(min_quantity=10, max_quantity=None, unit_price=12.0),
        ])

    assert "decrease" in exc_info.value.reason
    assert len(service.list_tiers('P-1')) == 3, "Existing table must survive a rejected save"


def test_empty_table_clears(service):
    assert service.replace_tiers('P-1', []) == []
    assert service.list_tiers('P-1') == []


def test_delete_tiers(service):
    assert service.delete_tiers('P-1') is True
    assert service.list_tiers('P-1') == []
    assert service.delete_tiers('P-1') is False


def test_creates_store_when_missing(tmp_path):
    service = TiersService(tmp_path / 'nested' / 'price_tiers.csv')
    service.replace_tiers('X', [PriceTier(min_quantity=1, max_quantity=None, unit_price=3.0)])
    assert service.list_tiers('X')[0].unit_price == 3.0


def test_stats(service):
    stats = service.get_stats()
    assert stats['products_with_tiers'] == 2
    assert stats['total_tiers'] == 4
    assert stats['by_product']['P-1'] == 3
