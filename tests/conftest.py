import sys
import os
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from b2b_pricing.config.settings import Settings
from b2b_pricing.engine import PriceTier


PRODUCTS_CSV = """product_id,name,sku,price
P-1,LED Panel,LED-1,11.00
P-2,Floodlight,FL-2,42.50
P-3,High Bay,,89.00
"""

TIERS_CSV = """product_id,min_quantity,max_quantity,unit_price,sort_order
P-1,1,9,10.0,0
P-1,10,49,9.0,1
P-1,50,,7.0,2
P-2,100,,36.0,0
"""


@pytest.fixture
def led_tiers():
    """The 1-9 / 10-49 / 50+ table used across pricing tests."""
    return [
        PriceTier(min_quantity=1, max_quantity=9, unit_price=10.0, sort_order=0),
        PriceTier(min_quantity=10, max_quantity=49, unit_price=9.0, sort_order=1),
        PriceTier(min_quantity=50, max_quantity=None, unit_price=7.0, sort_order=2),
    ]


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary data directory with a small catalog."""
    (tmp_path / 'products.csv').write_text(PRODUCTS_CSV, encoding='utf-8')
    (tmp_path / 'price_tiers.csv').write_text(TIERS_CSV, encoding='utf-8')
    return Settings.load(project_root=tmp_path, data_dir=tmp_path)
