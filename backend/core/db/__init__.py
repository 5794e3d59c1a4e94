"""
Database package for the Price Adjustment Tracker backend.

All functions are re-exported here:

    from backend.core.db import save_receipt, list_coupons
"""

# Base - connection, initialization
from .base import (
    DB_PATH,
    get_db,
    init_db,
)

# Receipts
from .receipts import (
    new_receipt_id,
    save_receipt,
    get_receipt,
    list_receipts,
    delete_receipt,
    load_purchase_records,
)

# Coupons
from .coupons import (
    new_coupon_id,
    save_coupon,
    get_coupon,
    list_coupons,
    delete_coupon,
    load_promotion_records,
)

# Settings
from .settings import (
    get_setting,
    set_setting,
    get_all_settings,
    get_adjustment_window,
    set_adjustment_window,
)

# Claims
from .claims import (
    mark_adjustment_claimed,
    unmark_adjustment_claimed,
    get_claim,
    list_claims,
    SqliteClaimStore,
)

# Stats
from .stats import (
    receipt_count,
    coupon_count,
    item_count,
    get_stats,
)

# Backup
from .backup import (
    export_all_data,
    import_data,
    clear_all_data,
)

# Matcher record source
from .records import DatabaseRecordSource
