"""
Record views for every list screen

One RecordView per record type: its primary date, the fields the search box
looks at, and the fields that have a dropdown filter.
"""
from packages.domain.listing.filters import RecordView

RECEIPTS = RecordView(
    name="receipts",
    date_field="receipt_date",
    search_fields=("receipt_number", "ledger_account_name", "payment_method"),
    categorical_fields={
        "payment_bucket": lambda r: r.payment_bucket,
        "payment_method": "payment_method",
        "ledger_account_id": "ledger_account_id",
    },
)

CREDIT_NOTES = RecordView(
    name="credit_notes",
    date_field="credit_note_date",
    search_fields=("credit_note_number", "ledger_account_name", "reason"),
    categorical_fields={
        "reason": "reason",
        "ledger_account_id": "ledger_account_id",
    },
)

SALES = RecordView(
    name="sales",
    date_field="sale_date",
    search_fields=("id", "customer.name", "status"),
    categorical_fields={
        "status": "status",
        "payment_method": "payment_method",
    },
)

INVOICES = RecordView(
    name="invoices",
    date_field="issue_date",
    search_fields=("invoice_number", "customer.name", "status"),
    categorical_fields={"status": "status"},
)

PURCHASE_ORDERS = RecordView(
    name="purchase_orders",
    date_field="order_date",
    search_fields=("po_number", "supplier.name", "status"),
    categorical_fields={"status": "status"},
)

PRODUCTS = RecordView(
    name="products",
    date_field="created_at",
    search_fields=("name", "sku", "product_category"),
    categorical_fields={"product_category": "product_category"},
)

RAW_MATERIALS = RecordView(
    name="raw_materials",
    date_field="created_at",
    search_fields=("name", "sku", "category"),
    categorical_fields={"category": "category"},
)

USAGE_LOGS = RecordView(
    name="usage_logs",
    date_field="usage_date",
    search_fields=("usage_number", "raw_material_name", "notes"),
    categorical_fields={
        "raw_material_id": "raw_material_id",
        "department": "department",
    },
)

STOCK_ADJUSTMENTS = RecordView(
    name="stock_adjustments",
    date_field="adjustment_date",
    search_fields=("log_number", "product_name", "notes"),
    categorical_fields={
        "product_id": "product_id",
        "adjustment_type": "adjustment_type",
    },
)

LEDGER_ACCOUNTS = RecordView(
    name="ledger_accounts",
    date_field="created_at",
    search_fields=("name", "account_code", "account_type", "price_level", "zone"),
    categorical_fields={
        "account_type": "account_type",
        "zone": "zone",
    },
)

ACTIVITIES = RecordView(
    name="activities",
    date_field="date",
    search_fields=("document_number", "description", "party_name", "type"),
    categorical_fields={"type": "type"},
)
