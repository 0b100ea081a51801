"""
Shared fixtures: upstream payloads as the PHP backend sends them, and a
BusaApiClient wired to an in-memory transport.
"""
import json

import httpx
import pytest

from packages.common.busa_client import BusaApiClient

BASE_URL = "https://busa.test/busa-api/database"


SALES = [
    {
        "id": 101,
        "saleDate": "2024-02-05 10:15:00",
        "customer": {"id": "7", "name": "Kano Dairy Depot"},
        "items": json.dumps([
            {"productId": "1", "productName": "Greek Yogurt 500ml", "quantity": "10", "unitPrice": "1500", "totalPrice": "15000"},
            {"productId": "2", "productName": "Plain Yogurt 1L", "quantity": 4, "unitPrice": 2000, "totalPrice": 8000},
        ]),
        "subTotal": "23000",
        "totalAmount": "23000",
        "paymentMethod": "Transfer",
        "status": "Completed",
        "createdAt": "2024-02-05T10:15:00Z",
    },
    {
        "id": "102",
        "saleDate": "2024-01-10",
        "customerName": "Zaria Retail",
        "customerId": 8,
        "items": [
            {"productId": "1", "productName": "Greek Yogurt 500ml", "quantity": 2, "unitPrice": 1500, "totalPrice": 3000},
        ],
        "totalAmount": 3000,
        "paymentMethod": "Cash",
        "status": "Pending",
        "createdAt": "2024-01-10T08:00:00Z",
    },
    {
        "id": "103",
        "saleDate": "0000-00-00",
        "customer": {"id": "7", "name": "Kano Dairy Depot"},
        "items": "",
        "totalAmount": "",
        "paymentMethod": "Cash",
        "status": "Cancelled",
    },
]

INVOICES = [
    {
        "id": "201",
        "invoiceNumber": "INV-2024-001",
        "issueDate": "2024-02-05",
        "dueDate": "2024-03-05",
        "customer": {"id": "7", "name": "Kano Dairy Depot"},
        "items": [],
        "totalAmount": "23000",
        "status": "Sent",
        "createdAt": "2024-02-05T10:20:00Z",
    },
    {
        "id": "202",
        "invoiceNumber": "INV-2024-002",
        "issueDate": "2024-01-10",
        "customer": {"id": "8", "name": "Zaria Retail"},
        "totalAmount": 3000,
        "status": "Paid",
        "createdAt": "2024-01-10T08:05:00Z",
    },
    {
        "id": "203",
        "invoiceNumber": "INV-2024-003",
        "issueDate": "2023-12-01",
        "customer": {"id": "7", "name": "Kano Dairy Depot"},
        "totalAmount": "5000",
        "status": "Overdue",
        "createdAt": "2023-12-01T09:00:00Z",
    },
    {
        "id": "204",
        "invoiceNumber": "INV-2024-004",
        "issueDate": "2024-02-20",
        "customer": {"id": "7", "name": "Kano Dairy Depot"},
        "totalAmount": "9000",
        "status": "Cancelled",
        "createdAt": "2024-02-20T09:00:00Z",
    },
]

RECEIPTS = [
    {
        "id": "301",
        "receiptNumber": "RCP-001",
        "receiptDate": "2024-02-06",
        "ledgerAccountId": "7",
        "ledgerAccountName": "Kano Dairy Depot",
        "amountReceived": "10000",
        "paymentMethod": "Transfer",
    },
    {
        "id": "302",
        "receiptNumber": "RCP-002",
        "receiptDate": "2024-02-10T12:00:00",
        "ledgerAccountId": "7",
        "ledgerAccountName": "Kano Dairy Depot",
        "amountReceived": 2500.50,
        "paymentMethod": "Cash",
    },
    {
        "id": "303",
        "receiptNumber": "RCP-003",
        "receiptDate": "2024-01-15",
        "ledgerAccountId": "8",
        "ledgerAccountName": "Zaria Retail",
        "amountReceived": "3000",
        "paymentMethod": "Cheque",
    },
    {
        "id": "304",
        "receiptNumber": "RCP-004",
        "receiptDate": "not a date",
        "ledgerAccountId": "8",
        "ledgerAccountName": "Zaria Retail",
        "amountReceived": "700",
        "paymentMethod": "Cash",
    },
]

CREDIT_NOTES = [
    {
        "id": "401",
        "creditNoteNumber": "CN-001",
        "creditNoteDate": "2024-02-12",
        "ledgerAccountId": "7",
        "ledgerAccountName": "Kano Dairy Depot",
        "amount": "3000",
        "reason": "Returned Goods",
        "items": json.dumps([
            {"productId": "1", "productName": "Greek Yogurt 500ml", "quantity": 2, "unitPrice": 1500, "totalPrice": 3000},
        ]),
    },
    {
        "id": "402",
        "creditNoteNumber": "CN-002",
        "creditNoteDate": "2024-02-14",
        "ledgerAccountId": "7",
        "ledgerAccountName": "Kano Dairy Depot",
        "amount": "1000",
        "reason": "Damages",
        "items": [
            {"productId": "2", "productName": "Plain Yogurt 1L", "quantity": 1, "unitPrice": 1000, "totalPrice": 1000},
        ],
    },
]

LEDGER_ACCOUNTS = [
    {
        "id": "7",
        "accountCode": "B1-EX-F/DLR",
        "priceLevel": "B1-EX-F/DLR",
        "zone": "",
        "creditPeriod": "30",
        "creditLimit": "10000",
        "name": "Kano Dairy Depot",
        "accountType": "Customer",
        "createdAt": "2023-06-01 09:00:00",
    },
    {
        "id": "8",
        "accountCode": "R-RETAILER-Z1/RTL",
        "priceLevel": "R-RETAILER-Z1/RTL",
        "zone": "Z1",
        "creditPeriod": 14,
        "creditLimit": 0,
        "name": "Zaria Retail",
        "accountType": "Customer",
        "createdAt": "2023-07-01 09:00:00",
    },
    {
        "id": "9",
        "accountCode": "MISC",
        "name": "Milk Supplier Ltd",
        "accountType": "Supplier",
        "createdAt": "2023-08-01 09:00:00",
    },
]

PRODUCTS = [
    {
        "id": "1",
        "name": "Greek Yogurt 500ml",
        "price": "1500",
        "productCategory": "Greek Yogurt",
        "unitOfMeasure": "PCS",
        "sku": "GY-500",
        "stock": "40",
        "lowStockThreshold": "10",
        "priceTiers": json.dumps([{"priceLevel": "B1-EX-F/DLR", "price": "1400"}]),
        "createdAt": "2023-05-01 00:00:00",
    },
    {
        "id": "2",
        "name": "Plain Yogurt 1L",
        "price": 2000,
        "productCategory": "Plain Yogurt",
        "unitOfMeasure": "PCS",
        "sku": "PY-1L",
        "stock": 5,
        "lowStockThreshold": 8,
        "createdAt": "2023-05-02 00:00:00",
    },
    {
        "id": "3",
        "name": "Mango Flavor Concentrate",
        "price": 800,
        "productCategory": "Mango Flavor",
        "unitOfMeasure": "Litres",
        "sku": "MF-01",
        "stock": 0,
        "createdAt": "2023-05-03 00:00:00",
    },
]

RAW_MATERIALS = [
    {
        "id": "501",
        "name": "Powdered Milk",
        "category": "Milk Inputs",
        "sku": "RM-PM",
        "unitOfMeasure": "KG",
        "stock": "250",
        "costPrice": "1200",
        "lowStockThreshold": "50",
        "createdAt": "2023-04-01",
    },
    {
        "id": "502",
        "name": "Yogurt Cups 500ml",
        "category": "Packaging",
        "sku": "RM-CUP",
        "unitOfMeasure": "PCS",
        "stock": "8",
        "costPrice": "20",
        "createdAt": "2023-04-02",
    },
]

USAGE_LOGS = [
    {
        "id": "601",
        "usageNumber": "USE-001",
        "rawMaterialId": "501",
        "rawMaterialName": "Powdered Milk",
        "quantityUsed": "25",
        "unitOfMeasure": "KG",
        "department": "Production",
        "usageDate": "2024-02-07",
        "notes": "Morning batch",
    },
    {
        "id": "602",
        "usageNumber": "USE-002",
        "rawMaterialId": "502",
        "rawMaterialName": "Yogurt Cups 500ml",
        "quantityUsed": "100",
        "unitOfMeasure": "PCS",
        "department": "Packaging",
        "usageDate": "2024-02-08",
    },
]

PURCHASE_ORDERS = [
    {
        "id": "701",
        "poNumber": "PO-001",
        "orderDate": "2024-02-01",
        "supplierName": "Milk Supplier Ltd",
        "supplierId": "9",
        "items": [{"productName": "Powdered Milk", "quantity": 100, "unitCost": 1200, "totalCost": 120000}],
        "totalCost": "120000",
        "status": "Ordered",
    },
]


def envelope(data, success=True, message=None):
    body = {"success": success, "data": data}
    if message is not None:
        body["message"] = message
    return body


# Script name -> JSON body; some scripts answer a bare list
DEFAULT_ROUTES = {
    "get_sales.php": envelope(SALES),
    "get_invoices.php": envelope(INVOICES),
    "get_receipts.php": RECEIPTS,
    "get_credit_notes.php": envelope(CREDIT_NOTES),
    "getLedgerAccounts.php": envelope(LEDGER_ACCOUNTS),
    "get_ledger_account_detail.php": {"success": True, "account": LEDGER_ACCOUNTS[0]},
    "get_products.php": envelope(PRODUCTS),
    "get_raw_materials.php": envelope(RAW_MATERIALS),
    "get_material_usage_logs.php": envelope(USAGE_LOGS),
    "get_purchase_orders.php": envelope(PURCHASE_ORDERS),
}


class FakeBusaApi:
    """In-memory stand-in for the PHP backend; records every request it sees"""

    def __init__(self, routes=None):
        self.routes = dict(DEFAULT_ROUTES)
        self.routes.update(routes or {})
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        script = request.url.path.rsplit("/", 1)[-1]
        if script not in self.routes:
            return httpx.Response(404, text="Not Found")
        body = self.routes[script]
        if isinstance(body, httpx.Response):
            return body
        if callable(body):
            return body(request)
        return httpx.Response(200, json=body)

    def client(self) -> BusaApiClient:
        return BusaApiClient(base_url=BASE_URL, transport=httpx.MockTransport(self.handler))

    def calls_to(self, script: str):
        return [r for r in self.requests if r.url.path.endswith("/" + script)]


@pytest.fixture
def fake_api():
    return FakeBusaApi()


@pytest.fixture
def busa_client(fake_api):
    return fake_api.client()
