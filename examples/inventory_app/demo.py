"""
Inventory example: create products, adjust stock, retire a product.
"""

from __future__ import annotations

from typing import Any, Dict, List

from unitorm import Connection, NotFoundError

from .models import Product, StockLevel

CATALOG = [
    ("TEA-001", "Sencha", 7.5, 40),
    ("TEA-002", "Genmaicha", 6.0, 12),
    ("TEA-003", "Hojicha", 6.5, 0),
]


def bootstrap_connection(dsn: str = "sqlite:///:memory:") -> Connection:
    return Connection.from_dsn(dsn)


def seed_sample_data(connection: Connection) -> Dict[str, List[int]]:
    with connection.transaction() as tx:
        products = [
            tx.create(Product(sku=sku, name=name, unit_price=price))
            for sku, name, price, _ in CATALOG
        ]
        stock = [
            tx.create(StockLevel(sku=sku, on_hand=count, label=sku.encode()))
            for sku, _, _, count in CATALOG
        ]
    return {
        "products": [int(handle.id) for handle in products],
        "stock": [int(handle.id) for handle in stock],
    }


def receive_shipment(connection: Connection, stock_id: int, quantity: int) -> int:
    with connection.transaction() as tx:
        level = tx.get(StockLevel, stock_id)
        with level.borrow_mut() as stock:
            stock.on_hand += quantity
            return stock.on_hand


def retire_product(connection: Connection, product_id: int) -> None:
    with connection.transaction() as tx:
        tx.get(Product, product_id).delete()


def list_products(connection: Connection, product_ids: List[int]) -> List[Dict[str, Any]]:
    result: List[Dict[str, Any]] = []
    with connection.transaction() as tx:
        for product_id in product_ids:
            try:
                handle = tx.get(Product, product_id)
            except NotFoundError:
                continue
            with handle.borrow() as product:
                result.append(product.to_dict())
    return result


def run_demo(dsn: str = "sqlite:///:memory:") -> List[Dict[str, Any]]:
    with bootstrap_connection(dsn) as connection:
        seeded = seed_sample_data(connection)
        receive_shipment(connection, seeded["stock"][2], 24)
        retire_product(connection, seeded["products"][1])
        return list_products(connection, seeded["products"])


if __name__ == "__main__":
    for entry in run_demo("sqlite:///inventory_demo.db"):
        print(f"{entry['sku']}: {entry['name']} at {entry['unit_price']:.2f}")
