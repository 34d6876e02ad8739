from examples.inventory_app import (
    bootstrap_connection,
    list_products,
    receive_shipment,
    retire_product,
    run_demo,
    seed_sample_data,
)


def test_inventory_example_seed_and_restock(tmp_path):
    db_path = tmp_path / "inventory_example.db"
    connection = bootstrap_connection(dsn=f"sqlite:///{db_path}")
    try:
        seeded = seed_sample_data(connection)
        assert seeded["products"] == [1, 2, 3]
        assert seeded["stock"] == [1, 2, 3]

        assert receive_shipment(connection, seeded["stock"][1], 8) == 20
        assert receive_shipment(connection, seeded["stock"][1], 1) == 21

        retire_product(connection, seeded["products"][0])
        products = list_products(connection, seeded["products"])
        assert [entry["sku"] for entry in products] == ["TEA-002", "TEA-003"]
    finally:
        connection.close()


def test_run_inventory_demo_skips_retired_product():
    products = run_demo()
    assert len(products) == 2
    assert {"sku", "name", "unit_price", "discontinued"} <= products[0].keys()
    assert all(entry["sku"] != "TEA-002" for entry in products)
