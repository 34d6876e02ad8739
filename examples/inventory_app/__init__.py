from .demo import (  # noqa: F401
    bootstrap_connection,
    list_products,
    receive_shipment,
    retire_product,
    run_demo,
    seed_sample_data,
)

__all__ = [
    "bootstrap_connection",
    "list_products",
    "receive_shipment",
    "retire_product",
    "run_demo",
    "seed_sample_data",
]
