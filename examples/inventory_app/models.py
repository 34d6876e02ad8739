"""
Data models for the unitorm inventory example.
"""

from __future__ import annotations

from unitorm.core import BooleanField, BytesField, FloatField, IntegerField, Object, StringField


class Product(Object):
    sku = StringField(max_length=32)
    name = StringField(max_length=120)
    unit_price = FloatField(default=0.0)
    discontinued = BooleanField(default=False)

    class Meta:
        table = "products"


class StockLevel(Object):
    sku = StringField(max_length=32)
    on_hand = IntegerField(default=0, db_column="quantity_on_hand")
    label = BytesField(default=b"")

    class Meta:
        table = "stock_levels"
