from datetime import datetime
import re

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from app.models.category import Category
from app.models.lifecycle_history import LifecycleHistory
from app.schemas.category import CategoryCreate
from app.services import sku_service
from app.services.category_service import create_category
from app.services.sku_service import generate_fallback_sku, generate_sku
from conftest import make_product


def test_first_sku_for_category(db, category):
    assert generate_sku(db, category.id, now=datetime(2025, 3, 1)) == "ELE-2025-0001"


def test_sku_follows_highest_existing_sequence(db, category):
    make_product(db, category_id=category.id, sku="ELE-2025-0007")
    make_product(db, category_id=category.id, sku="ELE-2025-0003", name="Older")

    assert generate_sku(db, category.id, now=datetime(2025, 3, 1)) == "ELE-2025-0008"


def test_sequence_restarts_each_year(db, category):
    make_product(db, category_id=category.id, sku="ELE-2024-0042")

    assert generate_sku(db, category.id, now=datetime(2025, 1, 2)) == "ELE-2025-0001"


def test_non_numeric_suffixes_are_ignored(db, category):
    make_product(db, category_id=category.id, sku="ELE-2025-CUSTOM")

    assert generate_sku(db, category.id, now=datetime(2025, 3, 1)) == "ELE-2025-0001"


def test_default_prefix_without_category_code(db):
    no_code = create_category(db, CategoryCreate(name="Misc"))

    assert generate_sku(db, no_code.id, now=datetime(2025, 3, 1)) == "GEN-2025-0001"
    assert generate_sku(db, None, now=datetime(2025, 3, 1)) == "GEN-2025-0001"


def test_created_product_gets_generated_sku(db, category):
    product = make_product(db, category_id=category.id)

    assert re.fullmatch(r"ELE-\d{4}-0001", product.sku)


def test_fallback_sku_format():
    sku = generate_fallback_sku(datetime(2025, 3, 1))

    assert re.fullmatch(r"PROD-\d+-\d{1,3}", sku)


def test_database_failure_falls_back(db, category, monkeypatch):
    def broken(db, prefix):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(sku_service, "next_sku_for_prefix", broken)

    sku = generate_sku(db, category.id, now=datetime(2025, 3, 1))

    assert sku.startswith("PROD-")


def test_failed_lookup_keeps_pending_work(db, category, monkeypatch):
    def missing_table(db, prefix):
        return db.execute(text("SELECT sku FROM missing_products")).scalar()

    monkeypatch.setattr(sku_service, "next_sku_for_prefix", missing_table)
    db.add(Category(name="Pending", code="PEN"))

    sku = generate_sku(db, category.id, now=datetime(2025, 3, 1))
    db.commit()

    assert sku.startswith("PROD-")
    assert db.query(Category).filter(Category.code == "PEN").count() == 1


def test_product_created_when_lookup_query_fails(db, category, monkeypatch):
    def missing_table(db, prefix):
        return db.execute(text("SELECT sku FROM missing_products")).scalar()

    monkeypatch.setattr(sku_service, "next_sku_for_prefix", missing_table)

    product = make_product(db, category_id=category.id)

    assert re.fullmatch(r"PROD-\d+-\d{1,3}", product.sku)
    assert product.lifecycle_state == "draft"
    assert db.query(LifecycleHistory).filter(LifecycleHistory.product_id == product.id).count() == 1
