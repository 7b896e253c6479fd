from datetime import datetime, timedelta

import pytest

from app.core.exceptions import NotFoundError
from app.services.history_service import get_lifecycle_history, record_transition
from conftest import make_product


def _seed_history(db, product_id, count):
    start = datetime(2025, 1, 1)
    for i in range(count):
        record_transition(
            db,
            product_id=product_id,
            old_state="draft",
            new_state="pending_approval",
            changed_by="seed",
            notes=f"entry {i}",
            changed_at=start + timedelta(minutes=i),
        )
    db.commit()


def test_history_is_most_recent_first(db, category):
    product = make_product(db, category_id=category.id)
    _seed_history(db, product.id, 3)

    history = get_lifecycle_history(db, product.id)

    # creation entry is stamped now, after the seeded 2025 entries
    assert [h.notes for h in history] == ["Product created", "entry 2", "entry 1", "entry 0"]


def test_history_limit(db, category):
    product = make_product(db, category_id=category.id)
    _seed_history(db, product.id, 5)

    assert len(get_lifecycle_history(db, product.id, limit=2)) == 2
    assert len(get_lifecycle_history(db, product.id, limit=0)) == 1
    assert len(get_lifecycle_history(db, product.id, limit=10_000)) == 6


def test_record_transition_waits_for_caller_commit(db, category):
    product = make_product(db, category_id=category.id)

    record_transition(db, product.id, "draft", "archived", "tester")
    db.rollback()

    assert len(get_lifecycle_history(db, product.id)) == 1


def test_history_for_unknown_product(db):
    with pytest.raises(NotFoundError):
        get_lifecycle_history(db, 12345)
