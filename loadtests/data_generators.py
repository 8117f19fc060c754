"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the exact field names expected
by the API's Pydantic request schemas and the catalog reload format.
"""

import random

from faker import Faker

fake = Faker("es_ES")

ACTIVE_INGREDIENTS = [
    "Paracetamol",
    "Ibuprofeno",
    "Amoxicilina",
    "Loratadina",
    "Omeprazol",
    "Metformina",
    "Losartan",
    "Cetirizina",
    "Diclofenaco",
    "Naproxeno",
]

STRENGTHS = ["100mg", "250mg", "400mg", "500mg", "1g"]


# ---------- Catalog ----------


def product_record(index: int, stock: int | None = None) -> dict:
    """One catalog record in export format, with a stable id."""
    ingredient = ACTIVE_INGREDIENTS[index % len(ACTIVE_INGREDIENTS)]
    strength = STRENGTHS[index % len(STRENGTHS)]
    return {
        "_id": f"LT-{index:04d}",
        "nombre": f"{ingredient} {strength} {fake.unique.bothify('Lote-??##')}",
        "precio": round(random.uniform(5, 120), 2),
        "stock": stock if stock is not None else random.randint(20, 500),
        "controlado": False,
    }


def catalog_records(count: int = 200, stock: int | None = None) -> list[dict]:
    return [product_record(i, stock) for i in range(count)]


def search_term() -> str:
    """A query long enough to pass the minimum search length."""
    return random.choice(ACTIVE_INGREDIENTS)[: random.randint(3, 6)].lower()


# ---------- Orders ----------


def order_lines(product_ids: list[str], max_lines: int = 3) -> list[dict]:
    chosen = random.sample(product_ids, k=min(len(product_ids), random.randint(1, max_lines)))
    return [{"identifier": pid, "quantity": random.randint(1, 3)} for pid in chosen]


def order_data(product_ids: list[str]) -> dict:
    return {"session_id": fake.uuid4(), "lines": order_lines(product_ids)}
