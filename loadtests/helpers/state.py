"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, not shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks a simulated customer from search to confirmed order."""

    seen_product_ids: list[str] = field(default_factory=list)
    cart: list[dict] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)
    rejected_orders: int = 0
