from urllib.parse import unquote

from pharmacy.ordering.handoff import build_handoff_message, handoff_link
from pharmacy.ordering.identifiers import OrderIdGenerator
from pharmacy.ordering.reservation import CommittedLine, OrderResult


class TestOrderIdGenerator:
    def test_format(self):
        ids = OrderIdGenerator(prefix="PED", clock=lambda: 1_700_000_000.5)
        assert ids.next_id() == "PED-1700000000500"

    def test_strictly_increasing_within_same_millisecond(self):
        ids = OrderIdGenerator(clock=lambda: 1_700_000_000.0)
        values = [int(ids.next_id().split("-")[1]) for _ in range(5)]
        assert values == sorted(set(values))
        assert len(values) == 5

    def test_never_goes_backwards_when_clock_does(self):
        times = iter([2000.0, 1000.0])
        ids = OrderIdGenerator(clock=lambda: next(times))
        first = ids.next_id()
        second = ids.next_id()
        assert int(second.split("-")[1]) > int(first.split("-")[1])


def _result():
    return OrderResult(
        order_id="PED-1",
        lines=(
            CommittedLine(product_id="A", name="Paracetamol 500mg", quantity=2, price=10.0, new_stock=3),
            CommittedLine(product_id="B", name="Ibuprofeno 400mg", quantity=1, price=15.5, new_stock=9),
        ),
    )


class TestHandoff:
    def test_total(self):
        assert _result().total == 35.5

    def test_message_lists_every_line_and_total(self):
        message = build_handoff_message(_result(), "Bs")
        assert "PED-1" in message
        assert "- Paracetamol 500mg x2 = Bs 20.00" in message
        assert "- Ibuprofeno 400mg x1 = Bs 15.50" in message
        assert "*Total:* Bs 35.50" in message

    def test_link_keeps_only_phone_digits(self):
        link = handoff_link("+591 700-12345", "hola pedido")
        assert link.startswith("https://wa.me/59170012345?text=")
        assert unquote(link.split("text=")[1]) == "hola pedido"
