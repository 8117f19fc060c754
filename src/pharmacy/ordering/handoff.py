"""Order summary handed to the pharmacist over WhatsApp."""

from urllib.parse import quote

from pharmacy.ordering.reservation import OrderResult


def build_handoff_message(result: OrderResult, currency: str = "Bs") -> str:
    details = "\n".join(
        f"- {line.name} x{line.quantity} = {currency} {line.subtotal:.2f}" for line in result.lines
    )
    return f"*PEDIDO #{result.order_id}*\n\n{details}\n\n*Total:* {currency} {result.total:.2f}"


def handoff_link(phone: str, message: str) -> str:
    digits = "".join(ch for ch in phone if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(message)}"
