"""Payment instructions shown after a successful reservation.

Payment is made to a fixed PIX key and proof is sent to a fixed WhatsApp
contact. Both come from the environment:
  - PAYMENT_PIX_KEY
  - PAYMENT_WHATSAPP_NUMBER   (digits only, used in the wa.me link)
  - PAYMENT_WHATSAPP_DISPLAY  (human-readable form)
  - CURRENCY_SYMBOL
"""

import os
import re
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import quote

DEFAULT_PIX_KEY = "34.481.266/0001-15"
DEFAULT_WHATSAPP_NUMBER = "5547991266161"
DEFAULT_WHATSAPP_DISPLAY = "47 99126-6161"
DEFAULT_CURRENCY_SYMBOL = "R$"

CENTS = Decimal("0.01")


@dataclass
class PaymentInstructions:
    amount: str
    pix_key: str
    whatsapp_number: str
    whatsapp_display: str
    message: str
    whatsapp_url: str

    def as_dict(self) -> dict:
        return asdict(self)


def format_amount(value) -> str:
    """Format a price with two decimals and the configured currency symbol: 'R$ 25.00'."""
    symbol = os.getenv("CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL)
    amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{symbol} {amount}"


def whatsapp_number() -> str:
    raw = os.getenv("PAYMENT_WHATSAPP_NUMBER", DEFAULT_WHATSAPP_NUMBER)
    # wa.me only accepts digits
    return re.sub(r"[^\d]", "", raw)


def build_proof_message(stake_number: int, tournament_name: str, price) -> str:
    """Pre-filled WhatsApp text referencing the stake, tournament and price."""
    return (
        f"Hello! I would like to send the payment proof for the reservation of stake {stake_number} "
        f"in the tournament {tournament_name}. Amount: {format_amount(price)}"
    )


def build_whatsapp_url(message: str) -> str:
    return f"https://wa.me/{whatsapp_number()}?text={quote(message, safe='')}"


def build_payment_instructions(stake_number: int, tournament_name: str, price) -> PaymentInstructions:
    message = build_proof_message(stake_number, tournament_name, price)
    return PaymentInstructions(
        amount=format_amount(price),
        pix_key=os.getenv("PAYMENT_PIX_KEY", DEFAULT_PIX_KEY),
        whatsapp_number=whatsapp_number(),
        whatsapp_display=os.getenv("PAYMENT_WHATSAPP_DISPLAY", DEFAULT_WHATSAPP_DISPLAY),
        message=message,
        whatsapp_url=build_whatsapp_url(message),
    )
