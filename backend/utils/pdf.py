# backend/utils/pdf.py

import logging
from pathlib import Path
from typing import List, Optional

from config import settings
# Models imported for type hints only
from models.order import Order, OrderItem
from models.users import User

logger = logging.getLogger(__name__)

# Paths
STORAGE_DIR = Path(settings.RECEIPTS_DIR)
FONT_DIR = Path("assets/fonts")
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"

# Built-in fonts cover Latin-1 (á, é, ñ); DejaVu is used when shipped
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

def ensure_storage_dir() -> None:
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)

def get_receipt_path(order_id: int) -> Path:
    """Returns the PDF path for the given order."""
    ensure_storage_dir()
    return STORAGE_DIR / f"PEDIDO-{order_id}.pdf"

_fonts_inited = False
def _init_fonts():
    """Registers DejaVu fonts in ReportLab when they are available."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    if not FONT_REGULAR_PATH.exists():
        return

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    try:
        pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
        FONT_REGULAR_NAME = "DejaVuSans"
        FONT_BOLD_NAME = "DejaVuSans"
        if FONT_BOLD_PATH.exists():
            pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
            FONT_BOLD_NAME = "DejaVuSans-Bold"
    except Exception as e:
        logger.warning("Font init failed, using built-in fonts: %s", e)

def _money(value: float) -> str:
    return f"{settings.CURRENCY_LABEL} {value:.2f}"

def generate_receipt_pdf(order: Order, items: List[OrderItem], out_path: Path, user: Optional[User] = None) -> None:
    """
    Renders an order receipt:
    - Header (order number, date, status)
    - Customer, delivery address, payment method, gift message
    - Line-item table in order
    - Total
    """
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas
    from reportlab.lib.units import mm

    _init_fonts()
    ensure_storage_dir()

    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4

    def draw_text(x, y, text, font=None, size=10, align="left", color=(0,0,0)):
        c.setFillColorRGB(*color)
        c.setFont(font or FONT_REGULAR_NAME, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        elif align == "center":
            c.drawCentredString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)
        c.setFillColorRGB(0,0,0)

    # --- 1. HEADER ---
    y = height - 20 * mm
    draw_text(20 * mm, y, "Canastas de Regalo", font=FONT_BOLD_NAME, size=14)
    draw_text(190 * mm, y, f"Pedido #{order.id}", font=FONT_BOLD_NAME, size=16, align="right")
    y -= 8 * mm
    created = order.created_at.strftime("%Y-%m-%d %H:%M") if order.created_at else ""
    draw_text(190 * mm, y, f"Fecha: {created}", size=10, align="right")
    y -= 5 * mm
    draw_text(190 * mm, y, f"Estado: {order.status}", size=10, align="right")

    y -= 6 * mm
    c.setLineWidth(0.5)
    c.line(20 * mm, y, 190 * mm, y)
    y -= 10 * mm

    # --- 2. CUSTOMER AND DELIVERY ---
    draw_text(20 * mm, y, "CLIENTE:", font=FONT_BOLD_NAME)
    y -= 5 * mm
    if user:
        draw_text(20 * mm, y, user.name)
        y -= 5 * mm
        draw_text(20 * mm, y, f"Tel: {user.phone}")
        y -= 5 * mm

    address = str(order.delivery_address or "")
    draw_text(20 * mm, y, f"Entrega: {address[:70]}")
    if len(address) > 70:
        y -= 4 * mm
        draw_text(37 * mm, y, address[70:140])
    y -= 5 * mm

    payment_label = order.payment_type.name if order.payment_type else f"#{order.payment_type_id}"
    draw_text(20 * mm, y, f"Forma de pago: {payment_label}")
    y -= 5 * mm

    if order.gift_message:
        draw_text(20 * mm, y, f"Mensaje: {order.gift_message[:80]}", color=(0.3, 0.3, 0.3))
        y -= 5 * mm

    y -= 8 * mm

    # --- 3. ITEMS TABLE ---
    c.setFillColorRGB(0.95, 0.95, 0.95)
    c.rect(20 * mm, y - 2*mm, 170 * mm, 8 * mm, fill=1, stroke=0)
    c.setFillColorRGB(0, 0, 0)

    c.setFont(FONT_BOLD_NAME, 9)
    c.drawString(22 * mm, y, "N.")
    c.drawString(30 * mm, y, "Tipo")
    c.drawString(50 * mm, y, "Producto")
    c.drawRightString(130 * mm, y, "Cant.")
    c.drawRightString(155 * mm, y, "Precio")
    c.drawRightString(185 * mm, y, "Importe")
    y -= 8 * mm

    c.setFont(FONT_REGULAR_NAME, 9)
    for idx, it in enumerate(items, start=1):
        c.drawString(22 * mm, y, str(idx))
        c.drawString(30 * mm, y, "Canasta" if it.product_type == "Basket" else "Dulce")
        c.drawString(50 * mm, y, str(it.product_name)[:45])
        c.drawRightString(130 * mm, y, f"{it.quantity}")
        c.drawRightString(155 * mm, y, f"{it.unit_price:.2f}")
        c.drawRightString(185 * mm, y, f"{it.unit_price * it.quantity:.2f}")

        c.setLineWidth(0.1)
        c.line(20 * mm, y - 2*mm, 190 * mm, y - 2*mm)
        y -= 6 * mm

        # New page
        if y < 40 * mm:
            c.showPage()
            y = height - 20 * mm
            c.setFont(FONT_REGULAR_NAME, 9)

    # --- 4. TOTAL ---
    y -= 5 * mm
    if y < 40 * mm:
        c.showPage()
        y = height - 30 * mm

    c.setFont(FONT_BOLD_NAME, 12)
    c.drawRightString(150 * mm, y, "TOTAL:")
    c.drawRightString(185 * mm, y, _money(order.total))

    c.setFont(FONT_REGULAR_NAME, 8)
    c.drawCentredString(width / 2, 20 * mm, "Gracias por su compra")

    c.showPage()
    c.save()
