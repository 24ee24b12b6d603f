"""Render de códigos QR (PNG) para los payloads de compartición."""
import base64
import io

import qrcode

from app.core.config import settings


def generate_qr_bytes(data: str) -> bytes:
    """
    Genera el QR del texto dado como PNG (bytes).
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=settings.qr_box_size,
        border=settings.qr_border,
    )
    qr.add_data(data.encode("utf-8"))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_qr_base64(data: str) -> str:
    return base64.b64encode(generate_qr_bytes(data)).decode("utf-8")
