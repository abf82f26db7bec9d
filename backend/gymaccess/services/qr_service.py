"""QR code rendering for member access tokens."""

import base64
import io
import uuid

import qrcode

QR_SIZE_PX = 300
QR_BORDER = 2


def generate_qr_token() -> str:
    """New opaque member token (UUID4)."""
    return str(uuid.uuid4())


def qr_data_url(data: str, size: int = QR_SIZE_PX) -> str:
    """Render ``data`` as a black-on-white PNG and return it as a data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    img = img.resize((size, size))

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
