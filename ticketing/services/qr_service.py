import base64, io, qrcode
from typing import Tuple

from ..errors import CodeGenerationFailed
from ..logging_config import get_logger

logger = get_logger("ticketing.qr")

DATA_URI_PREFIX = "data:image/png;base64,"


def make_qr_png_bytes(payload: str) -> bytes:
    qr = qrcode.QRCode(box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_uri(png_bytes: bytes) -> str:
    return DATA_URI_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>;base64,<payload>`` into (mime type, raw bytes)."""
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URI")
    mime = header[len("data:"):-len(";base64")] or "application/octet-stream"
    return mime, base64.b64decode(payload)


class QRCodeGenerator:
    """Encodes a verification URL into a PNG QR code carried as a data URI."""

    def encode(self, text: str) -> str:
        try:
            return to_data_uri(make_qr_png_bytes(text))
        except Exception as e:
            logger.error("Failed to generate QR code", extra={"error": str(e)})
            raise CodeGenerationFailed() from e
