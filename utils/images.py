# utils/images.py
import base64
import io

from PIL import Image


def image_to_jpeg_bytes(img: Image.Image, quality: int = 90) -> bytes:
    buf = io.BytesIO()
    img.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def image_to_jpeg_base64(img: Image.Image) -> str:
    """Plain base64 (no data: prefix), ready for an image/jpeg part."""
    return base64.b64encode(image_to_jpeg_bytes(img)).decode()


def bytes_to_jpeg_base64(image_bytes: bytes) -> str:
    return image_to_jpeg_base64(Image.open(io.BytesIO(image_bytes)))
