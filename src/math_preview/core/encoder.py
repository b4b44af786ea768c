"""Encode SVG markup as an inline data URL."""
import base64

SVG_DATA_URL_PREFIX = "data:image/svg+xml;base64,"


def svg_to_data_url(markup: str) -> str:
    # SVG may contain non-ASCII text; base64 the UTF-8 bytes, never the code points
    payload = base64.b64encode(markup.encode("utf-8")).decode("ascii")
    return SVG_DATA_URL_PREFIX + payload
