"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Table entry points for the customer ordering screen and the QR image
links that encode them. Images are rendered by an external QR service.
"""

from urllib.parse import urlencode


def table_ids(count):
    return [str(i) for i in range(1, count + 1)]


def table_entry_url(base_url, table_id):
    return f"{base_url.rstrip('/')}/#/table/{table_id}"


def qr_image_url(entry_url, service_url, size=250):
    query = urlencode({"size": f"{size}x{size}", "data": entry_url})
    return f"{service_url}?{query}"


def table_qr_codes(base_url, service_url, count, size=250):
    codes = []
    for t in table_ids(count):
        url = table_entry_url(base_url, t)
        codes.append({"table_id": t, "name": f"Table {t}", "url": url,
                      "qr_image": qr_image_url(url, service_url, size)})
    return codes
