import html
import re
from typing import Optional

KENYA_PHONE_PATTERN = re.compile(r'^(\+254|254|0)?[17]\d{8}$')

def is_kenyan_phone(phone: Optional[str]) -> bool:
    """Safaricom/Airtel numbers in local, 254 or +254 form"""
    if not phone:
        return False
    return bool(KENYA_PHONE_PATTERN.match(phone.strip()))

def sanitize_input(text: Optional[str]) -> str:
    """Escape user-supplied text before it is placed in an HTML email"""
    if not text:
        return ""
    return html.escape(str(text), quote=True)
