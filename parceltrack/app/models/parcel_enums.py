"""
Parcel Status Enumeration.
"""

import enum


class ParcelStatus(str, enum.Enum):
    """
    Parcel status labels.
    
    Status flow used by callers:
        REGISTERED → SENT → DELIVERED

    The store does not enforce this flow. REGISTERED is the only status in
    which a parcel's address may change or the parcel may be deleted.
    """
    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"
