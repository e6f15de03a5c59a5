"""
Parcel database model.
"""

from sqlalchemy import Column, Integer, String
from parceltrack.app.db.session import Base
from parceltrack.app.db.types import UTCDateTime


class Parcel(Base):
    """
    A parcel registered by a client for delivery to an address.

    ``status`` is stored as plain text so callers may use labels outside
    ``ParcelStatus``.
    """
    __tablename__ = "parcel"
    
    number = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Ownership
    client = Column(Integer, nullable=False, index=True)
    
    # Lifecycle
    status = Column(String(32), nullable=False, index=True)
    
    # Delivery information
    address = Column(String(500), nullable=False)
    
    created_at = Column(UTCDateTime, nullable=False)
    
    def __repr__(self):
        return f"<Parcel(number={self.number}, client={self.client}, status='{self.status}')>"
