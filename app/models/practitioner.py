from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Practitioner(Base):
    __tablename__ = "practitioners"
    
    id = Column(Integer, primary_key=True, index=True)
    
    # Personal information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    specialization = Column(String(100), nullable=True)
    
    # Recurring weekly availability, stored as the wire-format schedule
    availability = Column(JSON, nullable=True)
    timezone = Column(String(64), nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    
    # Relationships
    appointments = relationship("Appointment", back_populates="practitioner")
    
    def __repr__(self):
        return f"<Practitioner(id={self.id}, name='{self.first_name} {self.last_name}', timezone='{self.timezone}')>"
