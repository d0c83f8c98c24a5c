from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class StatusHistoryEntry(Base):
    __tablename__ = "status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Text, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False)
    from_status = Column(Text)
    to_status = Column(Text, nullable=False)
    changed_at = Column(Text, nullable=False)
    notes = Column(Text)

    application = relationship("Application", back_populates="status_history")
