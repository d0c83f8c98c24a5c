from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class CoverLetter(Base):
    __tablename__ = "cover_letters"

    id = Column(Text, primary_key=True)
    application_id = Column(Text, ForeignKey("applications.id", ondelete="SET NULL"), nullable=True)
    title = Column(Text)
    content = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    application = relationship("Application", back_populates="cover_letters")
