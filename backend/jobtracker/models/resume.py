from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    version_label = Column(Text)
    file_name = Column(Text)
    created_at = Column(Text, nullable=False)

    applications = relationship("Application", back_populates="resume", passive_deletes=True)
