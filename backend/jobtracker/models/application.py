from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class Application(Base):
    __tablename__ = "applications"

    id = Column(Text, primary_key=True)
    company_name = Column(Text, nullable=False)
    company_website = Column(Text)
    company_size = Column(Text)
    job_title = Column(Text, nullable=False)
    job_url = Column(Text)
    job_description_raw = Column(Text)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(Text, default="EUR")
    compensation_type = Column(Text)
    salary_not_specified = Column(Boolean, nullable=False, default=False)
    location_city = Column(Text)
    location_country = Column(Text)
    work_mode = Column(Text)
    status = Column(Text, nullable=False, default="saved")
    date_applied = Column(Text)
    date_added = Column(Text, nullable=False)
    match_score = Column(Integer)
    source = Column(Text)
    contact_name = Column(Text)
    contact_email = Column(Text)
    contact_role = Column(Text)
    notes = Column(Text)
    priority = Column(Text, nullable=False, default="medium")
    follow_up_date = Column(Text)
    resume_id = Column(Text, ForeignKey("resumes.id", ondelete="SET NULL"))
    cover_letter_notes = Column(Text)
    updated_at = Column(Text, nullable=False)

    status_history = relationship(
        "StatusHistoryEntry",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="StatusHistoryEntry.id",
    )
    tags = relationship("Tag", secondary="application_tags", back_populates="applications")
    resume = relationship("Resume", back_populates="applications")
    cover_letters = relationship("CoverLetter", back_populates="application")
