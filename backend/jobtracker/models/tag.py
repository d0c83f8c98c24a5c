from sqlalchemy import Column, ForeignKey, Table, Text
from sqlalchemy.orm import relationship, validates
from jobtracker.database import Base

application_tags = Table(
    "application_tags",
    Base.metadata,
    Column("application_id", Text, ForeignKey("applications.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Text, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


def tag_key(name: str) -> str:
    """Case-insensitive identity of a tag name (full Unicode folding)."""
    return name.strip().casefold()


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    name_key = Column(Text, nullable=False, unique=True)
    color = Column(Text)

    applications = relationship("Application", secondary=application_tags, back_populates="tags")

    @validates("name")
    def _sync_name_key(self, key, value):
        self.name_key = tag_key(value)
        return value
