# pdf_mailer/models/submission.py

from sqlalchemy import Column, String, DateTime, Uuid
import uuid

from pdf_mailer.database import Base


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = {"extend_existing": True}

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    custom_id = Column(String, nullable=True)
    submission_date = Column(DateTime(timezone=True), nullable=True)
    system_timestamp = Column(DateTime(timezone=True), nullable=False)
