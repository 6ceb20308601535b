import uuid

from sqlalchemy import BigInteger, Column, String, Boolean, Text
from sqlalchemy.orm import relationship

from shortlink_app.database.connection import Base, UTCDateTime, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class ShortUrl(Base):
    """
    A shortened URL and its lifecycle state.

    Everything except ``is_active`` is fixed at creation. ``is_active``
    goes from True to False once, when an access path or the listing sweep
    notices the record has expired. Records are never deleted here.
    """
    __tablename__ = "short_urls"

    id = Column(String(36), primary_key=True, default=new_id)
    original_url = Column(Text, nullable=False)
    # The unique constraint is the real guard against concurrent creators;
    # the service's exists() probe is only a fast path.
    shortcode = Column(String(20), unique=True, nullable=False, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    validity = Column(BigInteger, nullable=False)  # minutes
    expires_at = Column(UTCDateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Newest first
    clicks = relationship(
        "Click",
        back_populates="short_url",
        order_by="Click.timestamp.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<ShortUrl {self.shortcode} -> {self.original_url}>"
