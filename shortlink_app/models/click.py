from sqlalchemy import Column, String, ForeignKey, Text
from sqlalchemy.orm import relationship

from shortlink_app.database.connection import Base, UTCDateTime, utcnow
from shortlink_app.models.url import new_id


class Click(Base):
    """One recorded redirect."""
    __tablename__ = "clicks"

    id = Column(String(36), primary_key=True, default=new_id)
    short_url_id = Column(
        String(36), ForeignKey("short_urls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timestamp = Column(UTCDateTime, nullable=False, default=utcnow)
    referrer = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    ip = Column(String(45), nullable=True)  # IPv4 or IPv6
    location = Column(String(100), nullable=True)

    short_url = relationship("ShortUrl", back_populates="clicks")

    def __repr__(self):
        return f"<Click {self.id} for short url {self.short_url_id}>"
