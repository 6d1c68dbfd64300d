from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, func
from perfeval.core.database import Base


class NotificationTemplate(Base):
    """
    Named message template. Placeholders use the {name} form and are
    substituted from the variables passed when the notification is created.
    """
    __tablename__ = "notification_templates"

    id = Column(Integer, primary_key=True, index=True)
    template_key = Column(String(100), nullable=False, unique=True, index=True)
    type = Column(String(50), nullable=False)
    title_template = Column(String(255), nullable=False)
    message_template = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(Text, nullable=True)  # JSON-encoded template variables
    priority = Column(String(20), nullable=False, default="medium")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
