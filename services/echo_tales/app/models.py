"""Relational shapes for users, voices and narrations.

The tables are created at startup and by the Alembic migration; request
handlers do not read or write them yet.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)

    voices = relationship("Voice", back_populates="user")


class Voice(Base):
    __tablename__ = "voices"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"))
    # External id assigned by the voice provider
    voice_id = Column(String(255), nullable=False)
    gender = Column(String(50), nullable=False)
    # custom, premium or free
    type = Column(String(50), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="voices")


class Narration(Base):
    __tablename__ = "narrations"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    text = Column(Text, nullable=False)
    voice_id = Column(Integer, ForeignKey("voices.id"))
    emotion = Column(String(50), nullable=False)
    speed = Column(String(20), nullable=False)
    pitch = Column(String(20), nullable=False)
    audio_url = Column(String(1024))
    created_at = Column(String(64), nullable=False)
