from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # admin | business | worker


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String, primary_key=True)
    revoked_at = Column(DateTime(timezone=True), default=utcnow)


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, index=True)
    phone = Column(String)
    industry = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    jobs = relationship("Job", back_populates="business", lazy="select")


class Worker(Base):
    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, index=True)
    phone = Column(String, index=True)
    skill = Column(String, index=True)
    experience = Column(Integer, default=0)
    rating = Column(Float, default=0.0)
    status = Column(String, default="Available")  # Available | Busy | Unavailable
    created_at = Column(DateTime(timezone=True), default=utcnow)

    notifications = relationship("WorkerNotification", back_populates="worker", lazy="select")
    applications = relationship("JobApplication", back_populates="worker", lazy="select")


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)  # the required skill
    company = Column(String)
    location = Column(String)
    job_type = Column(String, default="full-time")
    category = Column(String)
    salary = Column(String)
    description = Column(Text, nullable=False)
    requirements = Column(Text)
    contact_email = Column(String)
    workers_needed = Column(Integer, default=1, nullable=False)
    posted_at = Column(DateTime(timezone=True), default=utcnow)
    status = Column(String, default="active")  # active | closed
    business_id = Column(Integer, ForeignKey("businesses.id"))

    business = relationship("Business", back_populates="jobs", lazy="select")
    notifications = relationship("WorkerNotification", back_populates="job", lazy="select")
    applications = relationship("JobApplication", back_populates="job", lazy="select")


class WorkerNotification(Base):
    __tablename__ = "worker_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    worker_id = Column(Integer, ForeignKey("workers.id"), index=True, nullable=False)
    job_id = Column(Integer, ForeignKey("jobs.id"), index=True, nullable=False)
    type = Column(String, default="job_available")
    title = Column(String)
    message = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    status = Column(String, default="unread")  # unread -> accepted | declined
    action_required = Column(Boolean, default=True)
    action_type = Column(String, default="accept_decline")

    worker = relationship("Worker", back_populates="notifications", lazy="select")
    job = relationship("Job", back_populates="notifications", lazy="selectin")  # embedded by the worker feed listing


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), index=True, nullable=False)
    worker_id = Column(Integer, ForeignKey("workers.id"), index=True, nullable=False)
    status = Column(String, default="pending")
    applied_at = Column(DateTime(timezone=True), default=utcnow)

    job = relationship("Job", back_populates="applications", lazy="select")
    worker = relationship("Worker", back_populates="applications", lazy="select")


class AdminNotification(Base):
    __tablename__ = "admin_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, default="new_job")
    job_id = Column(Integer, ForeignKey("jobs.id"), index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"))
    business_name = Column(String)
    skill = Column(String)
    workers_needed = Column(Integer)
    title = Column(String)
    message = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    status = Column(String, default="info")  # info | pending | approved | rejected

    job = relationship("Job", lazy="select")


class WorkerRequest(Base):
    __tablename__ = "worker_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), index=True, nullable=False)
    business_name = Column(String)
    workers_needed = Column(Integer, default=1)
    skill = Column(String, nullable=False)
    priority = Column(String, default="Normal")
    duration = Column(String)
    description = Column(Text)
    status = Column(String, default="pending")
    created_at = Column(DateTime(timezone=True), default=utcnow)
