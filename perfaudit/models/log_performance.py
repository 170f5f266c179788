"""
LogPerformance model — one row per (site, device, action, metric) per day.
"""
from sqlalchemy import Column, Integer, Text, DateTime, Index

from perfaudit.config import TABLE_PREFIX
from perfaudit.database import Base


class LogPerformance(Base):
    __tablename__ = f'{TABLE_PREFIX}log_performance'
    __table_args__ = (
        Index('ix_log_performance_site_action', 'idsite', 'idaction'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    idsite = Column(Integer, nullable=False)
    emulated_device = Column(Integer, nullable=False)
    idaction = Column(Integer, nullable=False)
    key = Column(Text, nullable=False)  # metric name, e.g. "speedIndex"
    min = Column(Integer, nullable=False)
    median = Column(Integer, nullable=False)
    max = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
