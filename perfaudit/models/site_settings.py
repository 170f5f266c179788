"""
SiteSettings model — per-site audit options.

Sites without a row are audited with the defaults from config.
"""
from sqlalchemy import Column, Integer, Text, Boolean

from perfaudit.config import TABLE_PREFIX, DEFAULT_RUN_COUNT, DEFAULT_EMULATED_DEVICE
from perfaudit.database import Base


class SiteSettings(Base):
    __tablename__ = f'{TABLE_PREFIX}performance_site_settings'

    idsite = Column(Integer, primary_key=True, autoincrement=False)
    run_count = Column(Integer, nullable=False, default=DEFAULT_RUN_COUNT)
    emulated_device = Column(Text, nullable=False, default=DEFAULT_EMULATED_DEVICE)
    has_extra_http_header = Column(Boolean, nullable=False, default=False)
    extra_http_header_key = Column(Text, nullable=True)
    extra_http_header_value = Column(Text, nullable=True)

    @classmethod
    def defaults(cls, idsite: int) -> 'SiteSettings':
        """Transient settings row used when the site has none stored."""
        return cls(
            idsite=idsite,
            run_count=DEFAULT_RUN_COUNT,
            emulated_device=DEFAULT_EMULATED_DEVICE,
            has_extra_http_header=False,
        )

    @property
    def extra_headers(self) -> dict:
        if self.has_extra_http_header and self.extra_http_header_key:
            return {self.extra_http_header_key: self.extra_http_header_value or ''}
        return {}
