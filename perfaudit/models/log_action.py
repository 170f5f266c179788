"""
LogAction model — the host's action catalogue (read only here).

Page URL actions store the URL without scheme and "www." in `name`; the
stripped part is encoded in `url_prefix`.
"""
from sqlalchemy import Column, Integer, BigInteger, Text

from perfaudit.config import TABLE_PREFIX
from perfaudit.database import Base

TYPE_PAGE_URL = 1


class LogAction(Base):
    __tablename__ = f'{TABLE_PREFIX}log_action'

    idaction = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=True)
    hash = Column(BigInteger, nullable=False, default=0)  # CRC32 of name, host-maintained
    type = Column(Integer, nullable=True)
    url_prefix = Column(Integer, nullable=True)
