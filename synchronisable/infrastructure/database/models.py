"""
Modelos de base de datos (ORM) propios del motor.
"""
from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from synchronisable.infrastructure.database.session import Base


class ImportModel(Base):
    """
    Vínculo de identidad: entidad local <-> identidad remota.

    Una fila por entidad local sincronizada. `attrs` guarda el último
    snapshot de atributos mapeados. Ids locales y remotos se guardan como
    texto para soportar cualquier tipo de clave.
    """

    __tablename__ = "imports"
    __table_args__ = (
        UniqueConstraint("synchronizable_type", "synchronizable_id", name="uq_imports_local"),
        UniqueConstraint("synchronizable_type", "remote_id", name="uq_imports_remote"),
    )

    id = Column(Integer, primary_key=True)
    synchronizable_type = Column(String(255), nullable=False, index=True)
    synchronizable_id = Column(String(255), nullable=False)
    remote_id = Column(String(255), nullable=False)
    attrs = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return (
            f"<Import(id={self.id}, type={self.synchronizable_type}, "
            f"local_id={self.synchronizable_id}, remote_id={self.remote_id})>"
        )
