from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, DateTime, text

from backoffice.constants.permissions import DEFAULT_GUARD_NAME

Base = declarative_base()

# --- Core Models ---
# Category and scope are derived from the name at read time and never stored.
class Permission(Base):
    __tablename__ = 'permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    guard_name: Mapped[str] = mapped_column(String(64), nullable=False, default=DEFAULT_GUARD_NAME)
    roles = relationship('RolePermission', back_populates='permission', cascade='all, delete-orphan')
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

class Role(Base):
    __tablename__ = 'roles'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    guard_name: Mapped[str] = mapped_column(String(64), nullable=False, default=DEFAULT_GUARD_NAME)
    permissions = relationship('RolePermission', back_populates='role', cascade='all, delete-orphan')
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))

    @property
    def permission_names(self):
        return [rp.permission.name for rp in self.permissions]

class RolePermission(Base):
    __tablename__ = 'role_permissions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    role_id: Mapped[int] = mapped_column(ForeignKey('roles.id', ondelete='CASCADE'), nullable=False)
    permission_id: Mapped[int] = mapped_column(ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False)

    role = relationship('Role', back_populates='permissions')
    permission = relationship('Permission', back_populates='roles')

    __table_args__ = (UniqueConstraint('role_id', 'permission_id', name='uq_role_permission'),)
