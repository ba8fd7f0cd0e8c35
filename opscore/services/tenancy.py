"""
Tenant isolation guard.

All reads and writes of tenant-owned rows go through :class:`TenantGuard`,
built from the caller's :class:`SessionContext`.  Lists are filtered to the
session tenant; single-row lookups load the row first and *reject* a
cross-tenant hit instead of quietly filtering it away, so that the attempt
can be logged.
"""
from __future__ import annotations

import logging
from typing import Type, TypeVar

from django.db import models

from opscore.exceptions import Forbidden, NotFound
from opscore.permissions import CROSS_TENANT_ROLES
from opscore.services.tokens import SessionContext

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=models.Model)


class TenantGuard:
    def __init__(self, ctx: SessionContext):
        self.ctx = ctx

    @property
    def bypasses_tenancy(self) -> bool:
        return self.ctx.role in CROSS_TENANT_ROLES

    def scoped(self, model: Type[M]) -> models.QuerySet:
        qs = model._default_manager.all()
        if self.bypasses_tenancy:
            return qs
        return qs.filter(tenant_id=self.ctx.tenant_id)

    def own(self, model: Type[M]) -> models.QuerySet:
        """Rows of ``model`` in the session tenant that belong to the caller."""
        return model._default_manager.filter(tenant_id=self.ctx.tenant_id, user_id=self.ctx.user_id)

    def get(self, model: Type[M], pk, *, reveal: bool = False, for_update: bool = False) -> M:
        qs = model._default_manager.all()
        if for_update:
            qs = qs.select_for_update()
        obj = qs.filter(pk=pk).first()
        if obj is None:
            raise NotFound()
        self.check(obj, reveal=reveal)
        return obj

    def check(self, obj: models.Model, *, reveal: bool = False) -> None:
        if self.bypasses_tenancy or obj.tenant_id == self.ctx.tenant_id:
            return
        logger.warning(
            'tenant isolation violation: user=%s tenant=%s role=%s tried %s pk=%s owned by tenant=%s',
            self.ctx.user_id, self.ctx.tenant_id, self.ctx.role,
            obj._meta.label, obj.pk, obj.tenant_id,
        )
        if reveal:
            raise Forbidden()
        raise NotFound()

    def create(self, model: Type[M], **fields) -> M:
        fields.pop('tenant', None)
        fields['tenant_id'] = self.ctx.tenant_id
        return model._default_manager.create(**fields)
