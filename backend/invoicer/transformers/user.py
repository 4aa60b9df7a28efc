"""User transformer."""

from typing import Any, Dict

from invoicer.models.account import User
from invoicer.models.entity import EntityType
from invoicer.transformers.base import EntityTransformer


class UserTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.USER

    def transform(self, user: User) -> Dict[str, Any]:
        permissions = [p.strip() for p in (user.permissions or "").split(",") if p.strip()]
        fields = {
            "id": user.public_id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "is_admin": bool(user.is_admin),
            "permissions": permissions,
            **self.get_defaults(user),
        }
        # Users own themselves
        fields["is_owner"] = bool(self.user is not None and user.id == self.user.id)
        return fields
