"""Read access to public profiles."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import Profile
from app.infrastructure.models import ProfileModel


class ProfileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_map_by_ids(self, user_ids: Iterable[str]) -> dict[str, Profile]:
        unique_ids = {user_id for user_id in user_ids if user_id}
        if not unique_ids:
            return {}
        query = self.session.query(ProfileModel).filter(ProfileModel.user_id.in_(unique_ids))
        return {
            model.user_id: Profile(
                user_id=model.user_id,
                display_name=model.display_name,
                avatar_url=model.avatar_url,
            )
            for model in query.all()
        }


__all__ = ["ProfileRepository"]
