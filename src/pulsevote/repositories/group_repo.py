"""Data access helpers for groups and membership rows."""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from pulsevote.models import Group, GroupMember, GroupRole, GroupType

from .base import Repository

__all__ = ["GroupRepository"]


class GroupRepository(Repository):
    """CRUD over groups and their members."""

    def list_for_user(self, user_id: str) -> list[Group]:
        """Return groups the user belongs to, with members and profiles loaded."""
        member_of = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        stmt = (
            select(Group)
            .options(selectinload(Group.members).selectinload(GroupMember.profile))
            .where(Group.id.in_(member_of))
            .order_by(Group.created_at.desc())
            .execution_options(populate_existing=True)
        )
        with self._guard("list groups"):
            return list(self.session.scalars(stmt))

    def get(self, group_id: str) -> Group | None:
        """Return one group with its members loaded."""
        stmt = (
            select(Group)
            .options(selectinload(Group.members).selectinload(GroupMember.profile))
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        with self._guard("load group"):
            return self.session.scalars(stmt).first()

    def get_membership(self, group_id: str, user_id: str) -> GroupMember | None:
        """Return the membership row for (group, user) if any."""
        with self._guard("load membership"):
            return self.session.scalars(
                select(GroupMember).where(
                    GroupMember.group_id == group_id, GroupMember.user_id == user_id
                )
            ).first()

    def create(
        self,
        *,
        owner_id: str,
        name: str,
        description: str | None,
        group_type: GroupType,
    ) -> Group:
        """Insert a group together with its owner membership."""
        with self._guard("create group"):
            group = Group(name=name, description=description, type=group_type, owner_id=owner_id)
            group.members = [GroupMember(user_id=owner_id, role=GroupRole.OWNER)]
            self.session.add(group)
            self.session.commit()
            self.session.refresh(group)
            return group

    def add_member(self, group_id: str, user_id: str, role: GroupRole) -> GroupMember:
        """Insert a membership row."""
        with self._guard("add member"):
            member = GroupMember(group_id=group_id, user_id=user_id, role=role)
            self.session.add(member)
            self.session.commit()
            self.session.refresh(member)
            return member

    def remove_member(self, group_id: str, user_id: str) -> None:
        """Delete a membership row."""
        with self._guard("remove member"):
            self.session.execute(
                delete(GroupMember).where(
                    GroupMember.group_id == group_id, GroupMember.user_id == user_id
                )
            )
            self.session.commit()

    def delete(self, group: Group) -> None:
        """Delete a group; members and surveys go with it."""
        with self._guard("delete group"):
            self.session.delete(group)
            self.session.commit()
