"""
Read-only directory of mail groups and users.
Used to resolve selections into the recipient ids and emails a schedule stores.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, List, Optional, Tuple
from loguru import logger

from .normalizer import normalize_email


@dataclass(frozen=True)
class MailGroup:
    """A named group of email addresses"""
    id: str
    name: str
    emails: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MailGroup":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            emails=tuple(data.get("emails") or ()),
        )


@dataclass(frozen=True)
class DirectoryUser:
    """A dashboard user that can receive report mails"""
    id: str
    email: str
    display_name: str = ""
    username: str = ""
    title: str = ""
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DirectoryUser":
        return cls(
            id=str(data["id"]),
            email=data.get("email") or "",
            display_name=data.get("displayName") or "",
            username=data.get("username") or "",
            title=data.get("userTitle") or "",
            is_active=data.get("isActive", True),
        )

    @property
    def label(self) -> str:
        return self.display_name or self.username or self.email


@dataclass
class Directory:
    """Lookup tables for mail groups and users"""
    mail_groups: Dict[str, MailGroup] = field(default_factory=dict)
    users: Dict[str, DirectoryUser] = field(default_factory=dict)

    @classmethod
    def load(cls, file_path: str) -> "Directory":
        """
        Load the directory from a JSON file.

        Args:
            file_path: Path to a file with "mailGroups" and "users" lists

        Returns:
            Loaded directory, empty if the file is missing or unreadable
        """
        if not os.path.exists(file_path):
            logger.info(f"No directory file found at {file_path}")
            return cls()

        try:
            with open(file_path, "r") as f:
                data = json.load(f)

            groups = [MailGroup.from_dict(g) for g in data.get("mailGroups", [])]
            users = [DirectoryUser.from_dict(u) for u in data.get("users", [])]

        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error loading directory: {e}")
            return cls()

        logger.info(f"Loaded {len(groups)} mail groups and {len(users)} users")
        return cls(
            mail_groups={g.id: g for g in groups},
            users={u.id: u for u in users},
        )

    def mail_group(self, group_id: str) -> Optional[MailGroup]:
        return self.mail_groups.get(group_id)

    def mail_group_name(self, group_id: str) -> str:
        """Display name of a group, the raw id when unknown"""
        group = self.mail_groups.get(group_id)
        return group.name if group else group_id

    def user(self, user_id: str) -> Optional[DirectoryUser]:
        return self.users.get(user_id)

    def active_users(self) -> List[DirectoryUser]:
        return [u for u in self.users.values() if u.is_active]

    def resolve_user_emails(self, user_ids: Iterable[str]) -> List[str]:
        """
        Resolve selected users into normalized email addresses.

        Unknown or inactive users and users without an email are skipped.

        Args:
            user_ids: Selected user ids

        Returns:
            Sorted, de-duplicated emails
        """
        emails = set()
        for user_id in user_ids:
            user = self.users.get(user_id)
            if not user or not user.is_active:
                logger.debug(f"Skipping unknown or inactive user {user_id}")
                continue
            email = normalize_email(user.email)
            if email:
                emails.add(email)
        return sorted(emails)

    def user_ids_for_emails(self, emails: Iterable[str]) -> List[str]:
        """Map stored emails back to active user ids, ignoring unknown emails"""
        id_by_email = {}
        for user in self.active_users():
            email = normalize_email(user.email)
            if email:
                id_by_email[email] = user.id

        user_ids = []
        for email in emails:
            user_id = id_by_email.get(normalize_email(email))
            if user_id and user_id not in user_ids:
                user_ids.append(user_id)
        return user_ids

    def search_groups(self, needle: str = "") -> List[MailGroup]:
        needle = needle.strip().lower()
        groups = sorted(self.mail_groups.values(), key=lambda g: g.name.casefold())
        if not needle:
            return groups
        return [g for g in groups if needle in g.name.lower()]

    def search_users(self, needle: str = "") -> List[DirectoryUser]:
        needle = needle.strip().lower()
        users = sorted(self.active_users(), key=lambda u: u.label.casefold())
        if not needle:
            return users
        return [
            u for u in users
            if needle in f"{u.display_name} {u.username} {u.email} {u.title}".strip().lower()
        ]
